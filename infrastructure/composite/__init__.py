"""Resolution, provisioning and permission binding for serverless composites."""

from .defaults import EffectiveConfig, resolve_defaults, retention_from_days
from .errors import CompositeError, ConfigurationError, ProvisioningError
from .models import CompositeSpec, FunctionIdentity, TriState
from .permissions import PermissionBinder, PermissionGrant
from .provisioner import ProvisionedSet, ResourceProvisioner
from .resolver import ActionKind, EncryptionKind, ResolvedPlan, ResourceResolver

__all__ = [
    "ActionKind",
    "CompositeError",
    "CompositeSpec",
    "ConfigurationError",
    "EffectiveConfig",
    "EncryptionKind",
    "FunctionIdentity",
    "PermissionBinder",
    "PermissionGrant",
    "ProvisionedSet",
    "ProvisioningError",
    "ResolvedPlan",
    "ResourceProvisioner",
    "ResourceResolver",
    "TriState",
    "resolve_defaults",
    "retention_from_days",
]
