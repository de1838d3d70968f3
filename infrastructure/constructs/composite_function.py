"""Compute function composites: the function plus its subordinate resources.

A composite is plain composition. ``build_composite_function`` runs the
defaulting, resolution, provisioning and permission steps once and returns a
``CompositeFunction`` holding every handle; nothing subclasses
``aws_lambda.Function``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from aws_cdk import aws_ec2 as ec2, aws_iam as iam, aws_kms as kms, aws_lambda as lambda_, aws_logs as logs
from constructs import Construct

from infrastructure.composite.errors import ConfigurationError
from infrastructure.composite.models import CompositeSpec, TriState
from infrastructure.composite.permissions import PermissionBinder, PermissionGrant
from infrastructure.composite.provisioner import ProvisionedSet, ResourceProvisioner
from infrastructure.composite.resolver import ResolvedPlan, ResourceResolver

LOGGER = logging.getLogger(__name__)

LOG_GROUP_ENV_VAR = "LOG_GROUP_NAME"

# Function props owned by the composite; they cannot arrive through extra_props
_MANAGED_PROPS = frozenset(
    {
        "code",
        "environment",
        "environment_encryption",
        "function_name",
        "handler",
        "layers",
        "memory_size",
        "role",
        "runtime",
        "security_groups",
        "timeout",
        "vpc",
        "vpc_subnets",
    }
)


@dataclass(frozen=True)
class CompositeFunction:
    function: lambda_.Function
    log_group: logs.LogGroup
    role: iam.Role
    plan: ResolvedPlan
    grants: Tuple[PermissionGrant, ...]
    network: Optional[ec2.IVpc] = None
    security_groups: Tuple[ec2.ISecurityGroup, ...] = ()
    encryption_key: Optional[kms.IKey] = None

    @property
    def function_arn(self) -> str:
        return self.function.function_arn

    @property
    def log_group_name(self) -> str:
        return self.log_group.log_group_name


def build_composite_function(
    scope: Construct,
    construct_id: str,
    spec: CompositeSpec,
    *,
    resolver: Optional[ResourceResolver] = None,
    binder: Optional[PermissionBinder] = None,
) -> CompositeFunction:
    """Resolve, provision and wire one compute composite under ``scope``."""
    unexpected = sorted(_MANAGED_PROPS.intersection(spec.extra_props))
    if unexpected:
        raise ConfigurationError(f"extra_props may not override composite-managed props: {', '.join(unexpected)}")
    runtime = spec.function_identity.runtime
    if runtime.family is not lambda_.RuntimeFamily.PYTHON:
        raise ConfigurationError(f"Composite functions require a Python runtime, got {runtime.name}")

    plan = (resolver or ResourceResolver()).resolve(spec)
    provisioner = ResourceProvisioner(scope, construct_id)
    provisioned = provisioner.provision(plan)
    grants = (binder or PermissionBinder()).bind(provisioned.role, provisioned)
    helper_layer = provisioner.provision_log_helper_layer(runtime)

    function = lambda_.Function(
        scope,
        construct_id,
        **_function_props(spec, plan, provisioned, [*spec.layers, helper_layer]),
    )
    LOGGER.info("Composite %s provisioned (network=%s)", construct_id, plan.network.kind.value)

    return CompositeFunction(
        function=function,
        log_group=provisioned.log_group,
        role=provisioned.role,
        plan=plan,
        grants=tuple(grants),
        network=provisioned.network,
        security_groups=provisioned.security_groups,
        encryption_key=provisioned.encryption_key,
    )


def _function_props(
    spec: CompositeSpec,
    plan: ResolvedPlan,
    provisioned: ProvisionedSet,
    layers: List[lambda_.ILayerVersion],
) -> Dict[str, Any]:
    identity = plan.config.function_identity
    props: Dict[str, Any] = {
        **spec.extra_props,
        "function_name": identity.name,
        "runtime": identity.runtime,
        "handler": identity.handler,
        "code": identity.code,
        "environment": {
            **spec.environment,
            LOG_GROUP_ENV_VAR: provisioned.log_group.log_group_name,
        },
        "memory_size": plan.config.memory_size,
        "timeout": plan.config.timeout,
        "role": provisioned.role,
        "layers": layers,
    }
    if spec.description:
        props["description"] = spec.description
    if provisioned.encryption_key is not None:
        props["environment_encryption"] = provisioned.encryption_key
    if provisioned.network is not None:
        props["vpc"] = provisioned.network
        props["security_groups"] = list(provisioned.security_groups)
        props["vpc_subnets"] = plan.config.subnet_selection
    return props


def build_function_with_logs(
    scope: Construct, construct_id: str, spec: CompositeSpec, *, resolver: Optional[ResourceResolver] = None
) -> CompositeFunction:
    """Function plus its own log group, never placed in a network."""
    return build_composite_function(
        scope, construct_id, replace(spec, create_network=TriState.DISABLED), resolver=resolver
    )


def build_function_with_network(
    scope: Construct, construct_id: str, spec: CompositeSpec, *, resolver: Optional[ResourceResolver] = None
) -> CompositeFunction:
    """Function placed in a supplied or newly created network, with logging."""
    if spec.create_network is TriState.DISABLED:
        raise ConfigurationError("build_function_with_network requires a network; create_network is disabled")
    return build_composite_function(
        scope, construct_id, replace(spec, create_network=TriState.ENABLED), resolver=resolver
    )


def build_combined_function(
    scope: Construct, construct_id: str, spec: CompositeSpec, *, resolver: Optional[ResourceResolver] = None
) -> CompositeFunction:
    """Logging always, network unless ``create_network`` is disabled."""
    return build_composite_function(scope, construct_id, spec, resolver=resolver)
