"""Decide, per optional subsystem, whether to reuse, create or omit a resource.

The resolver is pure decision logic over the shape of a ``CompositeSpec``. It
never touches a construct scope, so plans can be computed and inspected before
anything is declared.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from aws_cdk import aws_ec2 as ec2, aws_kms as kms, aws_logs as logs

from infrastructure.composite.defaults import EffectiveConfig, resolve_defaults
from infrastructure.composite.errors import ConfigurationError
from infrastructure.composite.models import CompositeSpec, TriState

LOGGER = logging.getLogger(__name__)


class ActionKind(Enum):
    REUSE = "reuse"
    CREATE = "create"
    SKIP = "skip"


class EncryptionKind(Enum):
    REUSE_KEY = "reuse_key"
    CREATE_KEY = "create_key"
    PROVIDER_MANAGED = "provider_managed"


@dataclass(frozen=True)
class NetworkAction:
    kind: ActionKind
    vpc: Optional[ec2.IVpc] = None

    @classmethod
    def reuse(cls, vpc: ec2.IVpc) -> "NetworkAction":
        return cls(ActionKind.REUSE, vpc)

    @classmethod
    def create(cls) -> "NetworkAction":
        return cls(ActionKind.CREATE)

    @classmethod
    def skip(cls) -> "NetworkAction":
        return cls(ActionKind.SKIP)


@dataclass(frozen=True)
class SecurityGroupAction:
    kind: ActionKind
    groups: Tuple[ec2.ISecurityGroup, ...] = ()

    @classmethod
    def reuse(cls, groups: Sequence[ec2.ISecurityGroup]) -> "SecurityGroupAction":
        return cls(ActionKind.REUSE, tuple(groups))

    @classmethod
    def create(cls) -> "SecurityGroupAction":
        return cls(ActionKind.CREATE)

    @classmethod
    def skip(cls) -> "SecurityGroupAction":
        return cls(ActionKind.SKIP)


@dataclass(frozen=True)
class EncryptionAction:
    kind: EncryptionKind
    key: Optional[kms.IKey] = None


@dataclass(frozen=True)
class LogAction:
    """The log group is always created and owned by the composite."""

    log_group_name: Optional[str]
    retention: logs.RetentionDays


@dataclass(frozen=True)
class ResolvedPlan:
    network: NetworkAction
    security_groups: SecurityGroupAction
    encryption: EncryptionAction
    log: LogAction
    config: EffectiveConfig

    def __post_init__(self) -> None:
        if self.network.kind is ActionKind.SKIP and self.security_groups.kind is not ActionKind.SKIP:
            raise ConfigurationError("Security groups require a network; network action is SKIP")

    @property
    def has_network(self) -> bool:
        return self.network.kind is not ActionKind.SKIP


def resolve_network(create_network: TriState, network: Optional[ec2.IVpc]) -> NetworkAction:
    """Explicit opt-out wins, then a supplied network, then a new one."""
    if create_network is TriState.DISABLED:
        return NetworkAction.skip()
    if network is not None:
        return NetworkAction.reuse(network)
    return NetworkAction.create()


def resolve_security_groups(
    network: NetworkAction, security_groups: Optional[Sequence[ec2.ISecurityGroup]]
) -> SecurityGroupAction:
    if network.kind is ActionKind.SKIP:
        return SecurityGroupAction.skip()
    if security_groups:
        return SecurityGroupAction.reuse(security_groups)
    return SecurityGroupAction.create()


def resolve_encryption(use_managed_key: bool, encryption_key: Optional[kms.IKey]) -> EncryptionAction:
    if use_managed_key and encryption_key is None:
        return EncryptionAction(EncryptionKind.CREATE_KEY)
    if encryption_key is not None:
        return EncryptionAction(EncryptionKind.REUSE_KEY, encryption_key)
    return EncryptionAction(EncryptionKind.PROVIDER_MANAGED)


class ResourceResolver:
    """Map a ``CompositeSpec`` onto a ``ResolvedPlan``.

    With ``strict=True`` a disabled network combined with a supplied network or
    security groups is rejected instead of being silently ignored.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self.strict = strict

    def resolve(self, spec: CompositeSpec) -> ResolvedPlan:
        self._check_network_opt_out(spec)

        config = resolve_defaults(spec)
        network = resolve_network(spec.create_network, spec.network)
        security_groups = resolve_security_groups(network, spec.security_groups)
        encryption = resolve_encryption(spec.use_managed_encryption_key, spec.encryption_key)

        plan = ResolvedPlan(
            network=network,
            security_groups=security_groups,
            encryption=encryption,
            log=LogAction(log_group_name=config.log_group_name, retention=config.log_retention),
            config=config,
        )
        LOGGER.debug(
            "Resolved plan for %s: network=%s security_groups=%s encryption=%s",
            config.function_identity.name or "<unnamed>",
            network.kind.value,
            security_groups.kind.value,
            encryption.kind.value,
        )
        return plan

    def _check_network_opt_out(self, spec: CompositeSpec) -> None:
        if spec.create_network is not TriState.DISABLED:
            return
        ignored = []
        if spec.network is not None:
            ignored.append("network")
        if spec.security_groups:
            ignored.append("security_groups")
        if not ignored:
            return
        message = f"create_network is disabled; supplied {' and '.join(ignored)} will be ignored"
        if self.strict:
            raise ConfigurationError(message)
        LOGGER.warning(message)
