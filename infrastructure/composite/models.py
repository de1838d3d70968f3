"""Caller-facing configuration contracts for composite resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple

from aws_cdk import Duration, aws_ec2 as ec2, aws_kms as kms, aws_lambda as lambda_, aws_logs as logs


class TriState(Enum):
    """Explicit form of an optional boolean flag."""

    UNSET = "unset"
    ENABLED = "enabled"
    DISABLED = "disabled"

    @classmethod
    def from_flag(cls, value: Optional[bool]) -> "TriState":
        if value is None:
            return cls.UNSET
        return cls.ENABLED if value else cls.DISABLED


@dataclass(frozen=True)
class FunctionIdentity:
    """Name, runtime, handler and code of the primary compute function."""

    code: lambda_.Code
    name: Optional[str] = None
    runtime: lambda_.Runtime = lambda_.Runtime.PYTHON_3_12
    handler: str = "handler.main"


@dataclass(frozen=True)
class CompositeSpec:
    """Partially-specified configuration for one compute composite.

    Only the fields the resolver decides on are modelled explicitly. Anything
    else goes into ``extra_props`` and is forwarded untouched to the function.
    """

    function_identity: FunctionIdentity
    network: Optional[ec2.IVpc] = None
    security_groups: Optional[Sequence[ec2.ISecurityGroup]] = None
    subnet_selection: Optional[ec2.SubnetSelection] = None
    create_network: TriState = TriState.UNSET
    log_retention: Optional[logs.RetentionDays] = None
    memory_size: Optional[int] = None
    timeout: Optional[Duration] = None
    encryption_key: Optional[kms.IKey] = None
    use_managed_encryption_key: bool = False
    environment: Mapping[str, str] = field(default_factory=dict)
    layers: Sequence[lambda_.ILayerVersion] = ()
    description: Optional[str] = None
    extra_props: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.create_network, bool) or self.create_network is None:
            object.__setattr__(self, "create_network", TriState.from_flag(self.create_network))
        if self.security_groups is not None:
            object.__setattr__(self, "security_groups", unique_handles(self.security_groups))


def unique_handles(handles: Sequence[Any]) -> Tuple[Any, ...]:
    """Return handles without duplicates (by identity) while preserving order."""
    seen: set[int] = set()
    result: list[Any] = []
    for handle in handles:
        if id(handle) in seen:
            continue
        seen.add(id(handle))
        result.append(handle)
    return tuple(result)
