"""Defaulting policy for omitted composite configuration fields."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from aws_cdk import Duration, aws_ec2 as ec2, aws_logs as logs

from infrastructure.composite.errors import ConfigurationError
from infrastructure.composite.models import CompositeSpec, FunctionIdentity

DEFAULT_RETENTION = logs.RetentionDays.ONE_WEEK
DEFAULT_MEMORY_MB = 128
DEFAULT_TIMEOUT_SECONDS = 30
LOG_GROUP_PREFIX = "/aws/lambda/"

_RETENTION_BY_DAYS = {
    1: logs.RetentionDays.ONE_DAY,
    3: logs.RetentionDays.THREE_DAYS,
    5: logs.RetentionDays.FIVE_DAYS,
    7: logs.RetentionDays.ONE_WEEK,
    14: logs.RetentionDays.TWO_WEEKS,
    30: logs.RetentionDays.ONE_MONTH,
    60: logs.RetentionDays.TWO_MONTHS,
    90: logs.RetentionDays.THREE_MONTHS,
    180: logs.RetentionDays.SIX_MONTHS,
    365: logs.RetentionDays.ONE_YEAR,
}


@dataclass(frozen=True)
class EffectiveConfig:
    """Values in effect after defaulting; safe to feed back into the policy."""

    function_identity: FunctionIdentity
    log_retention: logs.RetentionDays
    memory_size: int
    timeout: Duration
    subnet_selection: ec2.SubnetSelection
    log_group_name: Optional[str]


def default_subnet_selection() -> ec2.SubnetSelection:
    return ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS)


def log_group_name_for(identity: FunctionIdentity) -> Optional[str]:
    """Return the log group name for a named function, ``None`` lets the provider pick."""
    name = str(identity.name or "").strip()
    if not name:
        return None
    return f"{LOG_GROUP_PREFIX}{name}"


def resolve_defaults(spec: Union[CompositeSpec, EffectiveConfig]) -> EffectiveConfig:
    """Fill omitted fields, first non-empty value wins."""
    identity = spec.function_identity
    log_group_name = getattr(spec, "log_group_name", None) or log_group_name_for(identity)
    return EffectiveConfig(
        function_identity=identity,
        log_retention=spec.log_retention or DEFAULT_RETENTION,
        memory_size=spec.memory_size or DEFAULT_MEMORY_MB,
        timeout=spec.timeout or Duration.seconds(DEFAULT_TIMEOUT_SECONDS),
        subnet_selection=spec.subnet_selection or default_subnet_selection(),
        log_group_name=log_group_name,
    )


def retention_from_days(days: Optional[int]) -> logs.RetentionDays:
    """Map configured retention days onto a supported ``RetentionDays`` value."""
    if days is None:
        return DEFAULT_RETENTION
    try:
        return _RETENTION_BY_DAYS[int(days)]
    except (KeyError, TypeError, ValueError):
        supported = ", ".join(str(value) for value in sorted(_RETENTION_BY_DAYS))
        raise ConfigurationError(f"Unsupported log retention days: {days!r} (supported: {supported})") from None
