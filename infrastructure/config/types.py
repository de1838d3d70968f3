"""Typed configuration contracts for environment-specific settings."""

from __future__ import annotations

from typing import Dict, NotRequired, Required, TypedDict


class EnvironmentConfig(TypedDict, total=False):
    """Strongly-typed environment configuration contract."""

    region: Required[str]
    account_id: NotRequired[str | None]

    function_name: NotRequired[str]
    lambda_memory: NotRequired[int]
    lambda_timeout: NotRequired[int]
    log_retention_days: NotRequired[int]

    # None leaves the network decision to the resolver (create unless supplied)
    create_vpc: NotRequired[bool | None]
    use_customer_managed_key: NotRequired[bool]
    strict_network_config: NotRequired[bool]

    removal_policy: NotRequired[str]
    table_name: NotRequired[str]
    artifacts_bucket_name: NotRequired[str]

    tags: NotRequired[Dict[str, str]]
