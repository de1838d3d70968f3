"""Staging environment configuration."""

import os

from infrastructure.config.types import EnvironmentConfig

staging_config: EnvironmentConfig = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "ap-northeast-2",
    "function_name": "staging-log-probe",
    "lambda_memory": 256,
    "lambda_timeout": 60,
    "log_retention_days": 14,
    "create_vpc": None,
    "use_customer_managed_key": False,
    "strict_network_config": True,
    "removal_policy": "destroy",
    "table_name": "staging-contacts",
    "tags": {
        "Environment": "staging",
        "Project": "ServerlessComposites",
        "Owner": "PlatformTeam",
    },
}
