"""Production environment configuration."""

import os

from infrastructure.config.types import EnvironmentConfig

prod_config: EnvironmentConfig = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "ap-northeast-2",
    "function_name": "prod-log-probe",
    "lambda_memory": 512,
    "lambda_timeout": 60,
    "log_retention_days": 30,
    "create_vpc": None,
    "use_customer_managed_key": True,
    "strict_network_config": True,
    "removal_policy": "retain",
    "table_name": "prod-contacts",
    "tags": {
        "Environment": "prod",
        "Project": "ServerlessComposites",
        "Owner": "PlatformTeam",
        "CostCenter": "Engineering",
    },
}
