"""Development environment configuration."""

import os

from infrastructure.config.types import EnvironmentConfig

dev_config: EnvironmentConfig = {
    "account_id": os.environ.get("CDK_DEFAULT_ACCOUNT"),
    "region": "ap-northeast-2",
    "function_name": "dev-log-probe",
    "lambda_memory": 128,
    "lambda_timeout": 30,
    "log_retention_days": 7,
    # Keep dev cheap: no NAT gateway
    "create_vpc": False,
    "use_customer_managed_key": False,
    "strict_network_config": False,
    "removal_policy": "destroy",
    "table_name": "dev-contacts",
    "tags": {
        "Environment": "dev",
        "Project": "ServerlessComposites",
        "Owner": "PlatformTeam",
    },
}
