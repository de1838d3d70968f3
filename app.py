#!/usr/bin/env python3
"""
Serverless Composites CDK App
Compute and storage composites resolved from partially-specified configuration.
"""

import aws_cdk as cdk

from infrastructure.stacks.service_stack import ServiceStack

# Configuration
from infrastructure.config.environments import get_environment_config

app = cdk.App()

# Get environment configuration
environment = app.node.try_get_context("environment") or "dev"
config = get_environment_config(environment)

# CDK environment (account/region)
cdk_env = cdk.Environment(account=config.get("account_id"), region=config.get("region", "ap-northeast-2"))

stack_prefix = f"Composites-{environment}"

service_stack = ServiceStack(
    app,
    f"{stack_prefix}-Service",
    environment=environment,
    config=config,
    env=cdk_env,
)

# ========================================
# TAGGING STRATEGY
# ========================================

cdk.Tags.of(app).add("Environment", environment)
cdk.Tags.of(app).add("ManagedBy", "CDK")
for key, value in (config.get("tags") or {}).items():
    cdk.Tags.of(service_stack).add(key, value)

app.synth()
