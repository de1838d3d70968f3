"""Turn a ``ResolvedPlan`` into concrete construct handles.

This is the only part of the composite pipeline with side effects: every
CREATE action declares exactly one construct in the given scope, REUSE actions
hand the caller's handle back unchanged and SKIP leaves the field empty.
Construct ids derive from the composite id, so synthesizing the same identity
again yields the same logical resources.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple, TypeVar

from aws_cdk import RemovalPolicy, Stack, aws_ec2 as ec2, aws_iam as iam, aws_kms as kms, aws_lambda as lambda_, aws_logs as logs
from aws_cdk.aws_lambda_python_alpha import BundlingOptions, PythonLayerVersion
from constructs import Construct

from infrastructure.composite.errors import ProvisioningError
from infrastructure.composite.resolver import (
    ActionKind,
    EncryptionAction,
    EncryptionKind,
    LogAction,
    NetworkAction,
    ResolvedPlan,
    SecurityGroupAction,
)

LOGGER = logging.getLogger(__name__)

LOG_HELPER_LAYER_PATH = Path(__file__).resolve().parents[2] / "src" / "lambda" / "layers" / "log_helper"

T = TypeVar("T")


@dataclass(frozen=True)
class ProvisionedSet:
    log_group: logs.LogGroup
    role: iam.Role
    network: Optional[ec2.IVpc] = None
    security_groups: Tuple[ec2.ISecurityGroup, ...] = ()
    encryption_key: Optional[kms.IKey] = None


class ResourceProvisioner:
    """Declare the resources a plan marks for creation under ``scope``."""

    def __init__(self, scope: Construct, construct_id: str) -> None:
        self.scope = scope
        self.construct_id = construct_id

    def provision(self, plan: ResolvedPlan) -> ProvisionedSet:
        network = self.provision_network(plan.network)
        security_groups = self.provision_security_groups(plan.security_groups, network)
        encryption_key = self.provision_key(plan.encryption)
        log_group = self.provision_log_group(plan.log)
        role = self.provision_role(plan.config.function_identity.name)

        return ProvisionedSet(
            log_group=log_group,
            role=role,
            network=network,
            security_groups=security_groups,
            encryption_key=encryption_key,
        )

    def provision_network(self, action: NetworkAction) -> Optional[ec2.IVpc]:
        if action.kind is ActionKind.SKIP:
            return None
        if action.kind is ActionKind.REUSE:
            return action.vpc
        return self._create(
            "network",
            f"{self.construct_id}-Vpc",
            lambda cid: ec2.Vpc(
                self.scope,
                cid,
                max_azs=2,
                nat_gateways=1,
                subnet_configuration=[
                    ec2.SubnetConfiguration(
                        name="private-subnet",
                        subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                        cidr_mask=24,
                    ),
                    ec2.SubnetConfiguration(
                        name="public-subnet",
                        subnet_type=ec2.SubnetType.PUBLIC,
                        cidr_mask=24,
                    ),
                ],
            ),
        )

    def provision_security_groups(
        self, action: SecurityGroupAction, network: Optional[ec2.IVpc]
    ) -> Tuple[ec2.ISecurityGroup, ...]:
        if action.kind is ActionKind.SKIP:
            return ()
        if action.kind is ActionKind.REUSE:
            return action.groups
        if network is None:
            raise ProvisioningError("security group", f"{self.construct_id}-SecurityGroup", "no network resolved")
        group = self._create(
            "security group",
            f"{self.construct_id}-SecurityGroup",
            lambda cid: ec2.SecurityGroup(
                self.scope,
                cid,
                vpc=network,
                description=f"Security group for Lambda function {self.construct_id}",
                allow_all_outbound=True,
            ),
        )
        return (group,)

    def provision_key(
        self,
        action: EncryptionAction,
        *,
        description: Optional[str] = None,
        removal_policy: RemovalPolicy = RemovalPolicy.DESTROY,
    ) -> Optional[kms.IKey]:
        if action.kind is EncryptionKind.PROVIDER_MANAGED:
            return None
        if action.kind is EncryptionKind.REUSE_KEY:
            return action.key
        return self._create(
            "encryption key",
            f"{self.construct_id}-Key",
            lambda cid: kms.Key(
                self.scope,
                cid,
                enable_key_rotation=True,
                description=description or f"KMS key for {self.construct_id}",
                alias=f"alias/{Stack.of(self.scope).stack_name}-{self.construct_id}-key",
                removal_policy=removal_policy,
            ),
        )

    def provision_log_group(self, action: LogAction) -> logs.LogGroup:
        return self._create(
            "log group",
            f"{self.construct_id}-LogGroup",
            lambda cid: logs.LogGroup(
                self.scope,
                cid,
                log_group_name=action.log_group_name,
                retention=action.retention,
                removal_policy=RemovalPolicy.DESTROY,
            ),
        )

    def provision_role(self, function_name: Optional[str]) -> iam.Role:
        return self._create(
            "execution role",
            f"{self.construct_id}-LambdaRole",
            lambda cid: iam.Role(
                self.scope,
                cid,
                assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
                description=f"Role for {function_name or self.construct_id} Lambda function",
                managed_policies=[
                    iam.ManagedPolicy.from_aws_managed_policy_name("service-role/AWSLambdaBasicExecutionRole"),
                ],
            ),
        )

    def provision_log_helper_layer(
        self, runtime: lambda_.Runtime = lambda_.Runtime.PYTHON_3_12
    ) -> lambda_.LayerVersion:
        """Layer carrying the runtime log helper and its requirements.txt dependencies.

        Dependencies are bundled for ``runtime`` only; compiled wheels such as
        pydantic_core are tied to one interpreter version.
        """
        return self._create(
            "log helper layer",
            f"{self.construct_id}-LogHelperLayer",
            lambda cid: PythonLayerVersion(
                self.scope,
                cid,
                entry=str(LOG_HELPER_LAYER_PATH),
                description="Helper functions for logging",
                compatible_runtimes=[runtime],
                bundling=BundlingOptions(
                    command=[
                        "bash",
                        "-c",
                        "set -euxo pipefail; "
                        "mkdir -p /asset-output/python; "
                        "cp -R /asset-input/python/. /asset-output/python/; "
                        "if [ -f requirements.txt ]; then pip install -q -r requirements.txt -t /asset-output/python; fi",
                    ],
                    asset_excludes=["tests", "__pycache__", "*.pyc"],
                ),
            ),
        )

    def _create(self, resource: str, construct_id: str, factory: Callable[[str], T]) -> T:
        LOGGER.info("Creating %s %s", resource, construct_id)
        try:
            return factory(construct_id)
        except RuntimeError as exc:
            # jsii surfaces construct validation failures as RuntimeError
            raise ProvisioningError(resource, construct_id, str(exc)) from exc
