"""Attach the minimal access grants a composite's execution role needs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from aws_cdk import aws_iam as iam

from infrastructure.composite.provisioner import ProvisionedSet

LOGGER = logging.getLogger(__name__)

LOG_WRITE_ACTIONS: Tuple[str, ...] = (
    "logs:DescribeLogGroups",
    "logs:DescribeLogStreams",
    "logs:GetLogEvents",
    "logs:FilterLogEvents",
    "logs:PutLogEvents",
    "logs:CreateLogStream",
)

VPC_ACCESS_MANAGED_POLICY = "service-role/AWSLambdaVPCAccessExecutionRole"

# Actions carried by the VPC access managed policy
NETWORK_INTERFACE_ACTIONS: Tuple[str, ...] = (
    "ec2:CreateNetworkInterface",
    "ec2:DescribeNetworkInterfaces",
    "ec2:DeleteNetworkInterface",
    "ec2:AssignPrivateIpAddresses",
    "ec2:UnassignPrivateIpAddresses",
)

KEY_DECRYPT_ACTIONS: Tuple[str, ...] = ("kms:Decrypt",)


@dataclass(frozen=True)
class PermissionGrant:
    """One grant to the execution role: an inline statement or a managed policy."""

    sid: str
    actions: Tuple[str, ...]
    resources: Tuple[str, ...]
    managed_policy_name: Optional[str] = None

    def apply(self, role: iam.IRole) -> None:
        if self.managed_policy_name:
            role.add_managed_policy(iam.ManagedPolicy.from_aws_managed_policy_name(self.managed_policy_name))
            return
        role.add_to_principal_policy(
            iam.PolicyStatement(
                sid=self.sid,
                effect=iam.Effect.ALLOW,
                actions=list(self.actions),
                resources=list(self.resources),
            )
        )


def log_write_grant(log_group_arn: str) -> PermissionGrant:
    """Log access scoped to the group and its streams (``:*`` sub-resource)."""
    return PermissionGrant(
        sid="LogGroupAccess",
        actions=LOG_WRITE_ACTIONS,
        resources=(log_group_arn, f"{log_group_arn}:*"),
    )


def network_access_grant() -> PermissionGrant:
    return PermissionGrant(
        sid="NetworkInterfaceAccess",
        actions=NETWORK_INTERFACE_ACTIONS,
        resources=("*",),
        managed_policy_name=VPC_ACCESS_MANAGED_POLICY,
    )


def key_decrypt_grant(key_arn: str) -> PermissionGrant:
    return PermissionGrant(sid="EnvironmentKeyDecrypt", actions=KEY_DECRYPT_ACTIONS, resources=(key_arn,))


class PermissionBinder:
    """Bind grants by resource presence.

    Table access is not handled here: the table belongs to the caller, who
    grants it on the same role (e.g. ``table.grant_read_write_data(function)``).
    """

    def grants_for(self, provisioned: ProvisionedSet) -> List[PermissionGrant]:
        grants = [log_write_grant(provisioned.log_group.log_group_arn)]
        if provisioned.network is not None:
            grants.append(network_access_grant())
        if provisioned.encryption_key is not None:
            grants.append(key_decrypt_grant(provisioned.encryption_key.key_arn))
        return grants

    def bind(self, role: iam.IRole, provisioned: ProvisionedSet) -> List[PermissionGrant]:
        grants = self.grants_for(provisioned)
        for grant in grants:
            grant.apply(role)
        LOGGER.info("Bound %d grant(s) to execution role: %s", len(grants), ", ".join(g.sid for g in grants))
        return grants
