"""Service stack wiring composites to caller-owned resources."""

from pathlib import Path

from aws_cdk import (
    Stack,
    aws_dynamodb as dynamodb,
    aws_lambda as _lambda,
    RemovalPolicy,
    CfnOutput,
    Duration,
)
from constructs import Construct

from infrastructure.composite import CompositeSpec, FunctionIdentity, ResourceResolver, TriState, retention_from_days
from infrastructure.config.types import EnvironmentConfig
from infrastructure.constructs import BucketSpec, build_combined_function, build_secure_bucket

LOG_PROBE_PATH = Path(__file__).resolve().parents[2] / "src" / "lambda" / "functions" / "log_probe"


class ServiceStack(Stack):
    """Combined compute composite plus the table and bucket it works against."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: str,
        config: EnvironmentConfig,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = environment
        self.config = config
        self.removal_policy = self._resolve_removal_policy()

        self.table = self._create_table()
        self.artifacts = self._create_artifacts_bucket()
        self.composite = self._create_probe_function()

        # The table is not part of the composite; the caller owns this grant
        self.table.grant_read_write_data(self.composite.function)

        self._create_outputs()

    def _resolve_removal_policy(self) -> RemovalPolicy:
        cfg_policy = str(self.config.get("removal_policy", "") or "").lower()
        if cfg_policy == "retain":
            return RemovalPolicy.RETAIN
        if cfg_policy == "destroy":
            return RemovalPolicy.DESTROY
        return RemovalPolicy.RETAIN if self.env_name == "prod" else RemovalPolicy.DESTROY

    def _create_table(self) -> dynamodb.Table:
        """Provision the contacts table the function reads and writes."""
        return dynamodb.Table(
            self,
            "ContactsTable",
            table_name=str(self.config.get("table_name") or f"{self.env_name}-contacts"),
            partition_key=dynamodb.Attribute(name="id", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=self.removal_policy,
        )

    def _create_artifacts_bucket(self):
        bucket_name = str(self.config.get("artifacts_bucket_name") or "").strip() or None
        return build_secure_bucket(
            self,
            "ArtifactsBucket",
            BucketSpec(
                bucket_name=bucket_name,
                use_managed_encryption_key=bool(self.config.get("use_customer_managed_key", False)),
                removal_policy=self.removal_policy,
                versioned=True,
            ),
        )

    def _create_probe_function(self):
        identity = FunctionIdentity(
            name=self.config.get("function_name") or f"{self.env_name}-log-probe",
            code=_lambda.Code.from_asset(str(LOG_PROBE_PATH)),
            handler="handler.main",
        )
        spec = CompositeSpec(
            function_identity=identity,
            create_network=TriState.from_flag(self.config.get("create_vpc")),
            log_retention=retention_from_days(self.config.get("log_retention_days")),
            memory_size=self.config.get("lambda_memory"),
            timeout=Duration.seconds(int(self.config.get("lambda_timeout", 30))),
            use_managed_encryption_key=bool(self.config.get("use_customer_managed_key", False)),
            environment={
                "ENVIRONMENT": self.env_name,
                "TABLE_NAME": self.table.table_name,
                "ARTIFACTS_BUCKET": self.artifacts.bucket.bucket_name,
            },
            description=f"Log probe function ({self.env_name})",
        )
        resolver = ResourceResolver(strict=bool(self.config.get("strict_network_config", False)))
        return build_combined_function(self, "LogProbe", spec, resolver=resolver)

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs."""
        CfnOutput(
            self,
            "LogProbeFunctionArn",
            value=self.composite.function_arn,
            description="ARN of the log probe Lambda function",
        )

        CfnOutput(
            self,
            "LogProbeLogGroupName",
            value=self.composite.log_group_name,
            description="CloudWatch log group owned by the log probe function",
        )

        CfnOutput(
            self,
            "ArtifactsBucketName",
            value=self.artifacts.bucket.bucket_name,
            description="Encrypted artifacts S3 bucket name",
        )

        CfnOutput(
            self,
            "ContactsTableName",
            value=self.table.table_name,
            description="Contacts DynamoDB table name",
        )
