"""Encrypted storage bucket archetype with blocked public access."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from aws_cdk import RemovalPolicy, aws_kms as kms, aws_s3 as s3
from constructs import Construct

from infrastructure.composite.errors import ConfigurationError
from infrastructure.composite.provisioner import ResourceProvisioner
from infrastructure.composite.resolver import EncryptionAction, resolve_encryption

_MANAGED_PROPS = frozenset(
    {"block_public_access", "bucket_name", "encryption", "encryption_key", "enforce_ssl", "removal_policy", "versioned"}
)


@dataclass(frozen=True)
class BucketSpec:
    bucket_name: Optional[str] = None
    encryption_key: Optional[kms.IKey] = None
    use_managed_encryption_key: bool = False
    enforce_transport_security: bool = True
    removal_policy: RemovalPolicy = RemovalPolicy.RETAIN
    versioned: bool = False
    extra_props: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SecureBucket:
    bucket: s3.Bucket
    encryption: EncryptionAction
    encryption_key: Optional[kms.IKey] = None


def build_secure_bucket(scope: Construct, construct_id: str, spec: Optional[BucketSpec] = None) -> SecureBucket:
    """Declare a bucket encrypted with a resolved key or S3-managed encryption."""
    spec = spec or BucketSpec()
    unexpected = sorted(_MANAGED_PROPS.intersection(spec.extra_props))
    if unexpected:
        raise ConfigurationError(f"extra_props may not override bucket security props: {', '.join(unexpected)}")

    encryption = resolve_encryption(spec.use_managed_encryption_key, spec.encryption_key)
    key = ResourceProvisioner(scope, construct_id).provision_key(
        encryption,
        description=f"KMS key for encrypting the bucket {construct_id}",
        removal_policy=spec.removal_policy,
    )

    bucket = s3.Bucket(
        scope,
        construct_id,
        **spec.extra_props,
        bucket_name=spec.bucket_name,
        versioned=spec.versioned,
        block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
        encryption=s3.BucketEncryption.KMS if key is not None else s3.BucketEncryption.S3_MANAGED,
        encryption_key=key,
        enforce_ssl=spec.enforce_transport_security,
        removal_policy=spec.removal_policy,
    )
    return SecureBucket(bucket=bucket, encryption=encryption, encryption_key=key)
