"""Composite construct builders (compute function archetypes and secure bucket)."""

from .composite_function import (
    CompositeFunction,
    build_combined_function,
    build_composite_function,
    build_function_with_logs,
    build_function_with_network,
)
from .secure_bucket import BucketSpec, SecureBucket, build_secure_bucket

__all__ = [
    "BucketSpec",
    "CompositeFunction",
    "SecureBucket",
    "build_combined_function",
    "build_composite_function",
    "build_function_with_logs",
    "build_function_with_network",
    "build_secure_bucket",
]
