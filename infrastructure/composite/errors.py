"""Exception types raised while resolving and provisioning composites."""

from __future__ import annotations


class CompositeError(Exception):
    """Base error for composite resolution and provisioning."""


class ConfigurationError(CompositeError, ValueError):
    """Raised when caller configuration cannot be resolved."""


class ProvisioningError(CompositeError, RuntimeError):
    """Raised when a resource creation call fails."""

    def __init__(self, resource: str, construct_id: str, reason: str) -> None:
        super().__init__(f"Failed to provision {resource} '{construct_id}': {reason}")
        self.resource = resource
        self.construct_id = construct_id
        self.reason = reason
