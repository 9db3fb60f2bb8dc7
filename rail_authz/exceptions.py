"""
Custom exceptions for the authorization engine.

Only administrative operations raise these; read-path checks resolve missing
data to denial instead of raising.
"""

from typing import Optional, Sequence


class AuthorizationError(Exception):
    """Base exception for authorization engine errors."""


class CircularHierarchyError(AuthorizationError):
    """Raised when a role parent link would create, or already forms, a cycle."""

    def __init__(
        self,
        message: str,
        role_id: Optional[str] = None,
        parent_id: Optional[str] = None,
        chain: Optional[Sequence[str]] = None,
    ):
        self.role_id = role_id
        self.parent_id = parent_id
        self.chain = list(chain or [])
        super().__init__(message)


class HierarchyDepthExceededError(AuthorizationError):
    """Raised by hierarchy audits when an ancestor chain exceeds the depth bound."""

    def __init__(self, message: str, role_id: Optional[str] = None, max_depth: int = 0):
        self.role_id = role_id
        self.max_depth = max_depth
        super().__init__(message)


class RoleNotFoundError(AuthorizationError):
    """Raised by administrative role operations that reference an unknown role."""

    def __init__(self, message: str, role_id: Optional[str] = None):
        self.role_id = role_id
        super().__init__(message)


class ProviderError(AuthorizationError):
    """Raised by data providers when the backing store fails."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)


class RuleConfigurationError(AuthorizationError):
    """Raised when an access rule payload cannot be built."""

    def __init__(self, message: str, rule_id: Optional[str] = None):
        self.rule_id = rule_id
        super().__init__(message)


__all__ = [
    "AuthorizationError",
    "CircularHierarchyError",
    "HierarchyDepthExceededError",
    "RoleNotFoundError",
    "ProviderError",
    "RuleConfigurationError",
]
