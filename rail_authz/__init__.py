"""
Rail Authz - authorization resolution engine for Django projects.

Three independent question shapes are answered by the engine:

- role permissions resolved through a single-parent role hierarchy
- resource-scoped permissions inherited along parent/child resources
- attribute-based access rules evaluated against user/resource attributes

Quick Start:
    >>> from rail_authz import get_coordinator
    >>> coordinator = get_coordinator()
    >>> coordinator.has_role_permission("user-1", "project.read")
    >>> coordinator.has_resource_permission("user-1", "task.update", "task", "t-42")
    >>> coordinator.check_rule("document.read", {"user": {...}, "resource": {...}})
"""

__version__ = "0.1.0"


def get_coordinator():
    """Return the process-wide permission coordinator (lazy import)."""
    from .coordinator import get_coordinator as _get_coordinator

    return _get_coordinator()


__all__ = ["__version__", "get_coordinator"]
