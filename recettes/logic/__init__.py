"""Core business logic layer.

Subpackages:
- shopping: quantity resolution and shopping-list aggregation
- planning: plan store, debounced persistence and remote sync session
"""
__all__ = ["shopping", "planning"]
