"""Shared modules: path helpers, validation, errors."""

from .errors import MalformedHierarchyError
from .graph import validate_hierarchy

__all__ = ["MalformedHierarchyError", "validate_hierarchy"]
