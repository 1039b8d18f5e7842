"""Layout module - computes positioned hierarchy trees for rendering."""

from .constants import resolve_spacing
from .hierarchy_layout import compute_hierarchy_layout

__all__ = ["compute_hierarchy_layout", "resolve_spacing"]
