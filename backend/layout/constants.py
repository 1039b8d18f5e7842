"""
Spacing per display density mode for the hierarchy tree.
Positions are slot based: one slot = one horizontal spacing unit.
"""

from typing import Any, Dict, Optional, Tuple

DEFAULT_VIEW_MODE = "standard"

# view mode -> (horizontal spacing, vertical spacing)
VIEW_MODE_SPACING: Dict[str, Tuple[float, float]] = {
    "standard": (240, 260),
    "heatmap": (120, 120),
}

# view mode -> node renderer type
VIEW_MODE_NODE_TYPE: Dict[str, str] = {
    "standard": "flippable",
    "heatmap": "heatmap",
}

DEFAULT_HORIZONTAL_SPACING, DEFAULT_VERTICAL_SPACING = VIEW_MODE_SPACING[DEFAULT_VIEW_MODE]


def normalize_view_mode(view_mode: Optional[str]) -> str:
    return view_mode if view_mode in VIEW_MODE_SPACING else DEFAULT_VIEW_MODE


def _positive(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"{name} must be a positive number, got {value!r}")
    return value


def resolve_spacing(
    view_mode: Optional[str] = None,
    horizontal_spacing: Optional[float] = None,
    vertical_spacing: Optional[float] = None,
) -> Tuple[float, float]:
    """Spacing for a view mode; explicit values override the mode defaults."""
    h, v = VIEW_MODE_SPACING[normalize_view_mode(view_mode)]
    if horizontal_spacing is not None:
        h = _positive("horizontalSpacing", horizontal_spacing)
    if vertical_spacing is not None:
        v = _positive("verticalSpacing", vertical_spacing)
    return h, v
