"""
Collapse state
Per-view set of agent ids whose downline is hidden. In memory only: a view
starts fully expanded and nothing is written to db.
"""

from typing import Dict, Iterable, Optional, Set

_view_collapsed: Dict[str, Set[str]] = {}


def toggle_collapsed(collapsed: Optional[Iterable[str]], agent_id: str) -> Set[str]:
    """Return a new set with agent_id added if absent, removed if present."""
    result = set(collapsed or ())
    if agent_id in result:
        result.discard(agent_id)
    else:
        result.add(agent_id)
    return result


def get_collapsed(view_id: str) -> Set[str]:
    return set(_view_collapsed.get(view_id, ()))


def toggle_view_node(view_id: str, agent_id: str) -> Set[str]:
    """Flip agent_id for the view and return the new collapsed set."""
    updated = toggle_collapsed(_view_collapsed.get(view_id), agent_id)
    _view_collapsed[view_id] = updated
    return set(updated)


def clear_view(view_id: str) -> None:
    if view_id in _view_collapsed:
        del _view_collapsed[view_id]


def clear_all_views() -> None:
    _view_collapsed.clear()
