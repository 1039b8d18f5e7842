"""
Domain errors for hierarchy input handling.

MalformedHierarchyError is raised before any layout work starts so routes can
return 422 with the offending agent instead of a partial tree.
"""

from typing import Optional


class MalformedHierarchyError(ValueError):
    """Raised when agent paths do not nest under their ancestors (or form a cycle)."""

    def __init__(self, message: str, agent_id: Optional[str] = None) -> None:
        self.message = message
        self.agent_id = agent_id
        super().__init__(message)
