"""Pydantic request/response schemas for API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AgentSnapshotRequest(BaseModel):
    """Replace the agent snapshot of a hierarchy. Agents may be snake_case rows or camelCase records."""
    model_config = ConfigDict(populate_by_name=True)
    hierarchy_id: str = Field(default="default", alias="hierarchyId")
    agents: List[Dict[str, Any]] = Field(default_factory=list)


class LayoutRequest(BaseModel):
    """Stateless layout: caller supplies agents and collapse set."""
    model_config = ConfigDict(populate_by_name=True)
    agents: List[Dict[str, Any]] = Field(default_factory=list)
    collapsed_nodes: List[str] = Field(default_factory=list, alias="collapsedNodes")
    view_mode: Optional[str] = Field(default=None, alias="viewMode")
    horizontal_spacing: Optional[float] = Field(default=None, alias="horizontalSpacing")
    vertical_spacing: Optional[float] = Field(default=None, alias="verticalSpacing")
    query: Optional[str] = Field(default=None, alias="q")


class ToggleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    hierarchy_id: str = Field(default="default", alias="hierarchyId")
    agent_id: str = Field(..., alias="agentId")
    view_mode: Optional[str] = Field(default=None, alias="viewMode")
