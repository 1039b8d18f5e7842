"""
Hierarchy Module
Agent record normalization, search, zones and per-view collapse state.
"""

from .agents import filter_agents, find_agent, normalize_agent, normalize_agents
from .collapse import clear_view, get_collapsed, toggle_collapsed, toggle_view_node
from .zones import ZONE_COLORS, determine_agent_zone

__all__ = [
    "ZONE_COLORS",
    "clear_view",
    "determine_agent_zone",
    "filter_agents",
    "find_agent",
    "get_collapsed",
    "normalize_agent",
    "normalize_agents",
    "toggle_collapsed",
    "toggle_view_node",
]
