"""
Subtree-width tree layout for the agent hierarchy (materialized paths).

Each leaf (or collapsed node) takes one horizontal slot; a parent is centered
over the slots of its children. Roots are placed left to right with one empty
slot between them. y comes straight from depth.

Pure function of (agents, collapsed set, spacing): recomputed in full on every
change, no caching between calls.
"""

from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from hierarchy.zones import zone_color
from shared.graph import ancestor_paths, path_depth, validate_hierarchy

from .constants import (
    DEFAULT_HORIZONTAL_SPACING,
    DEFAULT_VERTICAL_SPACING,
    VIEW_MODE_NODE_TYPE,
    normalize_view_mode,
)


def _path_index(agents: List[Dict[str, Any]]) -> Dict[str, str]:
    """path -> id. First agent wins, same as a linear scan for a matching path."""
    index: Dict[str, str] = {}
    for a in agents:
        index.setdefault(a["path"], a["id"])
    return index


def visible_agents(agents: List[Dict[str, Any]], collapsed: Set[str]) -> List[Dict[str, Any]]:
    """Agents with no collapsed proper ancestor (by path). A collapsed node stays visible itself."""
    if not collapsed:
        return list(agents)
    index = _path_index(agents)
    result = []
    for a in agents:
        hidden = any(index.get(p) in collapsed for p in ancestor_paths(a["path"]))
        if not hidden:
            result.append(a)
    return result


def downline_counts(agents: List[Dict[str, Any]]) -> Counter:
    """path -> number of agents strictly below it, over the full list."""
    counts: Counter = Counter()
    for a in agents:
        for p in ancestor_paths(a["path"]):
            counts[p] += 1
    return counts


def downline_count(agents: List[Dict[str, Any]], agent_id: str) -> int:
    """Descendants of agent_id by path, hidden ones included."""
    agent = next((a for a in agents if a["id"] == agent_id), None)
    if agent is None:
        return 0
    prefix = agent["path"] + "."
    return sum(1 for a in agents if a["path"].startswith(prefix) and a["id"] != agent_id)


def build_children_map(visible: List[Dict[str, Any]]) -> Dict[Optional[str], List[Dict[str, Any]]]:
    """parentId -> visible children, each list sorted by path."""
    children: Dict[Optional[str], List[Dict[str, Any]]] = {}
    for a in visible:
        children.setdefault(a.get("parentId"), []).append(a)
    for siblings in children.values():
        siblings.sort(key=lambda a: a["path"])
    return children


def find_roots(visible: List[Dict[str, Any]], known_ids: Set[str]) -> List[Dict[str, Any]]:
    """Visible agents without a resolvable manager, ordered by path."""
    roots = [a for a in visible if not a.get("parentId") or a["parentId"] not in known_ids]
    roots.sort(key=lambda a: a["path"])
    return roots


def compute_subtree_widths(
    roots: List[Dict[str, Any]],
    children: Dict[Optional[str], List[Dict[str, Any]]],
    collapsed: Set[str],
) -> Dict[str, int]:
    """Slots per visible subtree. Collapsed nodes and leaves take exactly one."""
    widths: Dict[str, int] = {}

    def width_of(agent_id: str) -> int:
        if agent_id in widths:
            return widths[agent_id]
        if agent_id in collapsed or not children.get(agent_id):
            widths[agent_id] = 1
            return 1
        w = sum(width_of(c["id"]) for c in children[agent_id])
        widths[agent_id] = w
        return w

    for root in roots:
        width_of(root["id"])
    return widths


def assign_positions(
    roots: List[Dict[str, Any]],
    children: Dict[Optional[str], List[Dict[str, Any]]],
    widths: Dict[str, int],
    collapsed: Set[str],
    horizontal_spacing: float,
    vertical_spacing: float,
) -> Dict[str, Dict[str, float]]:
    """Top-down pass: every node gets [start_x, start_x + width * h) and sits at its center."""
    positions: Dict[str, Dict[str, float]] = {}

    def place(agent: Dict[str, Any], start_x: float) -> None:
        w = widths.get(agent["id"], 1)
        x = start_x + (w * horizontal_spacing) / 2 - horizontal_spacing / 2
        depth = agent.get("depth")
        if depth is None:
            depth = path_depth(agent["path"])
        positions[agent["id"]] = {"x": x, "y": depth * vertical_spacing}
        if agent["id"] in collapsed:
            return
        child_x = start_x
        for child in children.get(agent["id"], []):
            place(child, child_x)
            child_x += widths.get(child["id"], 1) * horizontal_spacing

    start_x = 0.0
    for root in roots:
        place(root, start_x)
        start_x += widths.get(root["id"], 1) * horizontal_spacing + horizontal_spacing
    return positions


def _empty_layout() -> Dict[str, Any]:
    return {"nodes": [], "edges": [], "subtreeWidths": {}, "visibleIds": [], "width": 0, "height": 0}


def compute_hierarchy_layout(
    agents: Optional[List[Dict[str, Any]]],
    collapsed_nodes: Optional[Iterable[str]] = None,
    horizontal_spacing: float = DEFAULT_HORIZONTAL_SPACING,
    vertical_spacing: float = DEFAULT_VERTICAL_SPACING,
    view_mode: Optional[str] = None,
    validate: bool = True,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Lay out the hierarchy.

    Returns {nodes: [{id, type, position: {x, y}, isCollapsed, downlineCount, agent}],
             edges: [{id, source, target, type, animated, data}],
             subtreeWidths: {id: slots}, visibleIds, width, height}.
    Raises MalformedHierarchyError when paths do not nest (nothing is laid out).
    """
    agents = list(agents or [])
    collapsed = set(collapsed_nodes or ())
    if validate:
        validate_hierarchy(agents)
    if not agents:
        return _empty_layout()

    agent_map = {a["id"]: a for a in agents}
    visible = visible_agents(agents, collapsed)
    visible.sort(key=lambda a: a["path"])
    visible_ids = {a["id"] for a in visible}

    children = build_children_map(visible)
    roots = find_roots(visible, set(agent_map))
    widths = compute_subtree_widths(roots, children, collapsed)
    positions = assign_positions(roots, children, widths, collapsed, horizontal_spacing, vertical_spacing)
    counts = downline_counts(agents)
    node_type = VIEW_MODE_NODE_TYPE[normalize_view_mode(view_mode)]

    nodes: List[Dict[str, Any]] = []
    edges: List[Dict[str, Any]] = []
    for a in visible:
        nodes.append({
            "id": a["id"],
            "type": node_type,
            "position": positions.get(a["id"], {"x": 0.0, "y": 0.0}),
            "isCollapsed": a["id"] in collapsed,
            "downlineCount": counts.get(a["path"], 0),
            "agent": {**a, "compLevel": a.get("compLevel") or 0,
                      "weeklyBusinessSubmitted": a.get("weeklyBusinessSubmitted") or 0},
        })
        pid = a.get("parentId")
        if pid and pid in agent_map and pid in visible_ids:
            edges.append({
                "id": f"{pid}-{a['id']}",
                "source": pid,
                "target": a["id"],
                "type": "smoothstep",
                "animated": a.get("status") == "active",
                "data": {
                    "parentColor": zone_color(agent_map[pid], now),
                    "childColor": zone_color(a, now),
                },
            })

    xs = [p["x"] for p in positions.values()]
    ys = [p["y"] for p in positions.values()]
    width = (max(xs) - min(xs) + horizontal_spacing) if xs else 0
    height = (max(ys) - min(ys) + vertical_spacing) if ys else 0

    return {
        "nodes": nodes,
        "edges": edges,
        "subtreeWidths": {aid: widths.get(aid, 1) for aid in (a["id"] for a in visible)},
        "visibleIds": [a["id"] for a in visible],
        "width": width,
        "height": height,
    }
