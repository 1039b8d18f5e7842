"""
Graph utilities for the agent hierarchy (materialized paths + reporting lines).
Shared by hierarchy (records) and layout (tree positioning).

A path is the dot-joined chain of ancestor ids ending in the agent's own id,
e.g. 'R.A.B' is B under A under R.
"""

from typing import Any, Dict, List, Optional

import networkx as nx

from .errors import MalformedHierarchyError

PATH_SEP = "."


def split_path(path: str) -> List[str]:
    """'R.A.B' -> ['R', 'A', 'B']."""
    if not path:
        return []
    return path.split(PATH_SEP)


def parent_path(path: str) -> Optional[str]:
    """Path of the direct manager, e.g. 'R.A.B' -> 'R.A', 'R' -> None."""
    if not path or PATH_SEP not in path:
        return None
    return path.rsplit(PATH_SEP, 1)[0]


def ancestor_paths(path: str) -> List[str]:
    """Proper ancestor paths from root down, e.g. 'R.A.B' -> ['R', 'R.A']."""
    parts = split_path(path)
    return [PATH_SEP.join(parts[: i + 1]) for i in range(len(parts) - 1)]


def path_depth(path: str) -> int:
    """Number of separators: 'R' -> 0, 'R.A.B' -> 2."""
    return path.count(PATH_SEP) if path else 0


def is_descendant_path(path: str, ancestor: str) -> bool:
    """True if path sits strictly below ancestor."""
    return bool(path) and bool(ancestor) and path.startswith(ancestor + PATH_SEP)


def build_reporting_graph(agents: List[Dict[str, Any]]) -> nx.DiGraph:
    """Build manager -> report graph from parentId. Unresolvable parents add no edge."""
    ids = {a["id"] for a in agents or [] if a.get("id")}
    G = nx.DiGraph()
    for a in agents or []:
        aid = a.get("id")
        if not aid:
            continue
        G.add_node(aid)
        pid = a.get("parentId")
        if pid and pid in ids:
            G.add_edge(pid, aid)
    return G


def validate_hierarchy(agents: List[Dict[str, Any]]) -> None:
    """
    Reject snapshots whose paths are not well formed.

    An agent whose parentId is empty or not in the snapshot is valid: it is laid
    out as a root, even when its path parent is present.
    Raises MalformedHierarchyError on the first problem found.
    """
    by_id: Dict[str, Dict[str, Any]] = {}
    by_path: Dict[str, Dict[str, Any]] = {}
    for a in agents or []:
        aid = a.get("id")
        path = a.get("path")
        if not aid or not isinstance(aid, str):
            raise MalformedHierarchyError("Agent is missing an id")
        if not path or not isinstance(path, str):
            raise MalformedHierarchyError(f"Agent {aid} is missing a path", aid)
        if aid in by_id:
            raise MalformedHierarchyError(f"Duplicate agent id {aid}", aid)
        if path in by_path:
            raise MalformedHierarchyError(f"Duplicate path {path}", aid)
        parts = split_path(path)
        if any(not p for p in parts):
            raise MalformedHierarchyError(f"Path {path!r} has an empty segment", aid)
        if parts[-1] != aid:
            raise MalformedHierarchyError(f"Path {path!r} does not end with agent id {aid}", aid)
        depth = a.get("depth")
        if depth is not None and (isinstance(depth, bool) or not isinstance(depth, int)):
            raise MalformedHierarchyError(f"Agent {aid} has a non-integer depth {depth!r}", aid)
        if depth is not None and depth != path_depth(path):
            raise MalformedHierarchyError(
                f"Agent {aid} has depth {depth} but path {path!r} implies {path_depth(path)}", aid
            )
        by_id[aid] = a
        by_path[path] = a

    G = build_reporting_graph(agents)
    if not nx.is_directed_acyclic_graph(G):
        cycle = nx.find_cycle(G)
        raise MalformedHierarchyError(f"Circular reporting line detected: {cycle}", cycle[0][0])

    for aid, a in by_id.items():
        pid = a.get("parentId")
        parent = by_id.get(pid) if pid else None
        if parent is not None and a["path"] != parent["path"] + PATH_SEP + aid:
            raise MalformedHierarchyError(
                f"Path {a['path']!r} does not nest under parent {pid} ({parent['path']!r})", aid
            )
