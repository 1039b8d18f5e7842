"""
Agent records
Storage rows (snake_case) -> HierarchyAgent dicts (camelCase) used by layout and the frontend.
"""

from typing import Any, Dict, List, Optional

from shared.errors import MalformedHierarchyError
from shared.graph import path_depth

DEFAULT_MONTHLY_GOAL = 10000.0
UNKNOWN_AGENT_NAME = "Unknown Agent"

# camelCase key -> snake_case storage column
_FIELD_ALIASES = {
    "userId": "user_id",
    "parentId": "parent_id",
    "monthlyGoal": "monthly_goal",
    "ytdPremium": "ytd_premium",
    "lastActivityAt": "last_activity_at",
    "lastLoginAt": "last_login_at",
    "licenseStates": "license_states",
    "fullName": "full_name",
    "avatarUrl": "avatar_url",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "joinedAt": "joined_at",
    "verificationComplete": "verification_complete",
    "contractsPending": "contracts_pending",
    "contractsApproved": "contracts_approved",
    "residentLicenseExp": "resident_license_exp",
    "ceDueDate": "ce_due_date",
    "compLevel": "comp_level",
    "weeklyBusinessSubmitted": "weekly_business_submitted",
}


def _get(row: Dict[str, Any], key: str) -> Any:
    if key in row:
        return row[key]
    alias = _FIELD_ALIASES.get(key)
    return row.get(alias) if alias else None


def _to_float(value: Any, default: float) -> float:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return default
    return f if f == f else default


def normalize_agent(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Accept snake_case or camelCase row, return HierarchyAgent with defaults filled in.
    Raises MalformedHierarchyError when path is not a string or depth is not an int.
    """
    aid = _get(row, "id")
    path = _get(row, "path") or ""
    if not isinstance(path, str):
        raise MalformedHierarchyError(f"Agent {aid} has a non-string path {path!r}", aid)
    depth = _get(row, "depth")
    if depth is not None and (isinstance(depth, bool) or not isinstance(depth, int)):
        raise MalformedHierarchyError(f"Agent {aid} has a non-integer depth {depth!r}", aid)
    monthly_goal = _to_float(_get(row, "monthlyGoal"), DEFAULT_MONTHLY_GOAL)
    agent = {
        "id": aid,
        "userId": _get(row, "userId"),
        "parentId": _get(row, "parentId") or None,
        "path": path,
        "depth": depth if depth is not None else path_depth(path),
        "status": _get(row, "status") or "active",
        "tier": _get(row, "tier") or "new_agent",
        # 0 is treated as unset
        "monthlyGoal": monthly_goal or DEFAULT_MONTHLY_GOAL,
        "ytdPremium": _to_float(_get(row, "ytdPremium"), 0.0),
        "lastActivityAt": _get(row, "lastActivityAt"),
        "licenseStates": list(_get(row, "licenseStates") or []),
        "fullName": _get(row, "fullName") or UNKNOWN_AGENT_NAME,
        "email": _get(row, "email") or "",
        "avatarUrl": _get(row, "avatarUrl"),
        "createdAt": _get(row, "createdAt"),
        "updatedAt": _get(row, "updatedAt"),
    }
    for key in (
        "lastLoginAt",
        "joinedAt",
        "verificationComplete",
        "contractsPending",
        "contractsApproved",
        "residentLicenseExp",
        "ceDueDate",
        "compLevel",
        "weeklyBusinessSubmitted",
    ):
        value = _get(row, key)
        if value is not None:
            agent[key] = value
    return agent


def normalize_agents(rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Normalize rows and order by path (same order the source query uses)."""
    agents = [normalize_agent(r) for r in rows or [] if isinstance(r, dict)]
    agents.sort(key=lambda a: a["path"])
    return agents


def filter_agents(agents: List[Dict[str, Any]], query: Optional[str]) -> List[Dict[str, Any]]:
    """Case-insensitive search on name or email. Empty query keeps everyone."""
    if not query or not query.strip():
        return list(agents or [])
    q = query.strip().lower()
    return [
        a for a in agents or []
        if q in (a.get("fullName") or "").lower() or q in (a.get("email") or "").lower()
    ]


def find_agent(agents: List[Dict[str, Any]], agent_id: str) -> Optional[Dict[str, Any]]:
    for a in agents or []:
        if a.get("id") == agent_id:
            return a
    return None
