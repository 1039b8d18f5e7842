"""
Zone logic: licensing / activity / compliance status per agent.
Only drives edge and minimap colors; carries no structural meaning for the layout.

Priority order: red > blue > black > yellow > green.
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ZONE_COLORS: Dict[str, str] = {
    "red": "#EF4444",
    "blue": "#3B82F6",
    "black": "#64748B",
    "yellow": "#F59E0B",
    "green": "#10B981",
    "active_business": "#22C55E",
}

ZONE_DESCRIPTIONS: Dict[str, Dict[str, str]] = {
    "red": {"label": "Critical", "description": "License expired or expiring within 7 days"},
    "blue": {"label": "Onboarding", "description": "New agent, verification incomplete"},
    "black": {"label": "Inactive", "description": "No activity for 7+ days"},
    "yellow": {"label": "Warning", "description": "Pending contracts or license expiring soon"},
    "green": {"label": "Active", "description": "All systems operational"},
    "active_business": {"label": "Producing", "description": "Submitted business this week"},
}

CRITICAL_LICENSE_DAYS = 7
WARNING_LICENSE_DAYS = 30
NEW_AGENT_DAYS = 30
INACTIVE_DAYS = 7
NO_ACTIVITY_DAYS = 999


def _parse_ts(value: Any) -> Optional[datetime]:
    """ISO date or datetime string -> aware UTC datetime. Naive values are taken as UTC."""
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _days_between(start: datetime, end: datetime) -> int:
    # half-up rounding, negative spans included
    return math.floor((end - start).total_seconds() / 86400 + 0.5)


def _license_expired(agent: Dict[str, Any], now: datetime) -> bool:
    exp = _parse_ts(agent.get("residentLicenseExp"))
    return exp is not None and exp < now


def _license_expiring_within(agent: Dict[str, Any], days: int, now: datetime) -> bool:
    exp = _parse_ts(agent.get("residentLicenseExp"))
    if exp is None:
        return False
    remaining = _days_between(now, exp)
    return 0 <= remaining <= days


def _is_new_agent(agent: Dict[str, Any], within_days: int, now: datetime) -> bool:
    joined = _parse_ts(agent.get("joinedAt"))
    return joined is not None and _days_between(joined, now) <= within_days


def _days_since_last_activity(agent: Dict[str, Any], now: datetime) -> int:
    last = _parse_ts(agent.get("lastLoginAt") or agent.get("lastActivityAt"))
    if last is None:
        return NO_ACTIVITY_DAYS
    return _days_between(last, now)


def determine_agent_zone(agent: Dict[str, Any], now: Optional[datetime] = None) -> str:
    """Return the agent's zone name (a key of ZONE_COLORS)."""
    now = now or datetime.now(timezone.utc)
    if _license_expired(agent, now) or _license_expiring_within(agent, CRITICAL_LICENSE_DAYS, now):
        return "red"
    if _is_new_agent(agent, NEW_AGENT_DAYS, now) and not agent.get("verificationComplete"):
        return "blue"
    if _days_since_last_activity(agent, now) >= INACTIVE_DAYS:
        return "black"
    if (agent.get("contractsPending") or 0) > 0 or _license_expiring_within(agent, WARNING_LICENSE_DAYS, now):
        return "yellow"
    return "green"


def zone_color(agent: Dict[str, Any], now: Optional[datetime] = None) -> str:
    return ZONE_COLORS[determine_agent_zone(agent, now)]
