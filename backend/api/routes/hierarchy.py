"""Hierarchy API routes: agent snapshot, tree layout, collapse toggle."""

import os
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from loguru import logger

from db import get_agents, get_layout_config, save_agents
from hierarchy import filter_agents, find_agent, get_collapsed, normalize_agents, toggle_view_node
from layout import compute_hierarchy_layout, resolve_spacing
from layout.constants import normalize_view_mode
from shared import MalformedHierarchyError, validate_hierarchy

from .. import state as api_state
from ..schemas import AgentSnapshotRequest, LayoutRequest, ToggleRequest

router = APIRouter()


def _int_env(name: str, default: int) -> int:
    v = os.environ.get(name)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        logger.warning("Ignoring non-numeric {}={!r}, using {}", name, v, default)
        return default


MAX_AGENTS = _int_env("ORGTREE_MAX_AGENTS", 5000)


def _malformed(e: MalformedHierarchyError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": e.message, "agentId": e.agent_id})


async def _layout_for(
    agents: List[Dict[str, Any]],
    collapsed,
    view_mode: Optional[str] = None,
    horizontal_spacing: Optional[float] = None,
    vertical_spacing: Optional[float] = None,
    query: Optional[str] = None,
) -> Dict[str, Any]:
    """Fill unset view mode / spacing from settings, filter by query, lay out."""
    config = await get_layout_config()
    mode = normalize_view_mode(view_mode or config["viewMode"])
    overrides = config["spacing"].get(mode)
    if not isinstance(overrides, dict):
        overrides = {}
    if horizontal_spacing is None:
        horizontal_spacing = overrides.get("horizontalSpacing")
    if vertical_spacing is None:
        vertical_spacing = overrides.get("verticalSpacing")
    h, v = resolve_spacing(mode, horizontal_spacing, vertical_spacing)
    layout = compute_hierarchy_layout(
        filter_agents(agents, query),
        collapsed,
        horizontal_spacing=h,
        vertical_spacing=v,
        view_mode=mode,
    )
    layout["viewMode"] = mode
    return layout


@router.get("")
async def get_hierarchy(hierarchy_id: str = Query("default", alias="hierarchyId")):
    try:
        agents = await get_agents(hierarchy_id)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"agents": agents or []}


@router.post("")
async def save_hierarchy(body: AgentSnapshotRequest):
    """Validate and store a new agent snapshot, then notify clients to re-render."""
    if len(body.agents) > MAX_AGENTS:
        return JSONResponse(
            status_code=413,
            content={"error": f"Snapshot has {len(body.agents)} agents, limit is {MAX_AGENTS}"},
        )
    try:
        agents = normalize_agents(body.agents)
        validate_hierarchy(agents)
        result = await save_agents(agents, body.hierarchy_id)
    except MalformedHierarchyError as e:
        logger.warning("Rejected snapshot for {}: {}", body.hierarchy_id, e.message)
        return _malformed(e)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    await api_state.emit("hierarchy-update", {"hierarchyId": body.hierarchy_id, "count": len(agents)})
    return result


@router.get("/layout")
async def get_layout(
    hierarchy_id: str = Query("default", alias="hierarchyId"),
    view_mode: Optional[str] = Query(None, alias="viewMode"),
    q: Optional[str] = Query(None),
):
    """Layout of the stored snapshot with this view's collapse state."""
    try:
        agents = await get_agents(hierarchy_id) or []
        layout = await _layout_for(agents, get_collapsed(hierarchy_id), view_mode=view_mode, query=q)
    except MalformedHierarchyError as e:
        return _malformed(e)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"layout": layout, "collapsedNodes": sorted(get_collapsed(hierarchy_id))}


@router.post("/layout")
async def post_layout(body: LayoutRequest):
    """Stateless layout for caller-supplied agents and collapse set."""
    if len(body.agents) > MAX_AGENTS:
        return JSONResponse(
            status_code=413,
            content={"error": f"Snapshot has {len(body.agents)} agents, limit is {MAX_AGENTS}"},
        )
    try:
        layout = await _layout_for(
            normalize_agents(body.agents),
            body.collapsed_nodes,
            view_mode=body.view_mode,
            horizontal_spacing=body.horizontal_spacing,
            vertical_spacing=body.vertical_spacing,
            query=body.query,
        )
    except MalformedHierarchyError as e:
        return _malformed(e)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {"layout": layout}


@router.post("/toggle")
async def toggle_node(body: ToggleRequest):
    """Collapse or expand one agent's downline, recompute and push the new layout."""
    hierarchy_id = body.hierarchy_id
    try:
        agents = await get_agents(hierarchy_id) or []
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    if find_agent(agents, body.agent_id) is None:
        return JSONResponse(status_code=404, content={"error": f"Agent '{body.agent_id}' not found"})

    collapsed = toggle_view_node(hierarchy_id, body.agent_id)
    try:
        layout = await _layout_for(agents, collapsed, view_mode=body.view_mode)
    except MalformedHierarchyError as e:
        return _malformed(e)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    payload = {"hierarchyId": hierarchy_id, "collapsedNodes": sorted(collapsed), "layout": layout}
    await api_state.emit("hierarchy-layout-update", payload)
    return payload
