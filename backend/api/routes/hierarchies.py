"""Hierarchies list API - GET /api/hierarchies."""

from fastapi import APIRouter

from db import list_hierarchy_ids

router = APIRouter()


@router.get("")
async def list_hierarchies():
    """List hierarchy IDs (newest snapshot first)."""
    ids = await list_hierarchy_ids()
    return {"hierarchyIds": ids}
