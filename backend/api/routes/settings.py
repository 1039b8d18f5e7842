"""Settings API routes. Backend maintains settings.json; frontend fetches and overwrites on save."""

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from db import get_settings, save_settings
from layout.constants import VIEW_MODE_SPACING

router = APIRouter()


@router.get("")
async def get_settings_route():
    """Return settings.json contents."""
    settings = await get_settings()
    return {"settings": settings}


@router.post("")
async def save_settings_route(body: dict = Body(...)):
    """Overwrite settings.json with request body. viewMode, if set, must be a known mode."""
    view_mode = body.get("viewMode")
    if view_mode is not None and view_mode not in VIEW_MODE_SPACING:
        return JSONResponse(
            status_code=400,
            content={"error": f"Unknown viewMode {view_mode!r}, expected one of {sorted(VIEW_MODE_SPACING)}"},
        )
    await save_settings(body)
    return {"success": True}
