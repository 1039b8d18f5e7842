"""DB API routes."""

from fastapi import APIRouter

from db import clear_db
from hierarchy.collapse import clear_all_views

router = APIRouter()


@router.post("/clear")
async def clear():
    """Clear DB: remove all hierarchy folders and reset every view to expanded."""
    clear_all_views()
    return await clear_db()
