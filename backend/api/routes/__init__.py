"""API route modules."""

from fastapi import FastAPI

from . import db, hierarchies, hierarchy, settings
from ..state import init_api_state


def register_routes(app: FastAPI, sio):
    """Register all API routers. Call after app and sio are created."""
    init_api_state(sio)

    app.include_router(db.router, prefix="/api/db", tags=["db"])
    app.include_router(hierarchy.router, prefix="/api/hierarchy", tags=["hierarchy"])
    app.include_router(hierarchies.router, prefix="/api/hierarchies", tags=["hierarchies"])
    app.include_router(settings.router, prefix="/api/settings", tags=["settings"])
