"""
orgtree Backend - FastAPI + Socket.io entry point.
Serves agent hierarchy snapshots and tree layouts; pushes recomputed layouts on collapse toggles.

Run from backend/: uvicorn main:asgi_app --reload
"""

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from api import register_routes
from db import list_hierarchy_ids

# Socket.io
sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")
app = FastAPI(title="orgtree Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_routes(app, sio)


@app.get("/health")
async def health():
    return {"status": "ok"}


# Socket.io events
@sio.event
async def connect(sid, environ, auth):
    logger.info("Client connected: {}", sid)
    await sio.emit("hierarchies-update", {"hierarchyIds": await list_hierarchy_ids()}, to=sid)


@sio.event
def disconnect(sid):
    logger.info("Client disconnected: {}", sid)


# ASGI app for uvicorn (Socket.io + FastAPI)
asgi_app = socketio.ASGIApp(sio, app)
