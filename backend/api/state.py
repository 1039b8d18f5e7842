"""
Shared API state - sio.
Initialized by main.py after creating app and services.
"""

from typing import Any

# Set by main.py
sio: Any = None


def init_api_state(sio_instance):
    global sio
    sio = sio_instance


async def emit(event: str, payload: dict) -> None:
    """Emit to all clients; no-op when no Socket.IO server is attached (tests, scripts)."""
    if sio is not None:
        await sio.emit(event, payload)
