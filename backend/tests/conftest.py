"""Shared fixtures: agent builders, isolated db dir, API client."""

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

import db
import main
from api import state as api_state
from hierarchy.collapse import clear_all_views


def make_agent(path: str, parent_id: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """Agent whose id is the last path segment. parent_id defaults to the path parent."""
    parts = path.split(".")
    if parent_id is None and len(parts) > 1:
        parent_id = parts[-2]
    agent = {
        "id": parts[-1],
        "parentId": parent_id,
        "path": path,
        "depth": len(parts) - 1,
        "status": "active",
    }
    agent.update(extra)
    return agent


def make_agents(*paths: str) -> List[Dict[str, Any]]:
    return [make_agent(p) for p in paths]


class RecordingSio:
    """Stands in for the Socket.IO server and records emits."""

    def __init__(self) -> None:
        self.events: List[tuple] = []

    async def emit(self, event, data=None, to=None):
        self.events.append((event, data))


@pytest.fixture(autouse=True)
def _reset_views():
    clear_all_views()
    yield
    clear_all_views()


@pytest.fixture
def db_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(db, "DB_DIR", tmp_path)
    return tmp_path


@pytest.fixture
def sio(monkeypatch):
    recorder = RecordingSio()
    monkeypatch.setattr(api_state, "sio", recorder)
    return recorder


@pytest.fixture
def client(db_dir, sio):
    with TestClient(main.app) as c:
        yield c
