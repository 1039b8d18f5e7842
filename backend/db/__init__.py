"""
Database Module
File-based storage: db/{hierarchy_id}/agents.json holds the agent snapshot for one
organization; db/settings.json holds UI settings (view mode, spacing overrides).
Uses orjson for faster JSON parsing; json_repair recovers truncated snapshot files.
"""

import os
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import json_repair
import orjson
from loguru import logger

DB_DIR = Path(os.environ.get("ORGTREE_DB_DIR") or Path(__file__).parent)
DEFAULT_HIERARCHY_ID = "default"
AGENTS_FILE = "agents.json"
SETTINGS_FILE = "settings.json"


def _validate_hierarchy_id(hierarchy_id: str) -> None:
    """Reject path traversal and invalid hierarchy_id."""
    if not hierarchy_id or not isinstance(hierarchy_id, str):
        raise ValueError("hierarchy_id must be a non-empty string")
    if ".." in hierarchy_id or "/" in hierarchy_id or "\\" in hierarchy_id:
        raise ValueError("hierarchy_id must not contain path separators")
    if hierarchy_id.startswith("."):
        raise ValueError("hierarchy_id must not start with a dot")


def _get_hierarchy_dir(hierarchy_id: str) -> Path:
    return DB_DIR / hierarchy_id


async def _read_json(file_path: Path) -> Optional[Any]:
    try:
        async with aiofiles.open(file_path, "rb") as f:
            raw = await f.read()
    except FileNotFoundError:
        return None
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        logger.warning("Invalid JSON in {}: {}, attempting repair", file_path, e)
    try:
        return json_repair.loads(raw.decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Could not repair {}: {}", file_path, e)
        return None


async def _write_json(file_path: Path, data: Any) -> None:
    """Atomic write: write to .tmp then rename to avoid partial/corrupt files on concurrent access."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    content = orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8")
    async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
        await f.write(content)
    tmp_path.replace(file_path)


async def get_agents(hierarchy_id: str = DEFAULT_HIERARCHY_ID) -> Optional[List[Dict[str, Any]]]:
    """Agent snapshot for a hierarchy, or None if never saved."""
    _validate_hierarchy_id(hierarchy_id)
    data = await _read_json(_get_hierarchy_dir(hierarchy_id) / AGENTS_FILE)
    if data is None:
        return None
    agents = data.get("agents") if isinstance(data, dict) else data
    return agents if isinstance(agents, list) else []


async def save_agents(agents: List[Dict[str, Any]], hierarchy_id: str = DEFAULT_HIERARCHY_ID) -> dict:
    """Replace the agent snapshot."""
    _validate_hierarchy_id(hierarchy_id)
    await _write_json(_get_hierarchy_dir(hierarchy_id) / AGENTS_FILE, {"agents": agents})
    logger.info("Saved {} agents for hierarchy {}", len(agents), hierarchy_id)
    return {"success": True, "count": len(agents)}


async def list_hierarchy_ids() -> list:
    """List hierarchy IDs from db/, sorted by agents.json mtime (newest first)."""
    if not DB_DIR.exists():
        return []
    result = []
    for p in DB_DIR.iterdir():
        if p.is_dir() and not p.name.startswith("."):
            agents_file = p / AGENTS_FILE
            if agents_file.exists():
                try:
                    mtime = agents_file.stat().st_mtime
                    result.append((p.name, mtime))
                except OSError:
                    result.append((p.name, 0))
    result.sort(key=lambda x: x[1], reverse=True)
    return [hid for hid, _ in result]


async def get_settings() -> dict:
    """Get full settings from db/settings.json."""
    data = await _read_json(DB_DIR / SETTINGS_FILE)
    return data if isinstance(data, dict) else {}


async def save_settings(settings: dict) -> dict:
    """Save settings to db/settings.json. Atomic write to avoid corruption."""
    await _write_json(DB_DIR / SETTINGS_FILE, settings or {})
    return {"success": True}


async def get_layout_config() -> dict:
    """Layout-relevant settings: {viewMode, spacing: {mode: {horizontalSpacing, verticalSpacing}}}."""
    raw = await get_settings()
    spacing = raw.get("spacing")
    return {
        "viewMode": raw.get("viewMode"),
        "spacing": spacing if isinstance(spacing, dict) else {},
    }


async def clear_db() -> dict:
    """Clear DB: remove all hierarchy folders. settings.json is kept."""
    if not DB_DIR.exists():
        return {"success": True, "removed": []}
    removed = []
    for p in DB_DIR.iterdir():
        if not p.is_dir() or p.name.startswith(".") or p.name == "__pycache__":
            continue
        try:
            shutil.rmtree(p)
            removed.append(p.name)
        except OSError as e:
            logger.warning("Failed to remove {}: {}", p, e)
    return {"success": True, "removed": removed}
