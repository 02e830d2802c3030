from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from . import models


logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).resolve().parents[1] / "assets"
SHIP_TYPES_PATH = ASSETS_DIR / "ship_types.json"
SNAPSHOTS_DIR = ASSETS_DIR / "snapshots"


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_ship_type_factors(path: Path = SHIP_TYPES_PATH) -> int:
    """Load the ship type factor table and update models.SHIP_TYPE_FACTORS in place.

    Returns the number of entries loaded; 0 leaves the built-in table untouched.
    """
    path = Path(path)
    if not path.exists():
        logger.error("Ship type table not found at %s", path)
        return 0
    try:
        data = _read_json(path)
        table: Dict[int, models.ShipTypeFactor] = {}
        for key, entry in data.items():
            row = models.ShipTypeFactor(id=int(key), name=entry.get("name", ""), factor=entry.get("factor", 0))
            table[row.id] = row
    except (OSError, ValueError, AttributeError, ValidationError) as e:
        # Keep existing table if building fails
        logger.error("Failed to load ship type table from %s: %s", path, e)
        return 0
    # Update in place so existing imports see the change
    models.SHIP_TYPE_FACTORS.clear()
    models.SHIP_TYPE_FACTORS.update(table)
    logger.info("Loaded %d ship type factors", len(table))
    return len(table)


def load_snapshot(path: Path) -> Optional[models.PortSnapshot]:
    """Read a port snapshot in raw API shape; None if missing or invalid."""
    path = Path(path)
    if not path.exists():
        logger.warning("Snapshot not found at %s", path)
        return None
    try:
        return models.PortSnapshot.model_validate(_read_json(path))
    except (OSError, ValueError) as e:
        # pydantic.ValidationError is a ValueError
        logger.error("Invalid snapshot %s: %s", path, e)
        return None


def load_snapshot_by_id(snapshot_id: str) -> Optional[models.PortSnapshot]:
    return load_snapshot(SNAPSHOTS_DIR / f"{snapshot_id}.json")
