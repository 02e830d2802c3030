from __future__ import annotations
from enum import Enum
from typing import Any, Mapping, Optional
from pydantic import BaseModel, field_validator


class EventKind(str, Enum):
    PORT = "/kcsapi/api_port/port"
    COMPOSITION_CHANGE = "/kcsapi/api_req_hensei/change"
    PRESET_SELECT = "/kcsapi/api_req_hensei/preset_select"
    REMODEL = "/kcsapi/api_req_kaisou/remodeling"
    EXPEDITION_START = "/kcsapi/api_req_mission/start"
    EXPEDITION_RESULT = "/kcsapi/api_req_mission/result"
    DOCK_START = "/kcsapi/api_req_nyukyo/start"
    UNKNOWN = ""

    @classmethod
    def from_path(cls, path: str) -> "EventKind":
        try:
            return cls(path)
        except ValueError:
            return cls.UNKNOWN


# Composition change sentinels for api_ship_id
REMOVE_SHIP = -1
REMOVE_ALL_BUT_FLAGSHIP = -2


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip(), 10)
    except ValueError:
        return None


class GameEvent(BaseModel):
    """A host game response, decoded once into typed fields."""

    kind: EventKind = EventKind.UNKNOWN
    path: str = ""
    fleet_id: Optional[int] = None
    ship_id: Optional[int] = None
    slot_index: Optional[int] = None
    deck_id: Optional[int] = None
    instant: bool = False

    @field_validator("fleet_id", "ship_id", "slot_index", "deck_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Optional[int]:
        return _to_int(value)

    @field_validator("instant", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return _to_int(value) == 1 or value is True


def decode_event(path: str, post_body: Optional[Mapping[str, Any]] = None) -> GameEvent:
    body = post_body or {}
    return GameEvent(
        kind=EventKind.from_path(path),
        path=path,
        fleet_id=body.get("api_id"),
        ship_id=body.get("api_ship_id"),
        slot_index=body.get("api_ship_idx"),
        deck_id=body.get("api_deck_id"),
        instant=body.get("api_highspeed"),
    )
