from __future__ import annotations
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .assets import SHIP_TYPES_PATH, load_ship_type_factors, load_snapshot
from .bus import BUS, TIMERS_TOPIC
from .config import CONFIG, configure_logging
from .models import PortSnapshot
from .sim.detail import get_repair_candidates, get_repair_notifications
from .sim.events import decode_event
from .sim.queries import fleet_ids, fleet_repair_count, fleet_repair_progress, fleet_status
from .sim.reducer import EventReducer
from .sim.switch import AutoSwitchGuard
from .sim.timers import TIMERS, elapsed_seconds


logger = logging.getLogger(__name__)

app = FastAPI(title="Anchorage Repair Tracker")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class EventRequest(BaseModel):
    path: str
    post_body: Dict[str, Any] = Field(default_factory=dict, alias="postBody")
    # Host state at the moment the event fired; replaces the stored snapshot
    snapshot: Optional[PortSnapshot] = None


class PortState:
    def __init__(self) -> None:
        self.snapshot = PortSnapshot()


state = PortState()
reducer = EventReducer(TIMERS)
guard = AutoSwitchGuard()
_unsubscribe_timers: Optional[Callable[[], None]] = None


def timer_payload() -> Dict[str, Any]:
    payload: Dict[str, Any] = dict(TIMERS.snapshot())
    now = TIMERS.now()
    payload["repairElapsedS"] = elapsed_seconds(TIMERS.get_last_repair_refresh(), now)
    payload["nosakiElapsedS"] = elapsed_seconds(TIMERS.get_last_nosaki_refresh(), now)
    return payload


def _on_timers_changed() -> None:
    BUS.publish_nowait(TIMERS_TOPIC, {"topic": "timers", "data": timer_payload()})


@app.on_event("startup")
async def _startup() -> None:
    global _unsubscribe_timers
    configure_logging()
    if CONFIG.load_ship_types:
        load_ship_type_factors(Path(CONFIG.ship_types_path) if CONFIG.ship_types_path else SHIP_TYPES_PATH)
    if CONFIG.snapshot_path:
        snap = load_snapshot(Path(CONFIG.snapshot_path))
        if snap is not None:
            state.snapshot = snap
    _unsubscribe_timers = TIMERS.subscribe(_on_timers_changed)


@app.on_event("shutdown")
async def _shutdown() -> None:
    global _unsubscribe_timers
    if _unsubscribe_timers is not None:
        _unsubscribe_timers()
        _unsubscribe_timers = None


@app.get("/api/fleets")
async def api_fleets() -> JSONResponse:
    return JSONResponse({"fleets": fleet_ids(state.snapshot)})


@app.get("/api/fleets/{fleet_id}/status")
async def api_fleet_status(fleet_id: int) -> JSONResponse:
    status = fleet_status(state.snapshot, fleet_id)
    if status is None:
        raise HTTPException(status_code=404, detail=f"Unknown fleet {fleet_id}")
    return JSONResponse(status.model_dump())


@app.get("/api/fleets/{fleet_id}/repair-count")
async def api_fleet_repair_count(fleet_id: int) -> JSONResponse:
    if state.snapshot.get_fleet(fleet_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown fleet {fleet_id}")
    return JSONResponse({"count": fleet_repair_count(state.snapshot, fleet_id)})


@app.get("/api/fleets/{fleet_id}/detail")
async def api_fleet_detail(fleet_id: int) -> JSONResponse:
    if state.snapshot.get_fleet(fleet_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown fleet {fleet_id}")
    now = TIMERS.now()
    details = fleet_repair_progress(
        state.snapshot,
        fleet_id,
        elapsed_seconds(TIMERS.get_last_repair_refresh(), now),
        elapsed_seconds(TIMERS.get_last_nosaki_refresh(), now),
    )
    notifications = get_repair_notifications(details, TIMERS.get_last_repair_refresh())
    return JSONResponse({
        "ships": [d.model_dump() for d in details],
        "notifications": [n.model_dump() for n in notifications],
    })


@app.get("/api/repair-queue")
async def api_repair_queue() -> JSONResponse:
    return JSONResponse({"ships": [c.model_dump() for c in get_repair_candidates(state.snapshot)]})


@app.get("/api/timers")
async def api_timers() -> JSONResponse:
    return JSONResponse(timer_payload())


@app.put("/api/snapshot")
async def api_put_snapshot(snapshot: PortSnapshot) -> JSONResponse:
    state.snapshot = snapshot
    return JSONResponse({"fleets": len(snapshot.fleets), "ships": len(snapshot.ships)})


@app.post("/api/events")
async def api_event(req: EventRequest) -> JSONResponse:
    if req.snapshot is not None:
        state.snapshot = req.snapshot
    event = decode_event(req.path, req.post_body)
    switch = guard.check(req.path, state.snapshot)
    reducer.handle(event, state.snapshot)
    logger.debug("handled %s (switch=%s)", event.kind.name, switch)
    return JSONResponse({"switch": switch, "timers": timer_payload()})


@app.websocket("/ws/timers")
async def ws_timers(ws: WebSocket) -> None:
    await ws.accept()
    await ws.send_text(json.dumps({"topic": "timers", "data": timer_payload()}))

    async def forward_task():
        async for msg in BUS.subscribe(TIMERS_TOPIC, max_queue=CONFIG.ws_max_queue):
            try:
                await ws.send_text(json.dumps(msg))
            except (RuntimeError, WebSocketDisconnect):
                break

    fwd = asyncio.create_task(forward_task())
    try:
        while True:
            # clients only listen; anything they send is ignored
            await ws.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        fwd.cancel()
