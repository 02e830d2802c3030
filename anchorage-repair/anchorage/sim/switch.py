from __future__ import annotations
import logging
from typing import Optional
from ..config import CONFIG
from ..models import PortSnapshot
from .eligibility import check_repair_active
from .events import EventKind
from .rates import estimate_repair_duration
from .timers import Clock, now_ms


logger = logging.getLogger(__name__)


def anchorage_has_work(snapshot: PortSnapshot) -> bool:
    """True when some fleet is repairing and at least one member still needs HP."""
    repair_ids = snapshot.repair_ids()
    for fleet in snapshot.fleets:
        if not check_repair_active(fleet, snapshot.ships, repair_ids, snapshot.equips).active:
            continue
        for sid in fleet.ship_ids:
            ship = snapshot.ships.get(sid)
            if ship is not None and estimate_repair_duration(ship.now_hp, ship.max_hp, ship.dock_time_ms) > 0:
                return True
    return False


class AutoSwitchGuard:
    """Decides whether the host should bring the anchorage view to front.

    A returning expedition fires its result call and then a port call. The
    port call right after a result is ignored so that other views tracking
    expedition results keep the focus.
    """

    def __init__(self, grace_ms: Optional[int] = None, clock: Optional[Clock] = None) -> None:
        self.grace_ms = int(CONFIG.exped_return_grace_s * 1000) if grace_ms is None else grace_ms
        self._clock: Clock = clock or now_ms
        self._lock_until: Optional[int] = None

    @property
    def locked(self) -> bool:
        return self._lock_until is not None and self._clock() < self._lock_until

    def on_expedition_result(self) -> bool:
        self._lock_until = self._clock() + self.grace_ms
        return False

    def should_switch(self, snapshot: PortSnapshot) -> bool:
        if self._lock_until is not None:
            was_locked = self.locked
            self._lock_until = None
            if was_locked:
                logger.debug("port call right after an expedition result, not switching")
                return False
        return anchorage_has_work(snapshot)

    def check(self, path: str, snapshot: PortSnapshot) -> bool:
        kind = EventKind.from_path(path)
        if kind is EventKind.PORT:
            return self.should_switch(snapshot)
        if kind is EventKind.EXPEDITION_RESULT:
            return self.on_expedition_result()
        return False
