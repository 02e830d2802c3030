from __future__ import annotations
import logging
from typing import List, Optional
from ..models import Fleet, PortSnapshot
from .eligibility import REPAIR_SHIP_ID, find_nosaki, get_fleet_status
from .events import REMOVE_ALL_BUT_FLAGSHIP, REMOVE_SHIP, EventKind, GameEvent
from .rates import AKASHI_INTERVAL, NOSAKI_INTERVAL
from .timers import TIMERS, TimerStateManager


logger = logging.getLogger(__name__)

FLEET_SIZE = 6


def _compact(ids: List[int]) -> List[int]:
    occupied = [sid for sid in ids if sid > 0]
    return occupied + [-1] * (FLEET_SIZE - len(occupied))


def apply_composition_change(fleet: Fleet, slot_index: Optional[int], ship_id: int) -> Fleet:
    """Fleet as it looks after the game applies a composition change."""
    ids = (list(fleet.ship_ids) + [-1] * FLEET_SIZE)[:FLEET_SIZE]
    if ship_id == REMOVE_ALL_BUT_FLAGSHIP:
        ids = [ids[0]] + [-1] * (FLEET_SIZE - 1)
    elif slot_index is None or not 0 <= slot_index < FLEET_SIZE:
        return fleet
    elif ship_id <= 0:
        ids[slot_index] = REMOVE_SHIP
    elif ship_id in ids:
        # moving within the fleet swaps the two slots
        other = ids.index(ship_id)
        ids[other], ids[slot_index] = ids[slot_index], ids[other]
    else:
        ids[slot_index] = ship_id
    return fleet.model_copy(update={"ship_ids": _compact(ids)})


def apply_transfer_out(fleet: Fleet, ship_id: int, replacement: int = -1) -> Fleet:
    """Source fleet after one of its ships moved into another fleet."""
    ids = (list(fleet.ship_ids) + [-1] * FLEET_SIZE)[:FLEET_SIZE]
    if ship_id not in ids:
        return fleet
    ids[ids.index(ship_id)] = replacement if replacement > 0 else REMOVE_SHIP
    return fleet.model_copy(update={"ship_ids": _compact(ids)})


class EventReducer:
    """Applies game events to the shared timers.

    Each call re-reads the snapshot it is given; nothing is carried between
    events except the two timer timestamps.
    """

    def __init__(self, timers: Optional[TimerStateManager] = None) -> None:
        self.timers = timers or TIMERS

    def handle(self, event: GameEvent, snapshot: PortSnapshot) -> None:
        if event.kind is EventKind.PORT:
            self._on_port(snapshot)
            return
        if event.kind is EventKind.COMPOSITION_CHANGE:
            self._on_composition_change(event, snapshot)
            return
        if event.kind is EventKind.EXPEDITION_START:
            self._on_expedition_start(event, snapshot)
            return
        if event.kind is EventKind.DOCK_START:
            self._on_dock_start(event, snapshot)
            return
        # Preset loads, remodels (even Nosaki -> Nosaki Kai) and expedition results leave timers alone
        logger.debug("event %s does not touch timers", event.path or event.kind.name)

    # --------------------------------------------------
    # PORT
    # --------------------------------------------------

    def _on_port(self, snapshot: PortSnapshot) -> None:
        repair_ids = snapshot.repair_ids()
        statuses = [
            get_fleet_status(f, snapshot.ships, snapshot.master_ships, repair_ids, snapshot.equips)
            for f in snapshot.fleets
        ]

        elapsed = self.timers.repair_elapsed_ms()
        if any(s.can_repair for s in statuses) and (elapsed is None or elapsed >= AKASHI_INTERVAL):
            logger.debug("port: repair timer restarted (elapsed=%s)", elapsed)
            self.timers.reset_repair_timer()

        if not any(s.nosaki_present for s in statuses):
            return
        nosaki_elapsed = self.timers.nosaki_elapsed_ms()
        if nosaki_elapsed is None:
            logger.debug("port: Nosaki timer started")
            self.timers.reset_nosaki_timer()
        elif any(s.can_boost_morale for s in statuses) and nosaki_elapsed >= NOSAKI_INTERVAL:
            logger.debug("port: Nosaki timer restarted (elapsed=%s)", nosaki_elapsed)
            self.timers.reset_nosaki_timer()

    # --------------------------------------------------
    # COMPOSITION
    # --------------------------------------------------

    def _on_composition_change(self, event: GameEvent, snapshot: PortSnapshot) -> None:
        fleet = snapshot.get_fleet(event.fleet_id)
        if fleet is None or event.ship_id is None:
            logger.debug("composition change without a known fleet/ship: %s", event)
            return
        after = apply_composition_change(fleet, event.slot_index, event.ship_id)
        if after is fleet:
            logger.debug("composition change with unusable slot index: %s", event)
            return

        changed = [(fleet, after)]
        source = snapshot.fleet_of_ship(event.ship_id)
        if source is not None and source.id != fleet.id:
            # the occupant of the target slot takes the moved ship's place
            displaced = fleet.slot(event.slot_index)
            changed.insert(0, (source, apply_transfer_out(source, event.ship_id, displaced)))

        for old, new in changed:
            self._composition_repair(new, snapshot)
            self._composition_morale(old, new, snapshot)

    def _composition_repair(self, after: Fleet, snapshot: PortSnapshot) -> None:
        flagship = snapshot.ships.get(after.slot(0))
        if flagship is None or flagship.master_id not in REPAIR_SHIP_ID:
            return
        elapsed = self.timers.repair_elapsed_ms()
        if elapsed is None:
            return
        if elapsed < AKASHI_INTERVAL:
            logger.debug("composition: repair timer restarted (elapsed=%s)", elapsed)
            self.timers.reset_repair_timer()
        else:
            # past the interval the HP shown is stale until the next port call
            logger.debug("composition: repair timer cleared")
            self.timers.clear_repair_timer()

    def _composition_morale(self, before: Fleet, after: Fleet, snapshot: PortSnapshot) -> None:
        _, nosaki_before = find_nosaki(before, snapshot.ships, snapshot.master_ships)
        _, nosaki_after = find_nosaki(after, snapshot.ships, snapshot.master_ships)
        elapsed = self.timers.nosaki_elapsed_ms()

        if nosaki_after is None:
            if nosaki_before is not None:
                logger.debug("composition: Nosaki left slots 0/1, timer cleared")
                self.timers.clear_nosaki_timer()
            return

        placed = nosaki_before is None or nosaki_before.id != nosaki_after.id
        if placed and elapsed is None:
            logger.debug("composition: Nosaki placed, timer started")
            self.timers.reset_nosaki_timer()
        elif elapsed is not None and elapsed < NOSAKI_INTERVAL:
            logger.debug("composition: Nosaki timer restarted (elapsed=%s)", elapsed)
            self.timers.reset_nosaki_timer()
        # Changes after a full cycle do not restart the timer

    # --------------------------------------------------
    # EXPEDITION / DOCK
    # --------------------------------------------------

    def _on_expedition_start(self, event: GameEvent, snapshot: PortSnapshot) -> None:
        fleet = snapshot.get_fleet(event.deck_id)
        if fleet is None:
            return
        members = (snapshot.ships.get(sid) for sid in fleet.ship_ids if sid > 0)
        if any(s is not None and s.master_id in REPAIR_SHIP_ID for s in members):
            logger.debug("expedition start: fleet %s carries a repair ship, timer restarted", fleet.id)
            self.timers.reset_repair_timer()

    def _on_dock_start(self, event: GameEvent, snapshot: PortSnapshot) -> None:
        if not event.instant:
            return
        fleet = snapshot.fleet_of_ship(event.ship_id)
        if fleet is None:
            return
        flagship = snapshot.ships.get(fleet.slot(0))
        if flagship is not None and flagship.master_id in REPAIR_SHIP_ID:
            logger.debug("instant repair in fleet %s, repair timer restarted", fleet.id)
            self.timers.reset_repair_timer()
