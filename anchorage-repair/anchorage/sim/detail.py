from __future__ import annotations
from typing import Iterable, List, Mapping
from ..models import (
    Fleet,
    MasterShip,
    PortSnapshot,
    RepairCandidate,
    RepairNotification,
    Ship,
    ShipRepairDetail,
    ShipRepairProgress,
)
from .eligibility import PRIVILEGED_SLOTS
from .rates import (
    PAIRED_REPAIR_TIME_MULTIPLIER,
    countdown_label,
    estimate_hp_repaired,
    estimate_morale_gained,
    estimate_repair_duration,
    hp_label,
    morale_boost_estimate,
    time_per_hp,
    time_per_hp_by_level,
)


def _booster_record_id(fleet: Fleet, ships: Mapping[int, Ship], nosaki_ship_id: int) -> int:
    """Record id of the boosting ship: the first slot 0/1 ship of that master id."""
    if nosaki_ship_id <= 0:
        return -1
    for index in PRIVILEGED_SLOTS:
        ship = ships.get(fleet.slot(index))
        if ship is not None and ship.master_id == nosaki_ship_id:
            return ship.id
    return -1


def get_fleet_repair_detail(
    fleet: Fleet,
    master_ships: Mapping[int, MasterShip],
    ships: Mapping[int, Ship],
    repair_ids: Iterable[int],
    repair_count: int,
    nosaki_ship_id: int = -1,
    paired_bonus: bool = False,
) -> List[ShipRepairDetail]:
    """Per-ship repair and morale figures, in fleet order.

    Repair capacity is handed out first come first served: the first
    ``repair_count`` ships of the fleet get a slot regardless of damage.
    """
    repair_ids = set(repair_ids)
    booster_id = _booster_record_id(fleet, ships, nosaki_ship_id)

    details: List[ShipRepairDetail] = []
    # positions count every occupied slot, including ids missing from the snapshot
    for index, sid in enumerate(sid for sid in fleet.ship_ids if sid > 0):
        ship = ships.get(sid)
        if ship is None:
            continue
        master = master_ships.get(ship.master_id, MasterShip())
        per_hp = time_per_hp_by_level(ship.level, master.stype)
        if paired_bonus:
            per_hp *= PAIRED_REPAIR_TIME_MULTIPLIER
        in_repair = ship.id in repair_ids

        can_boost, boost_amount = False, 0
        # the booster does not boost itself
        if nosaki_ship_id > 0 and ship.id != booster_id and not in_repair:
            morale = morale_boost_estimate(ship.cond, nosaki_ship_id)
            can_boost, boost_amount = morale.can_boost, morale.boost_amount

        details.append(
            ShipRepairDetail(
                id=ship.id,
                master_id=ship.master_id,
                level=ship.level,
                now_hp=ship.now_hp,
                max_hp=ship.max_hp,
                dock_time_ms=ship.dock_time_ms,
                cond=ship.cond,
                name=master.name,
                stype=master.stype,
                estimate=estimate_repair_duration(ship.now_hp, ship.max_hp, ship.dock_time_ms),
                time_per_hp=per_hp,
                in_repair=in_repair,
                available_slot=index < repair_count,
                can_boost_morale=can_boost,
                morale_boost_amount=boost_amount,
            )
        )
    return details


def get_repair_progress(
    details: Iterable[ShipRepairDetail],
    repair_elapsed_s: int = -1,
    nosaki_ship_id: int = -1,
    nosaki_elapsed_s: int = -1,
) -> List[ShipRepairProgress]:
    """Detail rows with the figures that move with the timers.

    Elapsed values are count-up seconds, -1 while the timer is not running.
    """
    rows: List[ShipRepairProgress] = []
    for d in details:
        hp_repaired = 0
        if d.now_hp != d.max_hp and not d.in_repair and repair_elapsed_s >= 0:
            hp_repaired = estimate_hp_repaired(d.now_hp, d.max_hp, d.time_per_hp, repair_elapsed_s, d.available_slot)

        morale_gained = 0
        if d.can_boost_morale and nosaki_elapsed_s >= 0:
            morale_gained = estimate_morale_gained(d.cond, nosaki_ship_id, nosaki_elapsed_s)

        remaining_s = None
        if repair_elapsed_s >= 0 and d.estimate > 0 and d.available_slot and not d.in_repair:
            remaining_s = d.estimate // 1000 - repair_elapsed_s

        rows.append(
            ShipRepairProgress(
                **d.model_dump(),
                hp_repaired=hp_repaired,
                hp_label=hp_label(d.now_hp, d.max_hp, d.available_slot, d.in_repair).value,
                morale_gained=morale_gained,
                remaining_s=remaining_s,
                countdown_label=countdown_label(remaining_s).value if remaining_s is not None else "",
            )
        )
    return rows


def get_repair_candidates(snapshot: PortSnapshot) -> List[RepairCandidate]:
    """Every ship the anchorage could still fix, whether or not it sits in a repair fleet."""
    repair_ids = set(snapshot.repair_ids())
    fleet_by_ship = {sid: f.id for f in snapshot.fleets for sid in f.ship_ids if sid > 0}

    candidates: List[RepairCandidate] = []
    for ship in snapshot.ships.values():
        estimate = estimate_repair_duration(ship.now_hp, ship.max_hp, ship.dock_time_ms)
        if estimate <= 0 or ship.id in repair_ids:
            continue
        master = snapshot.master_ships.get(ship.master_id, MasterShip())
        candidates.append(
            RepairCandidate(
                id=ship.id,
                master_id=ship.master_id,
                name=master.name,
                stype=master.stype,
                level=ship.level,
                now_hp=ship.now_hp,
                max_hp=ship.max_hp,
                hp_ratio=ship.hp_ratio,
                estimate=estimate,
                per_hp=time_per_hp(ship.now_hp, ship.max_hp, ship.dock_time_ms),
                fleet_id=fleet_by_ship.get(ship.id),
            )
        )
    return candidates


def get_repair_notifications(details: Iterable[ShipRepairDetail], last_refresh: int) -> List[RepairNotification]:
    if last_refresh <= 0:
        return []
    return [
        RepairNotification(ship_id=d.id, name=d.name, complete_time=last_refresh + d.estimate)
        for d in details
        if d.estimate > 0 and d.available_slot and not d.in_repair
    ]
