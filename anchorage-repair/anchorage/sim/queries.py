from __future__ import annotations
from typing import List, Optional
from ..models import FleetBasicInfo, FleetStatus, PortSnapshot, ShipRepairDetail, ShipRepairProgress
from .detail import get_fleet_repair_detail, get_repair_progress
from .eligibility import can_fleet_repair, get_fleet_basic_info, get_fleet_repair_count, get_fleet_status


# Lookups by fleet id; an unknown fleet gives an empty result rather than an error


def fleet_ids(snapshot: PortSnapshot) -> List[int]:
    return [f.id if f.id else -1 for f in snapshot.fleets]


def fleet_basic_info(snapshot: PortSnapshot, fleet_id: int) -> Optional[FleetBasicInfo]:
    fleet = snapshot.get_fleet(fleet_id)
    return get_fleet_basic_info(fleet) if fleet is not None else None


def fleet_status(snapshot: PortSnapshot, fleet_id: int) -> Optional[FleetStatus]:
    fleet = snapshot.get_fleet(fleet_id)
    if fleet is None:
        return None
    return get_fleet_status(fleet, snapshot.ships, snapshot.master_ships, snapshot.repair_ids(), snapshot.equips)


def fleet_repair_count(snapshot: PortSnapshot, fleet_id: int) -> int:
    fleet = snapshot.get_fleet(fleet_id)
    if fleet is None:
        return 0
    return get_fleet_repair_count(fleet, snapshot.ships, snapshot.equips, snapshot.repair_ids())


def fleet_repair_detail(snapshot: PortSnapshot, fleet_id: int) -> List[ShipRepairDetail]:
    fleet = snapshot.get_fleet(fleet_id)
    if fleet is None:
        return []
    status = fleet_status(snapshot, fleet_id)
    # a Nosaki that is present but not eligible grants nothing
    nosaki_ship_id = status.nosaki_ship_id if status.can_boost_morale else -1
    return get_fleet_repair_detail(
        fleet,
        snapshot.master_ships,
        snapshot.ships,
        snapshot.repair_ids(),
        fleet_repair_count(snapshot, fleet_id),
        nosaki_ship_id,
        status.paired_repair_bonus,
    )


def fleet_repair_progress(
    snapshot: PortSnapshot,
    fleet_id: int,
    repair_elapsed_s: int = -1,
    nosaki_elapsed_s: int = -1,
) -> List[ShipRepairProgress]:
    status = fleet_status(snapshot, fleet_id)
    if status is None:
        return []
    nosaki_ship_id = status.nosaki_ship_id if status.can_boost_morale else -1
    return get_repair_progress(
        fleet_repair_detail(snapshot, fleet_id),
        repair_elapsed_s,
        nosaki_ship_id,
        nosaki_elapsed_s,
    )


def fleet_can_repair(snapshot: PortSnapshot, fleet_id: int) -> bool:
    fleet = snapshot.get_fleet(fleet_id)
    if fleet is None:
        return False
    return can_fleet_repair(fleet, snapshot.ships, snapshot.master_ships, snapshot.repair_ids(), snapshot.equips)
