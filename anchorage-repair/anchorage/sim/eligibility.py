from __future__ import annotations
import logging
from typing import Dict, Iterable, Mapping, Optional, Tuple
from ..models import Fleet, FleetBasicInfo, FleetStatus, MasterShip, RepairActivity, Ship, SlotItem
from .rates import BELOW_MINOR_PERCENT, MODERATE_DAMAGE_THRESHOLD, NOSAKI_ID, NOSAKI_KAI_ID, NOSAKI_MIN_COND


logger = logging.getLogger(__name__)

AKASHI_ID: Tuple[int, ...] = (182, 187)  # Akashi, Akashi Kai
ASAHI_KAI_ID = 958
REPAIR_SHIP_ID: Tuple[int, ...] = AKASHI_ID + (ASAHI_KAI_ID,)
NOSAKI_ID_LIST: Tuple[int, ...] = (NOSAKI_ID, NOSAKI_KAI_ID)
SRF_ID = 86  # Ship Repair Facility

# Ships that always cover this many slots before any SRF is counted
BASE_REPAIR_ALLOWANCE: Dict[int, int] = {182: 2, 187: 2, ASAHI_KAI_ID: 0}

PRIVILEGED_SLOTS = (0, 1)


def get_fleet_basic_info(fleet: Fleet) -> FleetBasicInfo:
    return FleetBasicInfo(id=fleet.id if fleet.id else -1, ship_ids=list(fleet.ship_ids))


def _ship_at(fleet: Fleet, ships: Mapping[int, Ship], index: int) -> Optional[Ship]:
    return ships.get(fleet.slot(index))


def count_srf(ship: Optional[Ship], equips: Optional[Mapping[int, SlotItem]]) -> int:
    if ship is None or equips is None:
        return 0
    count = 0
    for item_id in ship.slots:
        item = equips.get(item_id)
        if item is not None and item.item_id == SRF_ID:
            count += 1
    return count


def check_repair_active(
    fleet: Fleet,
    ships: Mapping[int, Ship],
    repair_ids: Iterable[int],
    equips: Optional[Mapping[int, SlotItem]] = None,
) -> RepairActivity:
    flagship = _ship_at(fleet, ships, 0)
    if flagship is None:
        return RepairActivity()
    if flagship.master_id not in REPAIR_SHIP_ID:
        return RepairActivity(flagship=flagship)
    if flagship.now_hp <= flagship.max_hp * MODERATE_DAMAGE_THRESHOLD:
        return RepairActivity(repair_ship=True, flagship=flagship)
    # Asahi Kai only repairs with an SRF aboard; unknown equipment counts as none
    if flagship.master_id == ASAHI_KAI_ID and count_srf(flagship, equips) == 0:
        return RepairActivity(repair_ship=True, flagship=flagship)
    active = not fleet.in_expedition and flagship.id not in set(repair_ids)
    return RepairActivity(active=active, repair_ship=True, flagship=flagship)


def find_nosaki(
    fleet: Fleet,
    ships: Mapping[int, Ship],
    master_ships: Optional[Mapping[int, MasterShip]] = None,
) -> Tuple[int, Optional[Ship]]:
    """Position and record of the first Nosaki in slot 0 or 1, or (-1, None).

    When master data is supplied the Nosaki must resolve against it to count.
    """
    for index in PRIVILEGED_SLOTS:
        ship = _ship_at(fleet, ships, index)
        if ship is None or ship.master_id not in NOSAKI_ID_LIST:
            continue
        if master_ships is not None and ship.master_id not in master_ships:
            logger.debug("Nosaki %s has no master record, ignoring", ship.id)
            continue
        return index, ship
    return -1, None


def check_nosaki_present(fleet: Fleet, ships: Mapping[int, Ship]) -> bool:
    position, _ = find_nosaki(fleet, ships)
    return position >= 0


def check_paired_bonus(
    fleet: Fleet,
    ships: Mapping[int, Ship],
    equips: Optional[Mapping[int, SlotItem]] = None,
) -> bool:
    """Akashi and Asahi Kai together in slots 0 and 1, in either order."""
    first = _ship_at(fleet, ships, 0)
    second = _ship_at(fleet, ships, 1)
    if first is None or second is None:
        return False
    pair = {first.master_id, second.master_id}
    if ASAHI_KAI_ID not in pair or not pair & set(AKASHI_ID):
        return False
    if second.now_hp <= second.max_hp * BELOW_MINOR_PERCENT:
        return False
    return count_srf(second, equips) > 0


def _can_boost_morale(
    fleet: Fleet,
    nosaki: Ship,
    master: MasterShip,
    repair_ids: Iterable[int],
) -> bool:
    fully_supplied = nosaki.fuel >= master.fuel_max and nosaki.ammo >= master.ammo_max
    healthy = nosaki.now_hp > nosaki.max_hp * BELOW_MINOR_PERCENT
    return (
        fully_supplied
        and healthy
        and nosaki.cond >= NOSAKI_MIN_COND
        and not fleet.in_expedition
        and nosaki.id not in set(repair_ids)
    )


def get_fleet_status(
    fleet: Fleet,
    ships: Mapping[int, Ship],
    master_ships: Mapping[int, MasterShip],
    repair_ids: Iterable[int],
    equips: Optional[Mapping[int, SlotItem]] = None,
) -> FleetStatus:
    repair_ids = list(repair_ids)
    activity = check_repair_active(fleet, ships, repair_ids, equips)
    flagship = activity.flagship

    paired = activity.active and check_paired_bonus(fleet, ships, equips)

    position, nosaki = find_nosaki(fleet, ships, master_ships)
    can_boost = False
    if nosaki is not None:
        can_boost = _can_boost_morale(fleet, nosaki, master_ships[nosaki.master_id], repair_ids)

    return FleetStatus(
        can_repair=activity.active,
        akashi_flagship=flagship is not None and flagship.master_id in AKASHI_ID,
        repair_ship_flagship=activity.repair_ship,
        paired_repair_bonus=paired,
        nosaki_present=nosaki is not None,
        nosaki_position=position,
        nosaki_ship_id=nosaki.master_id if nosaki is not None else -1,
        can_boost_morale=can_boost,
        in_expedition=fleet.in_expedition,
        flagship_in_repair=fleet.slot(0) in repair_ids,
    )


def get_fleet_repair_count(
    fleet: Fleet,
    ships: Mapping[int, Ship],
    equips: Optional[Mapping[int, SlotItem]],
    repair_ids: Iterable[int],
) -> int:
    """Number of fleet slots the anchorage repairs this cycle."""
    activity = check_repair_active(fleet, ships, repair_ids, equips)
    if not activity.active or activity.flagship is None:
        return 0
    count = BASE_REPAIR_ALLOWANCE.get(activity.flagship.master_id, 0)
    count += count_srf(activity.flagship, equips)
    if check_paired_bonus(fleet, ships, equips):
        count += count_srf(_ship_at(fleet, ships, 1), equips)
    return count


def can_fleet_repair(
    fleet: Fleet,
    ships: Mapping[int, Ship],
    master_ships: Mapping[int, MasterShip],
    repair_ids: Iterable[int],
    equips: Optional[Mapping[int, SlotItem]] = None,
) -> bool:
    return get_fleet_status(fleet, ships, master_ships, repair_ids, equips).can_repair
