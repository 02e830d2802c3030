import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'anchorage-repair')))

from anchorage.models import Fleet, MasterShip, Ship, SlotItem
from anchorage.sim.eligibility import (
    SRF_ID,
    can_fleet_repair,
    check_nosaki_present,
    check_paired_bonus,
    check_repair_active,
    count_srf,
    find_nosaki,
    get_fleet_basic_info,
    get_fleet_repair_count,
    get_fleet_status,
)


MASTERS = {
    182: MasterShip(id=182, name="明石", stype=19, fuel_max=35, ammo_max=25),
    187: MasterShip(id=187, name="明石改", stype=19, fuel_max=35, ammo_max=25),
    958: MasterShip(id=958, name="朝日改", stype=19, fuel_max=30, ammo_max=15),
    996: MasterShip(id=996, name="野埼", stype=22, fuel_max=60, ammo_max=0),
    1002: MasterShip(id=1002, name="野埼改", stype=22, fuel_max=60, ammo_max=0),
    145: MasterShip(id=145, name="時雨改二", stype=2, fuel_max=15, ammo_max=20),
}

# 101..106 are repair facilities, 200 is something else
EQUIPS = {i: SlotItem(id=i, item_id=SRF_ID) for i in range(101, 107)}
EQUIPS[200] = SlotItem(id=200, item_id=2)


def make_ship(sid, master_id, now_hp=40, max_hp=40, slots=(), cond=49, fuel=None, ammo=None):
    master = MASTERS.get(master_id, MasterShip())
    return Ship(
        id=sid,
        master_id=master_id,
        level=50,
        now_hp=now_hp,
        max_hp=max_hp,
        cond=cond,
        fuel=master.fuel_max if fuel is None else fuel,
        ammo=master.ammo_max if ammo is None else ammo,
        slots=list(slots),
    )


def make_fleet(*ship_ids, fleet_id=1, mission=0):
    ids = list(ship_ids) + [-1] * (6 - len(ship_ids))
    return Fleet(id=fleet_id, ship_ids=ids, mission=[mission, 0, 0, 0])


def ships_of(*ships):
    return {s.id: s for s in ships}


def test_akashi_with_one_facility_repairs_three_slots():
    ships = ships_of(make_ship(1, 182, slots=[101, 200]))
    fleet = make_fleet(1)
    activity = check_repair_active(fleet, ships, [], EQUIPS)
    assert activity.active is True
    assert activity.repair_ship is True
    assert activity.flagship.id == 1
    assert get_fleet_repair_count(fleet, ships, EQUIPS, []) == 3


def test_akashi_kai_without_facility_repairs_two_slots():
    ships = ships_of(make_ship(1, 187))
    assert get_fleet_repair_count(make_fleet(1), ships, EQUIPS, []) == 2


def test_no_flagship_is_inactive():
    activity = check_repair_active(make_fleet(), {}, [])
    assert activity.active is False
    assert activity.repair_ship is False
    assert activity.flagship is None


def test_stale_flagship_id_is_inactive():
    activity = check_repair_active(make_fleet(99), {}, [])
    assert activity.active is False
    assert activity.flagship is None


def test_non_repair_ship_flagship_is_inactive():
    ships = ships_of(make_ship(1, 145))
    activity = check_repair_active(make_fleet(1), ships, [])
    assert activity.active is False
    assert activity.repair_ship is False
    assert activity.flagship.id == 1


def test_damaged_flagship_is_inactive():
    ships = ships_of(make_ship(1, 182, now_hp=20, max_hp=40))
    activity = check_repair_active(make_fleet(1), ships, [])
    assert activity.active is False
    assert activity.repair_ship is True


def test_expedition_or_dock_blocks_repair():
    ships = ships_of(make_ship(1, 182))
    assert check_repair_active(make_fleet(1, mission=1), ships, []).active is False
    assert check_repair_active(make_fleet(1), ships, [1]).active is False
    assert check_repair_active(make_fleet(1), ships, [5]).active is True


def test_asahi_kai_needs_a_facility():
    bare = ships_of(make_ship(1, 958, slots=[200]))
    assert check_repair_active(make_fleet(1), bare, [], EQUIPS).active is False

    equipped = ships_of(make_ship(1, 958, slots=[101]))
    assert check_repair_active(make_fleet(1), equipped, [], EQUIPS).active is True
    assert get_fleet_repair_count(make_fleet(1), equipped, EQUIPS, []) == 1


def test_asahi_kai_without_equipment_table_fails_closed():
    ships = ships_of(make_ship(1, 958, slots=[101]))
    assert check_repair_active(make_fleet(1), ships, [], None).active is False
    assert get_fleet_repair_count(make_fleet(1), ships, None, []) == 0


def test_count_srf():
    assert count_srf(make_ship(1, 182, slots=[101, 102, 200, -1]), EQUIPS) == 2
    assert count_srf(make_ship(1, 182, slots=[101]), None) == 0
    assert count_srf(None, EQUIPS) == 0


def test_paired_bonus_akashi_and_asahi_either_order():
    ships = ships_of(make_ship(1, 187, slots=[101]), make_ship(2, 958, slots=[102]))
    assert check_paired_bonus(make_fleet(1, 2), ships, EQUIPS) is True
    assert check_paired_bonus(make_fleet(2, 1), ships, EQUIPS) is True


def test_paired_bonus_same_variant_is_false():
    ships = ships_of(make_ship(1, 182, slots=[101]), make_ship(2, 182, slots=[102]))
    assert check_paired_bonus(make_fleet(1, 2), ships, EQUIPS) is False
    ships = ships_of(make_ship(1, 958, slots=[101]), make_ship(2, 958, slots=[102]))
    assert check_paired_bonus(make_fleet(1, 2), ships, EQUIPS) is False


def test_paired_bonus_requires_healthy_equipped_second_ship():
    no_srf = ships_of(make_ship(1, 187, slots=[101]), make_ship(2, 958, slots=[200]))
    assert check_paired_bonus(make_fleet(1, 2), no_srf, EQUIPS) is False

    # exactly 75% is not enough
    hurt = ships_of(make_ship(1, 187, slots=[101]), make_ship(2, 958, now_hp=30, max_hp=40, slots=[102]))
    assert check_paired_bonus(make_fleet(1, 2), hurt, EQUIPS) is False

    assert check_paired_bonus(make_fleet(1), no_srf, EQUIPS) is False


def test_repair_count_adds_partner_facilities():
    ships = ships_of(make_ship(1, 187, slots=[101]), make_ship(2, 958, slots=[102, 103]))
    assert get_fleet_repair_count(make_fleet(1, 2), ships, EQUIPS, []) == 5

    ships = ships_of(make_ship(1, 958, slots=[101]), make_ship(2, 182, slots=[102]))
    assert get_fleet_repair_count(make_fleet(1, 2), ships, EQUIPS, []) == 2


def test_repair_count_zero_when_inactive():
    ships = ships_of(make_ship(1, 187, slots=[101, 102]))
    assert get_fleet_repair_count(make_fleet(1, mission=2), ships, EQUIPS, []) == 0


def test_find_nosaki_only_in_first_two_slots():
    ships = ships_of(make_ship(1, 145), make_ship(2, 996), make_ship(3, 1002))
    position, nosaki = find_nosaki(make_fleet(1, 2), ships)
    assert position == 1
    assert nosaki.id == 2

    position, nosaki = find_nosaki(make_fleet(1, 4, 3), ships)
    assert position == -1
    assert nosaki is None

    assert check_nosaki_present(make_fleet(3, 1), ships) is True
    assert check_nosaki_present(make_fleet(1), ships) is False


def test_find_nosaki_needs_master_record_when_given():
    ships = ships_of(make_ship(1, 996))
    assert find_nosaki(make_fleet(1), ships, {})[0] == -1
    assert find_nosaki(make_fleet(1), ships, MASTERS)[0] == 0


def test_status_with_eligible_nosaki():
    ships = ships_of(make_ship(1, 187, slots=[101]), make_ship(2, 1002))
    status = get_fleet_status(make_fleet(1, 2), ships, MASTERS, [], EQUIPS)
    assert status.can_repair is True
    assert status.akashi_flagship is True
    assert status.repair_ship_flagship is True
    assert status.nosaki_present is True
    assert status.nosaki_position == 1
    assert status.nosaki_ship_id == 1002
    assert status.can_boost_morale is True
    assert status.paired_repair_bonus is False
    assert status.in_expedition is False
    assert status.flagship_in_repair is False


def test_nosaki_boost_conditions():
    def boost(nosaki, fleet=None, repair_ids=()):
        ships = ships_of(nosaki)
        fleet = fleet or make_fleet(nosaki.id)
        return get_fleet_status(fleet, ships, MASTERS, list(repair_ids), EQUIPS).can_boost_morale

    assert boost(make_ship(1, 996)) is True
    assert boost(make_ship(1, 996, fuel=59)) is False
    assert boost(make_ship(1, 996, cond=29)) is False
    assert boost(make_ship(1, 996, cond=30)) is True
    assert boost(make_ship(1, 996, now_hp=30, max_hp=40)) is False
    assert boost(make_ship(1, 996, now_hp=31, max_hp=40)) is True
    assert boost(make_ship(1, 996), fleet=make_fleet(1, mission=3)) is False
    assert boost(make_ship(1, 996), repair_ids=[1]) is False


def test_status_paired_bonus_needs_active_flagship():
    ships = ships_of(make_ship(1, 187, slots=[101]), make_ship(2, 958, slots=[102]))
    assert get_fleet_status(make_fleet(1, 2), ships, MASTERS, [], EQUIPS).paired_repair_bonus is True

    status = get_fleet_status(make_fleet(1, 2), ships, MASTERS, [1], EQUIPS)
    assert status.can_repair is False
    assert status.paired_repair_bonus is False
    assert status.flagship_in_repair is True


def test_basic_info_and_can_repair():
    ships = ships_of(make_ship(1, 182))
    fleet = make_fleet(1, fleet_id=3)
    info = get_fleet_basic_info(fleet)
    assert info.id == 3
    assert info.ship_ids == [1, -1, -1, -1, -1, -1]
    assert can_fleet_repair(fleet, ships, MASTERS, []) is True
    assert can_fleet_repair(fleet, ships, MASTERS, [1]) is False
