import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'anchorage-repair')))

from anchorage.sim.rates import (
    AKASHI_INTERVAL,
    CountdownLabel,
    HPLabel,
    countdown_label,
    estimate_hp_repaired,
    estimate_morale_gained,
    estimate_repair_duration,
    format_duration,
    hp_label,
    minute_ceil,
    morale_boost_estimate,
    time_per_hp,
    time_per_hp_by_level,
)


def test_minute_ceil_rounds_up_to_whole_minutes():
    assert minute_ceil(300000) == 300000
    assert minute_ceil(300001) == 360000
    assert minute_ceil(0) == 0


def test_repair_duration_short_dock_time_uses_minimum_interval():
    # 330000 - 30000 rounds to 5 minutes, below the 20 minute floor
    assert estimate_repair_duration(35, 40, 330000) == 1200000
    assert estimate_repair_duration(35, 40, 330000) == AKASHI_INTERVAL


def test_repair_duration_long_dock_time_rounds_to_minute():
    assert estimate_repair_duration(60, 100, 3630000) == 3600000
    assert estimate_repair_duration(60, 100, 3645000) == 3660000


def test_repair_duration_ineligible_cases():
    assert estimate_repair_duration(35, 40, 0) == 0
    assert estimate_repair_duration(40, 40, 330000) == 0
    # moderate damage or worse
    assert estimate_repair_duration(20, 40, 900000) == 0
    assert estimate_repair_duration(5, 40, 900000) == 0


def test_repair_duration_single_hp():
    assert estimate_repair_duration(39, 40, 5000000) == AKASHI_INTERVAL


def test_time_per_hp_is_continuous():
    assert time_per_hp(35, 40, 330000) == 60000
    assert time_per_hp(20, 40, 330000) == 15000
    assert time_per_hp(40, 40, 330000) == 0
    assert time_per_hp(19, 40, 330000) == 0


def test_time_per_hp_by_level_and_type():
    assert time_per_hp_by_level() == 5000
    assert time_per_hp_by_level(10, 2) == 100000
    assert time_per_hp_by_level(12, 2) == 120000
    assert time_per_hp_by_level(27, 9) == 450000
    # zero factor and unknown types
    assert time_per_hp_by_level(50, 12) == 0
    assert time_per_hp_by_level(50, 15) == 0
    assert time_per_hp_by_level(50, 99) == 0


def test_estimate_hp_repaired():
    assert estimate_hp_repaired(35, 40, 60000, 1200, True) == 5
    assert estimate_hp_repaired(30, 40, 600000, 1200, True) == 2
    # at least one HP once the interval has passed
    assert estimate_hp_repaired(39, 40, 5000000, 1200, True) == 1


def test_estimate_hp_repaired_zero_cases():
    assert estimate_hp_repaired(35, 40, 60000, 1200, False) == 0
    assert estimate_hp_repaired(35, 40, 60000, 1199, True) == 0
    assert estimate_hp_repaired(35, 40, 0, 5000, True) == 0
    assert estimate_hp_repaired(40, 40, 60000, 5000, True) == 0
    assert estimate_hp_repaired(20, 40, 60000, 5000, True) == 0


def test_morale_boost_estimate():
    est = morale_boost_estimate(53, 996)
    assert est.can_boost is True
    assert est.boost_amount == 1

    est = morale_boost_estimate(49, 1002)
    assert est.can_boost is True
    assert est.boost_amount == 3

    assert morale_boost_estimate(49, 996).boost_amount == 2
    assert morale_boost_estimate(54, 996).can_boost is False
    assert morale_boost_estimate(60, 1002).boost_amount == 0
    assert morale_boost_estimate(40, 182).can_boost is False


def test_estimate_morale_gained_counts_full_cycles():
    assert estimate_morale_gained(40, 996, 1800) == 4
    assert estimate_morale_gained(40, 1002, 1799) == 3
    assert estimate_morale_gained(52, 1002, 3600) == 2
    assert estimate_morale_gained(40, 996, 899) == 0
    assert estimate_morale_gained(40, 996, -1) == 0
    assert estimate_morale_gained(40, 182, 3600) == 0


def test_hp_label():
    assert hp_label(40, 40) is HPLabel.SUCCESS
    assert hp_label(30, 40) is HPLabel.PRIMARY
    assert hp_label(20, 40) is HPLabel.PRIMARY
    assert hp_label(19, 40) is HPLabel.WARNING
    assert hp_label(30, 40, available_slot=False) is HPLabel.WARNING
    assert hp_label(10, 40, in_dock=True) is HPLabel.SUCCESS


def test_countdown_label():
    assert countdown_label(601) is CountdownLabel.PRIMARY
    assert countdown_label(600) is CountdownLabel.WARNING
    assert countdown_label(61) is CountdownLabel.WARNING
    assert countdown_label(60) is CountdownLabel.SUCCESS
    assert countdown_label(0) is CountdownLabel.SUCCESS
    assert countdown_label(-1) is CountdownLabel.DEFAULT


def test_format_duration():
    assert format_duration(3725) == "01:02:05"
    assert format_duration(0) == "00:00:00"
    assert format_duration(36000 + 59) == "10:00:59"
    assert format_duration(-1) == ""
