from __future__ import annotations
import math
from enum import Enum
from ..models import MoraleEstimate, SHIP_TYPE_FACTORS


AKASHI_INTERVAL = 20 * 60 * 1000  # minimum anchorage repair time, ms
NOSAKI_INTERVAL = 15 * 60 * 1000  # morale boost cycle, ms
DOCKING_OFFSET = 30 * 1000  # base overhead in the dock time formula, ms
MODERATE_DAMAGE_THRESHOLD = 0.5
BELOW_MINOR_PERCENT = 0.75
PAIRED_REPAIR_TIME_MULTIPLIER = 0.85

NOSAKI_ID = 996
NOSAKI_KAI_ID = 1002
NOSAKI_COND_MAX = 54
NOSAKI_MIN_COND = 30
NOSAKI_BOOST = {NOSAKI_ID: 2, NOSAKI_KAI_ID: 3}


class HPLabel(str, Enum):
    SUCCESS = "success"
    PRIMARY = "primary"
    WARNING = "warning"


class CountdownLabel(str, Enum):
    PRIMARY = "primary"
    WARNING = "warning"
    SUCCESS = "success"
    DEFAULT = "default"


def minute_ceil(time_ms: float) -> int:
    minute = 60 * 1000
    return int(math.ceil(time_ms / minute) * minute)


def estimate_repair_duration(now_hp: int, max_hp: int, dock_time_ms: int) -> int:
    """Time in ms for the anchorage to bring a ship back to full HP; 0 when it cannot."""
    if dock_time_ms == 0 or now_hp >= max_hp:
        return 0
    # moderate damage or worse is out of reach
    if now_hp <= max_hp * MODERATE_DAMAGE_THRESHOLD:
        return 0
    if max_hp - now_hp == 1:
        return AKASHI_INTERVAL
    return max(minute_ceil(dock_time_ms - DOCKING_OFFSET), AKASHI_INTERVAL)


def time_per_hp(now_hp: int, max_hp: int, dock_time_ms: int) -> float:
    if max_hp * MODERATE_DAMAGE_THRESHOLD <= now_hp < max_hp:
        return (dock_time_ms - DOCKING_OFFSET) / (max_hp - now_hp)
    return 0.0


def time_per_hp_by_level(level: int = 1, stype: int = 1) -> float:
    entry = SHIP_TYPE_FACTORS.get(stype)
    factor = entry.factor if entry is not None else 0.0
    if factor == 0:
        return 0.0
    if level < 12:
        return level * 10 * factor * 1000
    return (level * 5 + (math.floor(math.sqrt(level - 11)) * 10 + 50)) * factor * 1000


def estimate_hp_repaired(
    now_hp: int,
    max_hp: int,
    time_per_hp_ms: float,
    elapsed_s: float = 0,
    available_slot: bool = False,
) -> int:
    if now_hp >= max_hp or time_per_hp_ms == 0 or not available_slot:
        return 0
    if now_hp <= max_hp * MODERATE_DAMAGE_THRESHOLD:
        return 0
    if elapsed_s * 1000 < AKASHI_INTERVAL:
        return 0
    return min(max(int(math.floor(elapsed_s * 1000 / time_per_hp_ms)), 1), max_hp - now_hp)


def morale_boost_estimate(cond: int, booster_master_id: int) -> MoraleEstimate:
    base = NOSAKI_BOOST.get(booster_master_id)
    if base is None or cond >= NOSAKI_COND_MAX:
        return MoraleEstimate(can_boost=False, boost_amount=0)
    return MoraleEstimate(can_boost=True, boost_amount=min(base, NOSAKI_COND_MAX - cond))


def estimate_morale_gained(cond: int, booster_master_id: int, elapsed_s: float) -> int:
    """Condition accrued since the morale timer started, one boost per full cycle."""
    base = NOSAKI_BOOST.get(booster_master_id)
    if base is None or cond >= NOSAKI_COND_MAX or elapsed_s <= 0:
        return 0
    cycles = int(elapsed_s * 1000 // NOSAKI_INTERVAL)
    return min(cycles * base, NOSAKI_COND_MAX - cond)


def hp_label(now_hp: int, max_hp: int, available_slot: bool = True, in_dock: bool = False) -> HPLabel:
    if not available_slot:
        return HPLabel.WARNING
    percentage = now_hp / max_hp if max_hp else 0.0
    if percentage >= 1 or in_dock:
        return HPLabel.SUCCESS
    if percentage >= MODERATE_DAMAGE_THRESHOLD:
        return HPLabel.PRIMARY
    return HPLabel.WARNING


def countdown_label(remaining_s: float) -> CountdownLabel:
    if remaining_s > 600:
        return CountdownLabel.PRIMARY
    if remaining_s > 60:
        return CountdownLabel.WARNING
    if remaining_s >= 0:
        return CountdownLabel.SUCCESS
    return CountdownLabel.DEFAULT


def format_duration(seconds: float) -> str:
    if seconds < 0:
        return ""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
