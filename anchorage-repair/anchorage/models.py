from __future__ import annotations
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ApiModel(BaseModel):
    # Records arrive in raw game API shape (api_* keys) or are built by keyword in code
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Ship(ApiModel):
    id: int = Field(alias="api_id")
    master_id: int = Field(alias="api_ship_id")
    level: int = Field(default=1, alias="api_lv")
    now_hp: int = Field(alias="api_nowhp")
    max_hp: int = Field(alias="api_maxhp")
    cond: int = Field(default=49, alias="api_cond")
    fuel: int = Field(default=0, alias="api_fuel")
    ammo: int = Field(default=0, alias="api_bull")
    slots: List[int] = Field(default_factory=list, alias="api_slot")
    dock_time_ms: int = Field(default=0, alias="api_ndock_time")

    @model_validator(mode="after")
    def _hp_in_range(self) -> "Ship":
        if not 0 <= self.now_hp <= self.max_hp:
            raise ValueError(f"ship {self.id}: now_hp {self.now_hp} outside 0..{self.max_hp}")
        return self

    @property
    def hp_ratio(self) -> float:
        return self.now_hp / self.max_hp if self.max_hp else 0.0


class MasterShip(ApiModel):
    id: int = Field(default=0, alias="api_id")
    name: str = Field(default="", alias="api_name")
    stype: int = Field(default=0, alias="api_stype")
    fuel_max: int = Field(default=0, alias="api_fuel_max")
    ammo_max: int = Field(default=0, alias="api_bull_max")


class SlotItem(ApiModel):
    id: int = Field(alias="api_id")
    item_id: int = Field(alias="api_slotitem_id")


class Fleet(ApiModel):
    id: int = Field(default=-1, alias="api_id")
    ship_ids: List[int] = Field(default_factory=list, alias="api_ship")
    mission: List[int] = Field(default_factory=list, alias="api_mission")

    @property
    def in_expedition(self) -> bool:
        return bool(self.mission and self.mission[0])

    def slot(self, index: int) -> int:
        """Ship id at a slot position, -1 when the slot is empty or out of range."""
        if 0 <= index < len(self.ship_ids):
            return self.ship_ids[index]
        return -1


class RepairDock(ApiModel):
    ship_id: int = Field(default=0, alias="api_ship_id")


class PortSnapshot(ApiModel):
    """Point-in-time view of the host game state consumed by every query."""

    fleets: List[Fleet] = Field(default_factory=list)
    ships: Dict[int, Ship] = Field(default_factory=dict)
    master_ships: Dict[int, MasterShip] = Field(default_factory=dict, alias="$ships")
    # None means the equipment table has not been received yet
    equips: Optional[Dict[int, SlotItem]] = None
    repairs: List[RepairDock] = Field(default_factory=list)

    def repair_ids(self) -> List[int]:
        return [dock.ship_id for dock in self.repairs if dock.ship_id > 0]

    def get_fleet(self, fleet_id: Optional[int]) -> Optional[Fleet]:
        if fleet_id is None:
            return None
        return next((f for f in self.fleets if f.id == fleet_id), None)

    def fleet_of_ship(self, ship_id: Optional[int]) -> Optional[Fleet]:
        if ship_id is None or ship_id <= 0:
            return None
        return next((f for f in self.fleets if ship_id in f.ship_ids), None)


# --------------------------------------------------
# DERIVED VIEWS
# --------------------------------------------------

class FleetBasicInfo(BaseModel):
    id: int
    ship_ids: List[int]


class RepairActivity(BaseModel):
    active: bool = False
    repair_ship: bool = False
    flagship: Optional[Ship] = None


class FleetStatus(BaseModel):
    can_repair: bool = False
    akashi_flagship: bool = False
    repair_ship_flagship: bool = False
    paired_repair_bonus: bool = False
    nosaki_present: bool = False
    nosaki_position: int = -1
    nosaki_ship_id: int = -1
    can_boost_morale: bool = False
    in_expedition: bool = False
    flagship_in_repair: bool = False


class MoraleEstimate(BaseModel):
    can_boost: bool = False
    boost_amount: int = 0


class ShipRepairDetail(BaseModel):
    id: int
    master_id: int
    level: int
    now_hp: int
    max_hp: int
    dock_time_ms: int
    cond: int
    name: str = ""
    stype: int = 0
    estimate: int = 0  # ms until fully repaired by the anchorage
    time_per_hp: float = 0.0  # ms per HP
    in_repair: bool = False
    available_slot: bool = False
    can_boost_morale: bool = False
    morale_boost_amount: int = 0


class ShipRepairProgress(ShipRepairDetail):
    """Fleet detail combined with the running repair and Nosaki timers."""

    hp_repaired: int = 0
    hp_label: str = ""
    morale_gained: int = 0
    # seconds until the anchorage finishes this ship; None when no countdown runs
    remaining_s: Optional[int] = None
    countdown_label: str = ""


class RepairCandidate(BaseModel):
    id: int
    master_id: int
    name: str = ""
    stype: int = 0
    level: int
    now_hp: int
    max_hp: int
    hp_ratio: float
    estimate: int
    per_hp: float
    fleet_id: Optional[int] = None


class RepairNotification(BaseModel):
    ship_id: int
    name: str = ""
    complete_time: int  # epoch ms


class ShipTypeFactor(BaseModel):
    id: int
    name: str
    factor: float = 0.0


def _factor_table(rows: List[tuple]) -> Dict[int, ShipTypeFactor]:
    return {i: ShipTypeFactor(id=i, name=n, factor=f) for i, n, f in rows}


# Anchorage repair speed multiplier per ship type (api_stype)
SHIP_TYPE_FACTORS: Dict[int, ShipTypeFactor] = _factor_table([
    (1, "海防艦", 0.5),
    (2, "駆逐艦", 1),
    (3, "軽巡洋艦", 1),
    (4, "重雷装巡洋艦", 1),
    (5, "重巡洋艦", 1.5),
    (6, "航空巡洋艦", 1.5),
    (7, "軽空母", 1.5),
    (8, "巡洋戦艦", 1.5),
    (9, "戦艦", 2),
    (10, "航空戦艦", 2),
    (11, "正規空母", 2),
    (12, "超弩級戦艦", 0),
    (13, "潜水艦", 0.5),
    (14, "潜水空母", 1),
    (15, "補給艦", 0),
    (16, "水上機母艦", 1),
    (17, "揚陸艦", 1),
    (18, "装甲空母", 2),
    (19, "工作艦", 1),
    (20, "潜水母艦", 1),
    (21, "練習巡洋艦", 1),
    (22, "補給艦", 1),
])
