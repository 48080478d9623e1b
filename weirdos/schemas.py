from __future__ import annotations

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel, Field

SpeedLevel = Literal[1, 2, 3]
DiceLevel = Literal["2d6", "2d8", "2d10"]
FirepowerLevel = Literal["None", "2d8", "2d10"]
WeirdoType = Literal["leader", "trooper"]
WarbandAbility = Literal[
    "Cyborgs",
    "Fanatics",
    "Living Weapons",
    "Heavily Armed",
    "Mutants",
    "Soldiers",
    "Undead",
]
LeaderTrait = Literal[
    "Bounty Hunter",
    "Healer",
    "Majestic",
    "Monstrous",
    "Political Officer",
    "Sorcerer",
    "Tactician",
]


class AttributesPayload(BaseModel):
    speed: SpeedLevel | None = None
    defense: DiceLevel | None = None
    firepower: FirepowerLevel | None = None
    prowess: DiceLevel | None = None
    willpower: DiceLevel | None = None


class WeaponPayload(BaseModel):
    id: str
    name: str = Field(..., max_length=120)
    type: Literal["close", "ranged"]
    base_cost: int = Field(0, ge=0)
    max_actions: int = Field(0, ge=0)
    notes: str = ""


class EquipmentPayload(BaseModel):
    id: str
    name: str = Field(..., max_length=120)
    type: Literal["Passive", "Action"]
    base_cost: int = Field(0, ge=0)
    effect: str = ""


class PsychicPowerPayload(BaseModel):
    id: str
    name: str = Field(..., max_length=120)
    type: Literal["Attack", "Effect", "Either"]
    cost: int = Field(0, ge=0)
    effect: str = ""


class WeirdoPayload(BaseModel):
    id: str | None = None
    name: str = Field("", max_length=120)
    type: WeirdoType = "trooper"
    attributes: AttributesPayload | None = None
    close_combat_weapons: List[WeaponPayload] = Field(default_factory=list)
    ranged_weapons: List[WeaponPayload] = Field(default_factory=list)
    equipment: List[EquipmentPayload] = Field(default_factory=list)
    psychic_powers: List[PsychicPowerPayload] = Field(default_factory=list)
    leader_trait: LeaderTrait | None = None
    notes: str = ""
    total_cost: int = 0


class WarbandPayload(BaseModel):
    id: str | None = None
    name: str = Field("", max_length=120)
    ability: WarbandAbility | None = None
    point_limit: int = 75
    total_cost: int = 0
    weirdos: List[WeirdoPayload] = Field(default_factory=list)


class WarbandForm(BaseModel):
    name: str = Field(..., max_length=120)
    point_limit: int = 75
    ability: WarbandAbility | None = None


class WarbandUpdate(BaseModel):
    name: str | None = Field(None, max_length=120)
    point_limit: int | None = None
    ability: WarbandAbility | None = None


class CalculateCostRequest(BaseModel):
    weirdo: WeirdoPayload | None = None
    warband: WarbandPayload | None = None
    warband_ability: WarbandAbility | None = None


class ValidateRequest(BaseModel):
    weirdo: WeirdoPayload | None = None
    warband: WarbandPayload | None = None


class MoveRequest(BaseModel):
    direction: Literal["up", "down"]


class ReorderRequest(BaseModel):
    order: List[str]


class WarbandSummary(BaseModel):
    id: str
    name: str
    ability: str | None
    point_limit: int
    total_cost: int
    weirdo_count: int
    updated_at: datetime | None


class ExportDocument(BaseModel):
    format_version: int = 1
    exported_at: datetime | None = None
    warband: WarbandPayload
