from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Iterable, List, Mapping, TypeVar

T = TypeVar("T")


def _from_mapping(cls: type[T], data: Mapping[str, Any]) -> T:
    names = {item.name for item in fields(cls)}
    return cls(**{key: value for key, value in data.items() if key in names})


@dataclass(frozen=True)
class Weapon:
    id: str
    name: str
    type: str  # "close" or "ranged"
    base_cost: int
    max_actions: int = 0
    notes: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Weapon":
        return _from_mapping(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Equipment:
    id: str
    name: str
    type: str  # "Passive" or "Action"
    base_cost: int
    effect: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Equipment":
        return _from_mapping(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PsychicPower:
    id: str
    name: str
    type: str  # "Attack", "Effect" or "Either"
    cost: int
    effect: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PsychicPower":
        return _from_mapping(cls, data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Definition:
    name: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


CLOSE_COMBAT_WEAPONS: List[Weapon] = [
    Weapon("unarmed", "Unarmed", "close", 0, 3, "-1DT to Power rolls"),
    Weapon("melee-weapon", "Melee Weapon", "close", 1, 3),
    Weapon("claws-teeth", "Claws & Teeth", "close", 2, 3, "Natural weapon"),
    Weapon("horrible-claws-teeth", "Horrible Claws & Teeth", "close", 3, 3, "Natural weapon, +1DT to Power rolls"),
    Weapon("whip-tail", "Whip/Tail", "close", 2, 3, "Natural weapon, reach 2 inches"),
    Weapon("power-weapon", "Power Weapon", "close", 3, 2, "+1DT to Power rolls"),
]

RANGED_WEAPONS: List[Weapon] = [
    Weapon("auto-pistol", "Auto Pistol", "ranged", 0, 3, "Aim: +1 to Firepower roll"),
    Weapon("auto-rifle", "Auto Rifle", "ranged", 1, 3, "Aim: +1 to Firepower roll"),
    Weapon("beam-pistol", "Beam Pistol", "ranged", 3, 3, "+1DT to Power rolls"),
    Weapon("beam-rifle", "Beam Rifle", "ranged", 3, 3, "+1DT to Power rolls, Aim"),
    Weapon("flamethrower", "Flamethrower", "ranged", 2, 2, "Template, ignores cover"),
    Weapon("rocket-launcher", "Rocket Launcher", "ranged", 4, 1, "Blast 3 inches"),
]

EQUIPMENT: List[Equipment] = [
    Equipment("cybernetics", "Cybernetics", "Passive", 1, "+1 to Power rolls"),
    Equipment("grenade", "Grenade", "Action", 1, "Blast 3 inches, once per game"),
    Equipment("heavy-armor", "Heavy Armor", "Passive", 1, "+1 to Defense rolls"),
    Equipment("jump-pack", "Jump Pack", "Passive", 1, "Ignore terrain when moving"),
    Equipment("medkit", "Medkit", "Action", 1, "Heal a knocked-down ally in base contact"),
    Equipment("stealth-suit", "Stealth Suit", "Passive", 1, "-1 to enemy Firepower rolls beyond 12 inches"),
    Equipment("targeting-reticle", "Targeting Reticle", "Passive", 1, "+1 to Firepower rolls"),
]

PSYCHIC_POWERS: List[PsychicPower] = [
    PsychicPower("fear", "Fear", "Effect", 1, "Target must move away from the caster"),
    PsychicPower("healing", "Healing", "Effect", 1, "Recover a wound on a friendly weirdo"),
    PsychicPower("mind-stab", "Mind Stab", "Attack", 3, "Willpower attack, ignores cover"),
    PsychicPower("psychic-shriek", "Psychic Shriek", "Attack", 2, "Attack every weirdo within 3 inches"),
    PsychicPower("telekinesis", "Telekinesis", "Either", 1, "Move a target up to 3 inches"),
]

LEADER_TRAITS: List[Definition] = [
    Definition("Bounty Hunter", "Gain a bonus point of victory for each enemy leader taken out."),
    Definition("Healer", "Once per turn, a friendly weirdo within 3 inches may recover."),
    Definition("Majestic", "Friendly weirdos within 6 inches re-roll failed Willpower rolls."),
    Definition("Monstrous", "Enemies in base contact suffer -1 to Prowess rolls."),
    Definition("Political Officer", "Friendly weirdos within 6 inches ignore the first panic."),
    Definition("Sorcerer", "May cast one psychic power per turn without an action."),
    Definition("Tactician", "Re-roll the initiative roll once per game."),
]

WARBAND_ABILITIES: List[Definition] = [
    Definition("Cyborgs", "Each weirdo may carry one additional piece of equipment."),
    Definition("Fanatics", "Weirdos never become panicked."),
    Definition("Living Weapons", "Unarmed attacks do not suffer the Power penalty."),
    Definition("Heavily Armed", "Ranged weapons cost 1 point less."),
    Definition("Mutants", "Speed and natural weapons cost 1 point less."),
    Definition("Soldiers", "Grenades, Heavy Armor and Medkits are free."),
    Definition("Undead", "Knocked-down weirdos may stand up on a successful roll."),
]

ABILITY_NAMES = tuple(definition.name for definition in WARBAND_ABILITIES)
LEADER_TRAIT_NAMES = tuple(definition.name for definition in LEADER_TRAITS)


def _find(items: Iterable[T], identifier: str | None) -> T | None:
    if not identifier:
        return None
    key = identifier.strip().casefold()
    for item in items:
        if getattr(item, "id").casefold() == key or getattr(item, "name").casefold() == key:
            return item
    return None


def all_weapons() -> List[Weapon]:
    return [*CLOSE_COMBAT_WEAPONS, *RANGED_WEAPONS]


def find_weapon(identifier: str | None) -> Weapon | None:
    return _find(all_weapons(), identifier)


def find_equipment(identifier: str | None) -> Equipment | None:
    return _find(EQUIPMENT, identifier)


def find_psychic_power(identifier: str | None) -> PsychicPower | None:
    return _find(PSYCHIC_POWERS, identifier)
