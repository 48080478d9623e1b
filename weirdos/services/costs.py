"""Point costs for weirdos and warbands.

Every function reads its inputs by attribute name, so ORM rows, API payloads
and plain namespaces are all accepted.  Warband abilities only ever discount a
single item at a time and each contribution is clamped at zero before it is
added to a total.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable

from .ruleset import ATTRIBUTE_NAMES, Ruleset, default_ruleset


@dataclass(frozen=True)
class CostBreakdown:
    attributes: int
    weapons: int
    equipment: int
    psychic_powers: int

    @property
    def total(self) -> int:
        return self.attributes + self.weapons + self.equipment + self.psychic_powers

    def to_dict(self) -> dict[str, int]:
        payload = asdict(self)
        payload["total"] = self.total
        return payload


def _rules(ruleset: Ruleset | None) -> Ruleset:
    return ruleset if ruleset is not None else default_ruleset()


def _items(source: Any, attr: str) -> Iterable[Any]:
    value = getattr(source, attr, None)
    return value if value is not None else ()


def _base(item: Any, attr: str) -> int:
    value = getattr(item, attr, 0)
    return int(value or 0)


def attribute_cost(
    attribute: str, level: Any, ability: str | None, ruleset: Ruleset | None = None
) -> int:
    rules = _rules(ruleset)
    table = rules.attribute_costs.get(attribute)
    if table is None:
        raise ValueError(f"Unknown attribute: {attribute!r}")
    if level is None:
        return 0
    try:
        cost = table[str(level)]
    except KeyError:
        raise ValueError(f"Unknown {attribute} level: {level!r}") from None

    if ability == "Mutants" and attribute == "speed":
        cost -= rules.mutant_discount

    return max(0, cost)


def weapon_cost(weapon: Any, ability: str | None, ruleset: Ruleset | None = None) -> int:
    rules = _rules(ruleset)
    cost = _base(weapon, "base_cost")
    weapon_type = getattr(weapon, "type", None)

    if ability == "Heavily Armed" and weapon_type == "ranged":
        cost -= rules.heavily_armed_discount
    elif (
        ability == "Mutants"
        and weapon_type == "close"
        and getattr(weapon, "name", None) in rules.mutant_weapons
    ):
        cost -= rules.mutant_discount

    return max(0, cost)


def equipment_cost(equipment: Any, ability: str | None, ruleset: Ruleset | None = None) -> int:
    rules = _rules(ruleset)
    if ability == "Soldiers" and getattr(equipment, "name", None) in rules.soldier_free_equipment:
        return 0
    return max(0, _base(equipment, "base_cost"))


def psychic_power_cost(power: Any) -> int:
    return _base(power, "cost")


def cost_breakdown(
    weirdo: Any, ability: str | None, ruleset: Ruleset | None = None
) -> CostBreakdown:
    rules = _rules(ruleset)

    attributes = getattr(weirdo, "attributes", None)
    attribute_total = 0
    if attributes is not None:
        for name in ATTRIBUTE_NAMES:
            attribute_total += attribute_cost(name, getattr(attributes, name, None), ability, rules)

    weapon_total = 0
    for weapon in _items(weirdo, "close_combat_weapons"):
        weapon_total += weapon_cost(weapon, ability, rules)
    for weapon in _items(weirdo, "ranged_weapons"):
        weapon_total += weapon_cost(weapon, ability, rules)

    equipment_total = sum(
        equipment_cost(item, ability, rules) for item in _items(weirdo, "equipment")
    )
    power_total = sum(psychic_power_cost(power) for power in _items(weirdo, "psychic_powers"))

    return CostBreakdown(
        attributes=attribute_total,
        weapons=weapon_total,
        equipment=equipment_total,
        psychic_powers=power_total,
    )


def weirdo_cost(weirdo: Any, ability: str | None, ruleset: Ruleset | None = None) -> int:
    return cost_breakdown(weirdo, ability, ruleset).total


def warband_cost(warband: Any, ruleset: Ruleset | None = None) -> int:
    rules = _rules(ruleset)
    ability = getattr(warband, "ability", None)
    return sum(weirdo_cost(weirdo, ability, rules) for weirdo in _items(warband, "weirdos"))


def update_cached_costs(warband: Any, ruleset: Ruleset | None = None) -> int:
    """Refresh the cached ``total_cost`` of every weirdo and of the warband."""

    rules = _rules(ruleset)
    ability = getattr(warband, "ability", None)
    total = 0
    for weirdo in _items(warband, "weirdos"):
        weirdo.total_cost = weirdo_cost(weirdo, ability, rules)
        total += weirdo.total_cost
    warband.total_cost = total
    return total
