"""Rule tables used by the cost and validation engines.

The tables live in ``weirdos/rulesets/default.json``.  A different file can be
selected with the ``RULESET_PATH`` setting, or a ``Ruleset`` can be built in
code (house rules, tests) and handed to the engine functions directly.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from ..config import RULESET_PATH

logger = logging.getLogger(__name__)

DEFAULT_RULESET_PATH = Path(__file__).resolve().parent.parent / "rulesets" / "default.json"

ATTRIBUTE_NAMES = ("speed", "defense", "firepower", "prowess", "willpower")


class RulesetError(ValueError):
    """Raised when a ruleset document is missing a key or holds a bad value."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key


@dataclass(frozen=True)
class TrooperLimits:
    standard: int
    premium_min: int
    premium_max: int

    def in_premium_range(self, cost: int) -> bool:
        return self.premium_min <= cost <= self.premium_max


@dataclass(frozen=True)
class EquipmentLimits:
    leader: int
    leader_cyborgs: int
    trooper: int
    trooper_cyborgs: int

    def limit_for(self, weirdo_type: str | None, ability: str | None) -> int:
        cyborgs = ability == "Cyborgs"
        if weirdo_type == "leader":
            return self.leader_cyborgs if cyborgs else self.leader
        return self.trooper_cyborgs if cyborgs else self.trooper


@dataclass(frozen=True)
class Ruleset:
    name: str
    attribute_costs: Mapping[str, Mapping[str, int]]
    mutant_discount: int
    heavily_armed_discount: int
    mutant_weapons: frozenset[str]
    soldier_free_equipment: frozenset[str]
    point_limits: tuple[int, ...]
    trooper_limits: TrooperLimits
    equipment_limits: EquipmentLimits
    warning_margin: int
    messages: Mapping[str, str]

    def message(self, key: str, **params: Any) -> str:
        template = self.messages.get(key, key)
        try:
            return template.format(**params)
        except (KeyError, IndexError):
            return template


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if not isinstance(value, Mapping):
        raise RulesetError(key, "expected an object")
    return value


def _integer(value: Any, key: str, *, minimum: int | None = 0) -> int:
    if isinstance(value, bool):
        raise RulesetError(key, f"expected an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise RulesetError(key, f"expected an integer, got {value!r}") from None
    if minimum is not None and number < minimum:
        raise RulesetError(key, f"must be at least {minimum}")
    return number


def _names(data: Mapping[str, Any], key: str) -> frozenset[str]:
    raw = data.get(key, [])
    if not isinstance(raw, list):
        raise RulesetError(key, "expected a list of names")
    return frozenset(str(item).strip() for item in raw if str(item).strip())


def ruleset_from_dict(data: Mapping[str, Any]) -> Ruleset:
    raw_costs = _section(data, "attribute_costs")
    attribute_costs: dict[str, Mapping[str, int]] = {}
    for attribute in ATTRIBUTE_NAMES:
        table = raw_costs.get(attribute)
        if not isinstance(table, Mapping) or not table:
            raise RulesetError(f"attribute_costs.{attribute}", "missing cost table")
        attribute_costs[attribute] = MappingProxyType(
            {
                str(level): _integer(cost, f"attribute_costs.{attribute}.{level}")
                for level, cost in table.items()
            }
        )

    discounts = _section(data, "discounts")
    trooper = _section(data, "trooper_limits")
    equipment = _section(data, "equipment_limits")

    raw_limits = data.get("point_limits")
    if not isinstance(raw_limits, list) or not raw_limits:
        raise RulesetError("point_limits", "expected a non-empty list")
    point_limits = tuple(_integer(value, "point_limits", minimum=1) for value in raw_limits)

    trooper_limits = TrooperLimits(
        standard=_integer(trooper.get("standard"), "trooper_limits.standard"),
        premium_min=_integer(trooper.get("premium_min"), "trooper_limits.premium_min"),
        premium_max=_integer(trooper.get("premium_max"), "trooper_limits.premium_max"),
    )
    if trooper_limits.premium_min > trooper_limits.premium_max:
        raise RulesetError("trooper_limits", "premium_min is greater than premium_max")

    messages = data.get("messages") or {}
    if not isinstance(messages, Mapping):
        raise RulesetError("messages", "expected an object")

    return Ruleset(
        name=str(data.get("name") or "Custom"),
        attribute_costs=MappingProxyType(attribute_costs),
        mutant_discount=_integer(discounts.get("mutants", 0), "discounts.mutants"),
        heavily_armed_discount=_integer(
            discounts.get("heavily_armed", 0), "discounts.heavily_armed"
        ),
        mutant_weapons=_names(data, "mutant_weapons"),
        soldier_free_equipment=_names(data, "soldier_free_equipment"),
        point_limits=point_limits,
        trooper_limits=trooper_limits,
        equipment_limits=EquipmentLimits(
            leader=_integer(equipment.get("leader"), "equipment_limits.leader"),
            leader_cyborgs=_integer(
                equipment.get("leader_cyborgs"), "equipment_limits.leader_cyborgs"
            ),
            trooper=_integer(equipment.get("trooper"), "equipment_limits.trooper"),
            trooper_cyborgs=_integer(
                equipment.get("trooper_cyborgs"), "equipment_limits.trooper_cyborgs"
            ),
        ),
        warning_margin=_integer(data.get("warning_margin", 0), "warning_margin"),
        messages=MappingProxyType({str(k): str(v) for k, v in messages.items()}),
    )


def load_ruleset(path: str | Path) -> Ruleset:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)
    except json.JSONDecodeError as exc:
        raise RulesetError(str(path), f"invalid JSON ({exc.msg})") from exc
    if not isinstance(data, dict):
        raise RulesetError(str(path), "expected a JSON object")
    logger.debug("Loaded ruleset from %s", path)
    return ruleset_from_dict(data)


@lru_cache()
def default_ruleset() -> Ruleset:
    if RULESET_PATH:
        logger.info("Using ruleset override %s", RULESET_PATH)
        return load_ruleset(RULESET_PATH)
    return load_ruleset(DEFAULT_RULESET_PATH)
