"""Warband composition rules.

Validation never raises for incomplete data: every broken rule becomes a
``ValidationError`` in the returned list, and near-limit troopers produce
non-blocking ``ValidationWarning`` entries.  Costs are always recomputed with
the cost engine; cached ``total_cost`` values are ignored.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, List

from . import costs
from .ruleset import ATTRIBUTE_NAMES, Ruleset, default_ruleset

RANGED_FIREPOWER_LEVELS = {"2d8", "2d10"}


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ValidationWarning:
    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass
class ValidationResult:
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": [warning.to_dict() for warning in self.warnings],
        }


def _rules(ruleset: Ruleset | None) -> Ruleset:
    return ruleset if ruleset is not None else default_ruleset()


def _weirdos(warband: Any) -> list[Any]:
    return list(getattr(warband, "weirdos", None) or [])


def _is_blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def _weirdo_field(weirdo: Any, name: str) -> str:
    return f"weirdo.{getattr(weirdo, 'id', None)}.{name}"


def _same_weirdo(a: Any, b: Any) -> bool:
    if a is b:
        return True
    a_id = getattr(a, "id", None)
    b_id = getattr(b, "id", None)
    if a_id is None and b_id is None:
        # id-less drafts are matched by value
        return a == b
    return a_id is not None and a_id == b_id


# Warband-level rules


def _check_warband_name(warband: Any, rules: Ruleset) -> ValidationError | None:
    if _is_blank(getattr(warband, "name", None)):
        return ValidationError(
            field="name",
            message=rules.message("warband_name_required"),
            code="WARBAND_NAME_REQUIRED",
        )
    return None


def _check_point_limit(warband: Any, rules: Ruleset) -> ValidationError | None:
    point_limit = getattr(warband, "point_limit", None)
    if isinstance(point_limit, bool) or point_limit not in rules.point_limits:
        limits = " or ".join(str(value) for value in rules.point_limits)
        return ValidationError(
            field="point_limit",
            message=rules.message("invalid_point_limit", limits=limits),
            code="INVALID_POINT_LIMIT",
        )
    return None


def _check_ability(warband: Any, rules: Ruleset) -> ValidationError | None:
    if not getattr(warband, "ability", None):
        return ValidationError(
            field="ability",
            message=rules.message("warband_ability_required"),
            code="WARBAND_ABILITY_REQUIRED",
        )
    return None


# Weirdo-level rules


def _check_weirdo_name(weirdo: Any, rules: Ruleset) -> ValidationError | None:
    if _is_blank(getattr(weirdo, "name", None)):
        return ValidationError(
            field=_weirdo_field(weirdo, "name"),
            message=rules.message("weirdo_name_required"),
            code="WEIRDO_NAME_REQUIRED",
        )
    return None


def _check_attributes(weirdo: Any, rules: Ruleset) -> ValidationError | None:
    attributes = getattr(weirdo, "attributes", None)
    missing_field: str | None = None
    if attributes is None:
        missing_field = _weirdo_field(weirdo, "attributes")
    else:
        for name in ATTRIBUTE_NAMES:
            if getattr(attributes, name, None) in (None, ""):
                missing_field = _weirdo_field(weirdo, f"attributes.{name}")
                break
    if missing_field is None:
        return None
    return ValidationError(
        field=missing_field,
        message=rules.message("attributes_incomplete"),
        code="ATTRIBUTES_INCOMPLETE",
    )


def _check_close_combat_weapon(weirdo: Any, rules: Ruleset) -> ValidationError | None:
    if not getattr(weirdo, "close_combat_weapons", None):
        return ValidationError(
            field=_weirdo_field(weirdo, "close_combat_weapons"),
            message=rules.message("close_combat_weapon_required"),
            code="CLOSE_COMBAT_WEAPON_REQUIRED",
        )
    return None


def _check_ranged_weapon(weirdo: Any, rules: Ruleset) -> ValidationError | None:
    attributes = getattr(weirdo, "attributes", None)
    if attributes is None:
        return None
    if getattr(attributes, "firepower", None) not in RANGED_FIREPOWER_LEVELS:
        return None
    if not getattr(weirdo, "ranged_weapons", None):
        return ValidationError(
            field=_weirdo_field(weirdo, "ranged_weapons"),
            message=rules.message("ranged_weapon_required"),
            code="RANGED_WEAPON_REQUIRED",
        )
    return None


def _check_equipment_limit(
    weirdo: Any, ability: str | None, rules: Ruleset
) -> ValidationError | None:
    weirdo_type = getattr(weirdo, "type", None)
    limit = rules.equipment_limits.limit_for(weirdo_type, ability)
    count = len(getattr(weirdo, "equipment", None) or [])
    if count > limit:
        return ValidationError(
            field=_weirdo_field(weirdo, "equipment"),
            message=rules.message(
                "equipment_limit_exceeded", type=weirdo_type or "weirdo", limit=limit
            ),
            code="EQUIPMENT_LIMIT_EXCEEDED",
        )
    return None


def premium_slot_taken(weirdo: Any, warband: Any, ruleset: Ruleset | None = None) -> bool:
    """Return True when another trooper already holds the 21-25 point slot.

    Only troopers ahead of ``weirdo`` in roster order are considered, so the
    first trooper in range keeps the slot.  A weirdo that is not part of the
    warband yet is compared against every trooper.
    """

    rules = _rules(ruleset)
    ability = getattr(warband, "ability", None)
    for other in _weirdos(warband):
        if _same_weirdo(other, weirdo):
            return False
        if getattr(other, "type", None) != "trooper":
            continue
        if rules.trooper_limits.in_premium_range(costs.weirdo_cost(other, ability, rules)):
            return True
    return False


def trooper_point_limit(weirdo: Any, warband: Any, ruleset: Ruleset | None = None) -> int:
    rules = _rules(ruleset)
    limits = rules.trooper_limits
    if premium_slot_taken(weirdo, warband, rules):
        return limits.standard
    return limits.premium_max


def _check_trooper_point_limit(
    weirdo: Any, warband: Any, cost: int, rules: Ruleset
) -> ValidationError | None:
    if getattr(weirdo, "type", None) != "trooper":
        return None
    limit = trooper_point_limit(weirdo, warband, rules)
    if cost > limit:
        return ValidationError(
            field=_weirdo_field(weirdo, "total_cost"),
            message=rules.message("trooper_point_limit_exceeded", cost=cost, limit=limit),
            code="TROOPER_POINT_LIMIT_EXCEEDED",
        )
    return None


def _check_leader_trait(weirdo: Any, rules: Ruleset) -> ValidationError | None:
    if getattr(weirdo, "type", None) == "leader":
        return None
    if getattr(weirdo, "leader_trait", None) is not None:
        return ValidationError(
            field=_weirdo_field(weirdo, "leader_trait"),
            message=rules.message("leader_trait_invalid"),
            code="LEADER_TRAIT_INVALID",
        )
    return None


# Cross-weirdo rules


def _check_single_premium_slot(warband: Any, rules: Ruleset) -> ValidationError | None:
    ability = getattr(warband, "ability", None)
    limits = rules.trooper_limits
    in_range = [
        weirdo
        for weirdo in _weirdos(warband)
        if limits.in_premium_range(costs.weirdo_cost(weirdo, ability, rules))
    ]
    if len(in_range) > 1:
        return ValidationError(
            field="weirdos",
            message=rules.message(
                "multiple_premium_weirdos", min=limits.premium_min, max=limits.premium_max
            ),
            code="MULTIPLE_25_POINT_WEIRDOS",
        )
    return None


def _check_warband_point_limit(warband: Any, rules: Ruleset) -> ValidationError | None:
    point_limit = getattr(warband, "point_limit", None)
    if isinstance(point_limit, bool) or not isinstance(point_limit, int):
        return None
    total = costs.warband_cost(warband, rules)
    if total > point_limit:
        return ValidationError(
            field="total_cost",
            message=rules.message("warband_point_limit_exceeded", cost=total, limit=point_limit),
            code="WARBAND_POINT_LIMIT_EXCEEDED",
        )
    return None


def _collect(checks: Iterable[ValidationError | None]) -> list[ValidationError]:
    return [error for error in checks if error is not None]


def validate_weirdo(
    weirdo: Any, warband: Any, ruleset: Ruleset | None = None
) -> list[ValidationError]:
    rules = _rules(ruleset)
    ability = getattr(warband, "ability", None)
    cost = costs.weirdo_cost(weirdo, ability, rules)
    return _collect(
        [
            _check_weirdo_name(weirdo, rules),
            _check_attributes(weirdo, rules),
            _check_close_combat_weapon(weirdo, rules),
            _check_ranged_weapon(weirdo, rules),
            _check_equipment_limit(weirdo, ability, rules),
            _check_trooper_point_limit(weirdo, warband, cost, rules),
            _check_leader_trait(weirdo, rules),
        ]
    )


def weirdo_warnings(
    weirdo: Any, warband: Any, ruleset: Ruleset | None = None
) -> list[ValidationWarning]:
    rules = _rules(ruleset)
    if getattr(weirdo, "type", None) != "trooper":
        return []
    limits = rules.trooper_limits
    cost = costs.weirdo_cost(weirdo, getattr(warband, "ability", None), rules)
    if cost <= limits.standard:
        limit = limits.standard
    elif not premium_slot_taken(weirdo, warband, rules):
        limit = limits.premium_max
    else:
        return []
    if 0 <= limit - cost <= rules.warning_margin:
        return [
            ValidationWarning(
                field=_weirdo_field(weirdo, "total_cost"),
                message=rules.message(
                    "trooper_point_limit_warning",
                    cost=cost,
                    limit=limit,
                    margin=rules.warning_margin,
                ),
                code="TROOPER_POINT_LIMIT_WARNING",
            )
        ]
    return []


def validate_warband(warband: Any, ruleset: Ruleset | None = None) -> ValidationResult:
    rules = _rules(ruleset)
    result = ValidationResult()
    result.errors.extend(
        _collect(
            [
                _check_warband_name(warband, rules),
                _check_point_limit(warband, rules),
                _check_ability(warband, rules),
            ]
        )
    )

    for weirdo in _weirdos(warband):
        result.errors.extend(validate_weirdo(weirdo, warband, rules))
        result.warnings.extend(weirdo_warnings(weirdo, warband, rules))

    result.errors.extend(
        _collect(
            [
                _check_single_premium_slot(warband, rules),
                _check_warband_point_limit(warband, rules),
            ]
        )
    )
    return result
