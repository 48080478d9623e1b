"""Warband and weirdo persistence.

Every mutation refreshes the cached ``total_cost`` fields through
``costs.update_cached_costs`` before the session is committed.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from .. import models
from . import costs
from .validation import validate_warband

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class WarbandNotFoundError(LookupError):
    def __init__(self, warband_id: str) -> None:
        super().__init__(f"No warband found with id: {warband_id}")
        self.warband_id = warband_id


class WeirdoNotFoundError(LookupError):
    def __init__(self, weirdo_id: str) -> None:
        super().__init__(f"No weirdo found with id: {weirdo_id}")
        self.weirdo_id = weirdo_id


def _renumber(warband: models.Warband) -> None:
    for index, weirdo in enumerate(warband.weirdos):
        weirdo.position = index


def _refresh(db: Session, warband: models.Warband) -> models.Warband:
    _renumber(warband)
    costs.update_cached_costs(warband)
    db.commit()
    return warband


def _isoformat(value: Any) -> str | None:
    return value.isoformat() if value is not None else None


def create_warband(
    db: Session, name: str, point_limit: int = 75, ability: str | None = None
) -> models.Warband:
    warband = models.Warband(
        name=name,
        point_limit=point_limit,
        ability=ability,
        total_cost=0,
    )
    warband.weirdos = []
    db.add(warband)
    db.commit()
    logger.info("Created warband %s (%s)", warband.id, warband.name)
    return warband


def list_warbands(db: Session) -> list[dict[str, Any]]:
    warbands = (
        db.execute(
            select(models.Warband)
            .options(selectinload(models.Warband.weirdos))
            .order_by(models.Warband.updated_at.desc())
        )
        .scalars()
        .all()
    )
    return [
        {
            "id": warband.id,
            "name": warband.name,
            "ability": warband.ability,
            "point_limit": warband.point_limit,
            "total_cost": warband.total_cost,
            "weirdo_count": len(warband.weirdos),
            "updated_at": _isoformat(warband.updated_at),
        }
        for warband in warbands
    ]


def get_warband(db: Session, warband_id: str) -> models.Warband:
    warband = db.get(models.Warband, warband_id)
    if warband is None:
        raise WarbandNotFoundError(warband_id)
    return warband


def update_warband(
    db: Session,
    warband: models.Warband,
    *,
    name: str | None = _UNSET,
    point_limit: int | None = _UNSET,
    ability: str | None = _UNSET,
) -> models.Warband:
    if name is not _UNSET and name is not None:
        warband.name = name
    if point_limit is not _UNSET and point_limit is not None:
        warband.point_limit = point_limit
    if ability is not _UNSET:
        warband.ability = ability
    logger.debug("Updated warband %s", warband.id)
    return _refresh(db, warband)


def delete_warband(db: Session, warband_id: str) -> None:
    warband = get_warband(db, warband_id)
    db.delete(warband)
    db.commit()
    logger.info("Deleted warband %s", warband_id)


def find_weirdo(warband: models.Warband, weirdo_id: str) -> models.Weirdo:
    for weirdo in warband.weirdos:
        if weirdo.id == weirdo_id:
            return weirdo
    raise WeirdoNotFoundError(weirdo_id)


def apply_weirdo_payload(weirdo: models.Weirdo, payload: Any) -> models.Weirdo:
    weirdo.name = getattr(payload, "name", None) or ""
    weirdo.type = getattr(payload, "type", None) or "trooper"
    weirdo.attributes = getattr(payload, "attributes", None)
    weirdo.close_combat_weapons = getattr(payload, "close_combat_weapons", None)
    weirdo.ranged_weapons = getattr(payload, "ranged_weapons", None)
    weirdo.equipment = getattr(payload, "equipment", None)
    weirdo.psychic_powers = getattr(payload, "psychic_powers", None)
    weirdo.leader_trait = getattr(payload, "leader_trait", None) or None
    weirdo.notes = getattr(payload, "notes", None) or ""
    return weirdo


def _available_id(db: Session, candidate: str | None) -> str:
    if candidate and db.get(models.Weirdo, candidate) is None:
        return candidate
    return models.new_id()


def add_weirdo(db: Session, warband: models.Warband, payload: Any) -> models.Weirdo:
    weirdo = models.Weirdo(id=_available_id(db, getattr(payload, "id", None)), total_cost=0)
    apply_weirdo_payload(weirdo, payload)
    warband.weirdos.append(weirdo)
    _refresh(db, warband)
    logger.info("Added weirdo %s to warband %s", weirdo.id, warband.id)
    return weirdo


def update_weirdo(
    db: Session, warband: models.Warband, weirdo_id: str, payload: Any
) -> models.Weirdo:
    weirdo = find_weirdo(warband, weirdo_id)
    apply_weirdo_payload(weirdo, payload)
    _refresh(db, warband)
    return weirdo


def remove_weirdo(db: Session, warband: models.Warband, weirdo_id: str) -> None:
    weirdo = find_weirdo(warband, weirdo_id)
    warband.weirdos.remove(weirdo)
    _refresh(db, warband)
    logger.info("Removed weirdo %s from warband %s", weirdo_id, warband.id)


def duplicate_weirdo(db: Session, warband: models.Warband, weirdo_id: str) -> models.Weirdo:
    source = find_weirdo(warband, weirdo_id)
    clone = models.Weirdo(
        id=models.new_id(),
        name=source.name,
        type=source.type,
        speed=source.speed,
        defense=source.defense,
        firepower=source.firepower,
        prowess=source.prowess,
        willpower=source.willpower,
        close_combat_weapons_json=source.close_combat_weapons_json,
        ranged_weapons_json=source.ranged_weapons_json,
        equipment_json=source.equipment_json,
        psychic_powers_json=source.psychic_powers_json,
        leader_trait=source.leader_trait,
        notes=source.notes,
        total_cost=source.total_cost,
    )
    index = warband.weirdos.index(source)
    warband.weirdos.insert(index + 1, clone)
    _refresh(db, warband)
    return clone


def move_weirdo(
    db: Session, warband: models.Warband, weirdo_id: str, direction: str
) -> bool:
    normalized_direction = (direction or "").strip().lower()
    if normalized_direction not in {"up", "down"}:
        raise ValueError(f"Invalid direction: {direction!r}")
    weirdo = find_weirdo(warband, weirdo_id)
    current = warband.weirdos.index(weirdo)
    target = current - 1 if normalized_direction == "up" else current + 1
    if target < 0 or target >= len(warband.weirdos):
        return False
    warband.weirdos.pop(current)
    warband.weirdos.insert(target, weirdo)
    _refresh(db, warband)
    return True


def apply_weirdo_order(weirdos: Sequence[models.Weirdo], order: Iterable[str]) -> bool:
    """Assign positions following ``order``; return True if anything moved.

    ``order`` must list every weirdo id exactly once.
    """

    order_list = [str(item) for item in order]
    by_id = {weirdo.id: weirdo for weirdo in weirdos}
    if len(order_list) != len(by_id) or set(order_list) != set(by_id):
        raise ValueError("Order must contain every weirdo exactly once")
    changed = False
    for position, weirdo_id in enumerate(order_list):
        weirdo = by_id[weirdo_id]
        if weirdo.position != position:
            weirdo.position = position
            changed = True
    return changed


def reorder_weirdos(db: Session, warband: models.Warband, order: Iterable[str]) -> bool:
    changed = apply_weirdo_order(warband.weirdos, order)
    if changed:
        warband.weirdos.sort(key=lambda weirdo: weirdo.position)
        _refresh(db, warband)
    return changed


def weirdo_payload(weirdo: models.Weirdo, ability: str | None) -> dict[str, Any]:
    attributes = weirdo.attributes
    return {
        "id": weirdo.id,
        "name": weirdo.name,
        "type": weirdo.type,
        "attributes": attributes.to_dict() if attributes is not None else None,
        "close_combat_weapons": [item.to_dict() for item in weirdo.close_combat_weapons],
        "ranged_weapons": [item.to_dict() for item in weirdo.ranged_weapons],
        "equipment": [item.to_dict() for item in weirdo.equipment],
        "psychic_powers": [item.to_dict() for item in weirdo.psychic_powers],
        "leader_trait": weirdo.leader_trait,
        "notes": weirdo.notes,
        "total_cost": weirdo.total_cost,
        "cost_breakdown": costs.cost_breakdown(weirdo, ability).to_dict(),
    }


def warband_payload(warband: models.Warband, *, include_validation: bool = True) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": warband.id,
        "name": warband.name,
        "ability": warband.ability,
        "point_limit": warband.point_limit,
        "total_cost": warband.total_cost,
        "created_at": _isoformat(warband.created_at),
        "updated_at": _isoformat(warband.updated_at),
        "weirdos": [weirdo_payload(weirdo, warband.ability) for weirdo in warband.weirdos],
    }
    if include_validation:
        payload["validation"] = validate_warband(warband).to_dict()
    return payload
