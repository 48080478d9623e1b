from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from ..data import catalog

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.get("/weapons")
def list_weapons() -> dict[str, list[dict[str, Any]]]:
    return {
        "close": [weapon.to_dict() for weapon in catalog.CLOSE_COMBAT_WEAPONS],
        "ranged": [weapon.to_dict() for weapon in catalog.RANGED_WEAPONS],
    }


@router.get("/equipment")
def list_equipment() -> list[dict[str, Any]]:
    return [item.to_dict() for item in catalog.EQUIPMENT]


@router.get("/psychic-powers")
def list_psychic_powers() -> list[dict[str, Any]]:
    return [power.to_dict() for power in catalog.PSYCHIC_POWERS]


@router.get("/leader-traits")
def list_leader_traits() -> list[dict[str, Any]]:
    return [definition.to_dict() for definition in catalog.LEADER_TRAITS]


@router.get("/abilities")
def list_abilities() -> list[dict[str, Any]]:
    return [definition.to_dict() for definition in catalog.WARBAND_ABILITIES]
