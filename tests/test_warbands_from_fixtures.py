from __future__ import annotations

import glob
import json
import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Iterable

import pytest
import yaml

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from weirdos.data import catalog
from weirdos.services import costs
from weirdos.services.validation import validate_warband


FIXTURE_DIR = Path(__file__).parent / "fixtures" / "warbands"


def _load_fixtures() -> Iterable[tuple[str, dict[str, Any]]]:
    for path in sorted(glob.glob(str(FIXTURE_DIR / "*.yml")) + glob.glob(str(FIXTURE_DIR / "*.json"))):
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) if path.endswith(".yml") else json.load(handle)
        yield os.path.basename(path), data


def _lookup(finder, names: Iterable[str] | None) -> list:
    items = []
    for name in names or []:
        item = finder(name)
        if item is None:
            raise KeyError(f"Unknown catalog entry in fixture: {name}")
        items.append(item)
    return items


def _build_weirdo(entry: dict[str, Any]) -> SimpleNamespace:
    attributes = entry.get("attributes")
    return SimpleNamespace(
        id=entry["id"],
        name=entry.get("name", ""),
        type=entry.get("type", "trooper"),
        attributes=SimpleNamespace(**attributes) if attributes is not None else None,
        close_combat_weapons=_lookup(catalog.find_weapon, entry.get("close")),
        ranged_weapons=_lookup(catalog.find_weapon, entry.get("ranged")),
        equipment=_lookup(catalog.find_equipment, entry.get("equipment")),
        psychic_powers=_lookup(catalog.find_psychic_power, entry.get("powers")),
        leader_trait=entry.get("leader_trait"),
        total_cost=0,
    )


def _build_warband(data: dict[str, Any]) -> SimpleNamespace:
    header = data["warband"]
    return SimpleNamespace(
        id="fixture",
        name=header.get("name", ""),
        ability=header.get("ability"),
        point_limit=header.get("point_limit"),
        total_cost=0,
        weirdos=[_build_weirdo(entry) for entry in data.get("weirdos", [])],
    )


@pytest.mark.parametrize("fixture_name, data", list(_load_fixtures()))
def test_warband_fixture_costs(fixture_name: str, data: dict[str, Any]) -> None:
    warband = _build_warband(data)

    for weirdo, entry in zip(warband.weirdos, data["weirdos"]):
        assert costs.weirdo_cost(weirdo, warband.ability) == entry["expected_cost"], (
            f"{fixture_name}: {entry['id']}"
        )
    assert costs.warband_cost(warband) == data["expected"]["total_cost"], fixture_name


@pytest.mark.parametrize("fixture_name, data", list(_load_fixtures()))
def test_warband_fixture_validation(fixture_name: str, data: dict[str, Any]) -> None:
    warband = _build_warband(data)

    result = validate_warband(warband)

    expected = data["expected"]
    assert [error.code for error in result.errors] == expected["errors"], fixture_name
    assert [warning.code for warning in result.warnings] == expected["warnings"], fixture_name
    assert result.valid is (not expected["errors"])
