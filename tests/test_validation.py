import sys
from pathlib import Path
from types import SimpleNamespace

sys.path.append(str(Path(__file__).resolve().parents[1]))

from weirdos.data import catalog
from weirdos.services import validation


def _attributes(**overrides):
    data = {
        "speed": 1,
        "defense": "2d6",
        "firepower": "None",
        "prowess": "2d6",
        "willpower": "2d6",
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def _weirdo(weirdo_id="w1", *, cost=6, **overrides):
    # Baseline attributes cost 6; any extra cost rides on a single psychic power.
    powers = []
    if cost > 6:
        powers.append(SimpleNamespace(id="p", name="Surge", type="Effect", cost=cost - 6))
    data = {
        "id": weirdo_id,
        "name": f"Weirdo {weirdo_id}",
        "type": "trooper",
        "attributes": _attributes(),
        "close_combat_weapons": [catalog.find_weapon("unarmed")],
        "ranged_weapons": [],
        "equipment": [],
        "psychic_powers": powers,
        "leader_trait": None,
        "total_cost": 0,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def _leader(weirdo_id="boss", **overrides):
    overrides.setdefault("type", "leader")
    return _weirdo(weirdo_id, **overrides)


def _warband(*weirdos, ability="Fanatics", point_limit=75, name="Night Crew"):
    return SimpleNamespace(
        id="wb1",
        name=name,
        ability=ability,
        point_limit=point_limit,
        total_cost=0,
        weirdos=list(weirdos),
    )


def _codes(errors):
    return [error.code for error in errors]


def test_valid_warband_has_no_errors_or_warnings():
    warband = _warband(_leader(), _weirdo("t1", cost=10))

    result = validation.validate_warband(warband)

    assert result.valid is True
    assert result.errors == []
    assert result.warnings == []


def test_warband_level_rules():
    warband = _warband(name="  ", ability=None, point_limit=100)

    result = validation.validate_warband(warband)

    assert _codes(result.errors) == [
        "WARBAND_NAME_REQUIRED",
        "INVALID_POINT_LIMIT",
        "WARBAND_ABILITY_REQUIRED",
    ]
    assert [error.field for error in result.errors] == ["name", "point_limit", "ability"]
    assert result.errors[1].message == "Point limit must be 75 or 125"


def test_boolean_point_limit_is_rejected():
    result = validation.validate_warband(_warband(point_limit=True))

    assert "INVALID_POINT_LIMIT" in _codes(result.errors)


def test_incomplete_weirdo_collects_every_error_without_raising():
    weirdo = SimpleNamespace(id="x", name=None, type="trooper", attributes=None)

    errors = validation.validate_weirdo(weirdo, _warband())

    assert _codes(errors) == [
        "WEIRDO_NAME_REQUIRED",
        "ATTRIBUTES_INCOMPLETE",
        "CLOSE_COMBAT_WEAPON_REQUIRED",
    ]
    assert errors[0].field == "weirdo.x.name"
    assert errors[1].field == "weirdo.x.attributes"


def test_missing_attribute_reports_first_empty_slot():
    weirdo = _weirdo(attributes=_attributes(defense=None, willpower=None))

    errors = validation.validate_weirdo(weirdo, _warband())

    assert _codes(errors) == ["ATTRIBUTES_INCOMPLETE"]
    assert errors[0].field == "weirdo.w1.attributes.defense"
    assert errors[0].message == "All five attributes must be selected"


def test_ranged_weapon_required_with_firepower():
    weirdo = _weirdo(attributes=_attributes(firepower="2d8"))

    errors = validation.validate_weirdo(weirdo, _warband())

    assert _codes(errors) == ["RANGED_WEAPON_REQUIRED"]
    assert errors[0].field == "weirdo.w1.ranged_weapons"


def test_ranged_weapon_not_required_without_firepower():
    weirdo = _weirdo(attributes=_attributes(firepower="None"))

    assert validation.validate_weirdo(weirdo, _warband()) == []


def test_equipment_limit_for_leader_depends_on_cyborgs():
    kit = [catalog.find_equipment(name) for name in ("grenade", "medkit", "jump-pack")]
    leader = _leader(equipment=kit)

    assert validation.validate_weirdo(leader, _warband(leader, ability="Cyborgs")) == []
    errors = validation.validate_weirdo(leader, _warband(leader, ability="Soldiers"))
    assert _codes(errors) == ["EQUIPMENT_LIMIT_EXCEEDED"]
    assert errors[0].message == "Equipment limit exceeded: leader can have 2 items"


def test_equipment_limit_for_trooper():
    kit = [catalog.find_equipment("grenade"), catalog.find_equipment("medkit")]
    trooper = _weirdo(equipment=kit)

    assert validation.validate_weirdo(trooper, _warband(trooper, ability="Cyborgs")) == []
    assert _codes(validation.validate_weirdo(trooper, _warband(trooper))) == [
        "EQUIPMENT_LIMIT_EXCEEDED"
    ]


def test_leader_trait_on_trooper_is_single_error():
    trooper = _weirdo(leader_trait="Tactician")

    errors = validation.validate_weirdo(trooper, _warband(trooper))

    assert _codes(errors) == ["LEADER_TRAIT_INVALID"]
    assert errors[0].field == "weirdo.w1.leader_trait"


def test_leader_trait_on_leader_is_allowed():
    leader = _leader(leader_trait="Tactician")

    assert validation.validate_weirdo(leader, _warband(leader)) == []


def test_trooper_point_limit_boundaries():
    for cost, expected in ((20, []), (21, []), (25, []), (26, ["TROOPER_POINT_LIMIT_EXCEEDED"])):
        trooper = _weirdo(cost=cost)
        errors = validation.validate_weirdo(trooper, _warband(trooper))
        assert _codes(errors) == expected, cost


def test_trooper_over_twenty_five_reports_limit():
    trooper = _weirdo(cost=26)

    errors = validation.validate_weirdo(trooper, _warband(trooper))

    assert errors[0].field == "weirdo.w1.total_cost"
    assert errors[0].message == "Trooper cost (26) exceeds 25-point limit"


def test_leaders_are_not_capped():
    leader = _leader(cost=40)

    assert validation.validate_weirdo(leader, _warband(leader)) == []


def test_cached_totals_are_ignored():
    trooper = _weirdo(cost=26, total_cost=5)

    assert _codes(validation.validate_weirdo(trooper, _warband(trooper))) == [
        "TROOPER_POINT_LIMIT_EXCEEDED"
    ]


def test_two_premium_troopers_report_single_multiple_slot_error():
    first = _weirdo("t1", cost=22)
    second = _weirdo("t2", cost=23)
    warband = _warband(first, second)

    result = validation.validate_warband(warband)

    assert _codes(result.errors).count("MULTIPLE_25_POINT_WEIRDOS") == 1
    multiple = [error for error in result.errors if error.code == "MULTIPLE_25_POINT_WEIRDOS"][0]
    assert multiple.field == "weirdos"
    exceeded = [error for error in result.errors if error.code == "TROOPER_POINT_LIMIT_EXCEEDED"]
    assert [error.field for error in exceeded] == ["weirdo.t2.total_cost"]
    assert exceeded[0].message == "Trooper cost (23) exceeds 20-point limit"


def test_premium_slot_goes_to_first_trooper_in_roster_order():
    first = _weirdo("t1", cost=22)
    second = _weirdo("t2", cost=23)
    warband = _warband(first, second)

    assert validation.premium_slot_taken(first, warband) is False
    assert validation.premium_slot_taken(second, warband) is True
    assert validation.trooper_point_limit(first, warband) == 25
    assert validation.trooper_point_limit(second, warband) == 20


def test_draft_weirdo_outside_warband_checks_every_trooper():
    holder = _weirdo("t1", cost=24)
    draft = _weirdo("new", cost=22)
    warband = _warband(_leader(), holder)

    errors = validation.validate_weirdo(draft, warband)

    assert _codes(errors) == ["TROOPER_POINT_LIMIT_EXCEEDED"]


def test_leader_in_premium_range_does_not_take_trooper_slot():
    leader = _leader(cost=23)
    trooper = _weirdo("t1", cost=22)
    warband = _warband(leader, trooper)

    assert validation.validate_weirdo(trooper, warband) == []
    # the whole-roster sweep still counts every weirdo in range
    assert "MULTIPLE_25_POINT_WEIRDOS" in _codes(validation.validate_warband(warband).errors)


def test_warband_point_limit_exceeded():
    weirdos = [_leader(cost=30)] + [_weirdo(f"t{index}", cost=16) for index in range(3)]
    warband = _warband(*weirdos)

    result = validation.validate_warband(warband)

    assert _codes(result.errors) == ["WARBAND_POINT_LIMIT_EXCEEDED"]
    assert result.errors[0].field == "total_cost"
    assert result.errors[0].message == "Warband total cost (78) exceeds point limit (75)"


def test_warband_at_exact_limit_is_valid():
    weirdos = [_leader(cost=27)] + [_weirdo(f"t{index}", cost=16) for index in range(3)]

    assert validation.validate_warband(_warband(*weirdos)).valid is True


def test_trooper_near_standard_limit_gets_warning():
    trooper = _weirdo(cost=19)
    warband = _warband(trooper)

    warnings = validation.weirdo_warnings(trooper, warband)
    result = validation.validate_warband(warband)

    assert [warning.code for warning in warnings] == ["TROOPER_POINT_LIMIT_WARNING"]
    assert "20-point limit" in warnings[0].message
    assert result.valid is True
    assert [warning.code for warning in result.warnings] == ["TROOPER_POINT_LIMIT_WARNING"]


def test_warning_margin_boundaries():
    for cost, warned in ((16, False), (17, True), (20, True), (21, False), (22, True), (25, True)):
        trooper = _weirdo(cost=cost)
        warnings = validation.weirdo_warnings(trooper, _warband(trooper))
        assert bool(warnings) is warned, cost


def test_no_warning_once_limit_is_exceeded():
    first = _weirdo("t1", cost=22)
    second = _weirdo("t2", cost=23)
    warband = _warband(first, second)

    assert validation.weirdo_warnings(second, warband) == []
    assert validation.weirdo_warnings(_weirdo(cost=26), _warband()) == []


def test_leaders_never_get_point_warnings():
    leader = _leader(cost=19)

    assert validation.weirdo_warnings(leader, _warband(leader)) == []


def test_result_to_dict():
    trooper = _weirdo(cost=19, name="")
    result = validation.validate_warband(_warband(trooper))

    payload = result.to_dict()

    assert payload["valid"] is False
    assert payload["errors"] == [
        {
            "field": "weirdo.w1.name",
            "message": "Weirdo name is required",
            "code": "WEIRDO_NAME_REQUIRED",
        }
    ]
    assert payload["warnings"][0]["code"] == "TROOPER_POINT_LIMIT_WARNING"


def test_draft_without_id_is_not_compared_against_its_own_entry():
    draft = _weirdo(None, cost=22)
    warband = _warband(_leader(), _weirdo(None, cost=22))

    assert validation.premium_slot_taken(draft, warband) is False
    assert validation.trooper_point_limit(draft, warband) == 25
    assert validation.validate_weirdo(draft, warband) == []


def test_other_weirdos_without_ids_still_hold_the_premium_slot():
    holder = _weirdo(None, cost=24, name="Holder")
    draft = _weirdo(None, cost=22)
    warband = _warband(holder, _weirdo(None, cost=22))

    assert _codes(validation.validate_weirdo(draft, warband)) == [
        "TROOPER_POINT_LIMIT_EXCEEDED"
    ]


def test_empty_leader_trait_on_trooper_is_rejected():
    trooper = _weirdo(leader_trait="")

    assert _codes(validation.validate_weirdo(trooper, _warband(trooper))) == [
        "LEADER_TRAIT_INVALID"
    ]


def test_validate_weirdo_is_idempotent():
    first = _weirdo("t1", cost=22)
    second = _weirdo(
        "t2",
        cost=23,
        leader_trait="Healer",
        equipment=[catalog.find_equipment("grenade")] * 2,
    )
    warband = _warband(first, second)

    errors = validation.validate_weirdo(second, warband)

    assert errors == validation.validate_weirdo(second, warband)
    assert _codes(errors) == [
        "EQUIPMENT_LIMIT_EXCEEDED",
        "TROOPER_POINT_LIMIT_EXCEEDED",
        "LEADER_TRAIT_INVALID",
    ]
    assert validation.weirdo_warnings(first, warband) == validation.weirdo_warnings(first, warband)


def test_validate_warband_is_deterministic():
    weirdos = [
        _leader(cost=12),
        _weirdo("t1", cost=22),
        _weirdo("t2", cost=23),
        _weirdo("t3", cost=19),
        _weirdo("t4", cost=17, name=""),
    ]
    warband = _warband(*weirdos)

    first = validation.validate_warband(warband)
    second = validation.validate_warband(warband)

    assert first == second
    assert first.to_dict() == second.to_dict()
    assert _codes(first.errors) == [
        "TROOPER_POINT_LIMIT_EXCEEDED",
        "WEIRDO_NAME_REQUIRED",
        "MULTIPLE_25_POINT_WEIRDOS",
        "WARBAND_POINT_LIMIT_EXCEEDED",
    ]
    assert [warning.field for warning in first.warnings] == [
        "weirdo.t1.total_cost",
        "weirdo.t3.total_cost",
        "weirdo.t4.total_cost",
    ]
