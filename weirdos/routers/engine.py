from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from ..schemas import CalculateCostRequest, ValidateRequest
from ..services import costs
from ..services.validation import (
    ValidationResult,
    trooper_point_limit,
    validate_warband,
    validate_weirdo,
    weirdo_warnings,
)

router = APIRouter(prefix="/api", tags=["engine"])


@router.post("/calculate-cost")
def calculate_cost(payload: CalculateCostRequest) -> dict[str, Any]:
    """Price a draft weirdo or warband without persisting anything."""

    if payload.weirdo is not None:
        ability = payload.warband_ability
        if ability is None and payload.warband is not None:
            ability = payload.warband.ability
        try:
            breakdown = costs.cost_breakdown(payload.weirdo, ability)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"total_cost": breakdown.total, "breakdown": breakdown.to_dict()}
    if payload.warband is not None:
        try:
            total = costs.warband_cost(payload.warband)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"total_cost": total}
    raise HTTPException(status_code=400, detail="Provide a weirdo or a warband to price")


@router.post("/validate")
def validate(payload: ValidateRequest) -> dict[str, Any]:
    if payload.weirdo is not None and payload.warband is not None:
        result = ValidationResult(
            errors=validate_weirdo(payload.weirdo, payload.warband),
            warnings=weirdo_warnings(payload.weirdo, payload.warband),
        )
        body = result.to_dict()
        if payload.weirdo.type == "trooper":
            body["trooper_point_limit"] = trooper_point_limit(payload.weirdo, payload.warband)
        return body
    if payload.warband is not None:
        return validate_warband(payload.warband).to_dict()
    raise HTTPException(status_code=400, detail="Provide a warband, optionally with a weirdo")
