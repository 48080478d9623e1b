from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from .. import models
from ..db import get_db
from ..schemas import (
    MoveRequest,
    ReorderRequest,
    WarbandForm,
    WarbandSummary,
    WarbandUpdate,
    WeirdoPayload,
)
from ..services import warbands as warband_service
from ..services.ruleset import default_ruleset
from ..services.validation import validate_warband

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/warbands", tags=["warbands"])


def _load_warband(db: Session, warband_id: str) -> models.Warband:
    try:
        return warband_service.get_warband(db, warband_id)
    except warband_service.WarbandNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise HTTPException(
            status_code=400, detail=default_ruleset().message("warband_name_required")
        )
    return cleaned


def _ensure_point_limit(point_limit: int) -> None:
    ruleset = default_ruleset()
    if point_limit not in ruleset.point_limits:
        limits = " or ".join(str(limit) for limit in ruleset.point_limits)
        raise HTTPException(
            status_code=400,
            detail=ruleset.message("invalid_point_limit", limits=limits),
        )


@router.get("", response_model=list[WarbandSummary])
def list_warbands(db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return warband_service.list_warbands(db)


@router.post("", status_code=201)
def create_warband(form: WarbandForm, db: Session = Depends(get_db)) -> dict[str, Any]:
    name = _clean_name(form.name)
    _ensure_point_limit(form.point_limit)
    warband = warband_service.create_warband(
        db, name=name, point_limit=form.point_limit, ability=form.ability
    )
    return warband_service.warband_payload(warband)


@router.get("/{warband_id}")
def get_warband(warband_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return warband_service.warband_payload(_load_warband(db, warband_id))


@router.put("/{warband_id}")
def update_warband(
    warband_id: str, form: WarbandUpdate, db: Session = Depends(get_db)
) -> dict[str, Any]:
    warband = _load_warband(db, warband_id)
    changes: dict[str, Any] = {}
    if "name" in form.model_fields_set and form.name is not None:
        changes["name"] = _clean_name(form.name)
    if "point_limit" in form.model_fields_set and form.point_limit is not None:
        _ensure_point_limit(form.point_limit)
        changes["point_limit"] = form.point_limit
    if "ability" in form.model_fields_set:
        changes["ability"] = form.ability
    warband_service.update_warband(db, warband, **changes)
    return warband_service.warband_payload(warband)


@router.delete("/{warband_id}", status_code=204)
def delete_warband(warband_id: str, db: Session = Depends(get_db)) -> Response:
    try:
        warband_service.delete_warband(db, warband_id)
    except warband_service.WarbandNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@router.get("/{warband_id}/validation")
def get_warband_validation(warband_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return validate_warband(_load_warband(db, warband_id)).to_dict()


@router.post("/{warband_id}/weirdos", status_code=201)
def add_weirdo(
    warband_id: str, payload: WeirdoPayload, db: Session = Depends(get_db)
) -> dict[str, Any]:
    warband = _load_warband(db, warband_id)
    weirdo = warband_service.add_weirdo(db, warband, payload)
    return {
        "weirdo": warband_service.weirdo_payload(weirdo, warband.ability),
        "warband": warband_service.warband_payload(warband),
    }


@router.put("/{warband_id}/weirdos/{weirdo_id}")
def update_weirdo(
    warband_id: str,
    weirdo_id: str,
    payload: WeirdoPayload,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    warband = _load_warband(db, warband_id)
    try:
        weirdo = warband_service.update_weirdo(db, warband, weirdo_id, payload)
    except warband_service.WeirdoNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {
        "weirdo": warband_service.weirdo_payload(weirdo, warband.ability),
        "warband": warband_service.warband_payload(warband),
    }


@router.delete("/{warband_id}/weirdos/{weirdo_id}")
def delete_weirdo(
    warband_id: str, weirdo_id: str, db: Session = Depends(get_db)
) -> dict[str, Any]:
    warband = _load_warband(db, warband_id)
    try:
        warband_service.remove_weirdo(db, warband, weirdo_id)
    except warband_service.WeirdoNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return warband_service.warband_payload(warband)


@router.post("/{warband_id}/weirdos/{weirdo_id}/duplicate", status_code=201)
def duplicate_weirdo(
    warband_id: str, weirdo_id: str, db: Session = Depends(get_db)
) -> dict[str, Any]:
    warband = _load_warband(db, warband_id)
    try:
        clone = warband_service.duplicate_weirdo(db, warband, weirdo_id)
    except warband_service.WeirdoNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {
        "weirdo": warband_service.weirdo_payload(clone, warband.ability),
        "warband": warband_service.warband_payload(warband),
    }


@router.post("/{warband_id}/weirdos/{weirdo_id}/move")
def move_weirdo(
    warband_id: str,
    weirdo_id: str,
    payload: MoveRequest,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    warband = _load_warband(db, warband_id)
    try:
        moved = warband_service.move_weirdo(db, warband, weirdo_id, payload.direction)
    except warband_service.WeirdoNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"moved": moved, "warband": warband_service.warband_payload(warband)}


@router.post("/{warband_id}/reorder")
def reorder_weirdos(
    warband_id: str, payload: ReorderRequest, db: Session = Depends(get_db)
) -> dict[str, Any]:
    warband = _load_warband(db, warband_id)
    try:
        changed = warband_service.reorder_weirdos(db, warband, payload.order)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"changed": changed, "warband": warband_service.warband_payload(warband)}
