from __future__ import annotations

import re
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..services import transfer
from ..services import warbands as warband_service

router = APIRouter(prefix="/api/warbands", tags=["export"])


def _export_filename(name: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "-", name or "").strip("-").lower()
    return f"{slug or 'warband'}.json"


@router.get("/{warband_id}/export")
def export_warband(warband_id: str, db: Session = Depends(get_db)) -> JSONResponse:
    try:
        warband = warband_service.get_warband(db, warband_id)
    except warband_service.WarbandNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    filename = _export_filename(warband.name)
    return JSONResponse(
        transfer.export_warband(warband),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", status_code=201)
def import_warband(
    payload: Any = Body(...), db: Session = Depends(get_db)
) -> dict[str, Any]:
    try:
        warband = transfer.import_warband(db, payload)
    except transfer.ImportFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return warband_service.warband_payload(warband)
