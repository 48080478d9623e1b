from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models
from ..schemas import ExportDocument
from . import costs, warbands

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class ImportFormatError(ValueError):
    """Raised when an uploaded warband document cannot be read."""


def export_warband(warband: models.Warband) -> dict[str, Any]:
    payload = warbands.warband_payload(warband, include_validation=False)
    payload.pop("created_at", None)
    payload.pop("updated_at", None)
    for weirdo in payload["weirdos"]:
        weirdo.pop("cost_breakdown", None)
    return {
        "format_version": FORMAT_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "warband": payload,
    }


def _unique_name(db: Session, name: str) -> str:
    existing = set(db.execute(select(models.Warband.name)).scalars().all())
    if name not in existing:
        return name
    counter = 2
    while f"{name} ({counter})" in existing:
        counter += 1
    logger.info("Warband name %r already exists, importing as %r", name, f"{name} ({counter})")
    return f"{name} ({counter})"


def parse_document(payload: Any) -> ExportDocument:
    if not isinstance(payload, Mapping):
        raise ImportFormatError("Import document must be a JSON object")
    try:
        document = ExportDocument.model_validate(payload)
    except PydanticValidationError as exc:
        raise ImportFormatError(f"Invalid warband document: {exc.error_count()} error(s)") from exc
    if document.format_version > FORMAT_VERSION:
        raise ImportFormatError(
            f"Unsupported format version {document.format_version}; "
            f"expected {FORMAT_VERSION} or lower"
        )
    return document


def import_warband(db: Session, payload: Any) -> models.Warband:
    """Create a new warband from an exported document.

    Stored ids are ignored; the warband and every weirdo receive fresh ids.
    Cached costs in the document are discarded and recomputed.
    """

    document = parse_document(payload)
    source = document.warband
    warband = models.Warband(
        id=models.new_id(),
        name=_unique_name(db, source.name),
        ability=source.ability,
        point_limit=source.point_limit,
        total_cost=0,
    )
    warband.weirdos = []
    for entry in source.weirdos:
        weirdo = models.Weirdo(id=models.new_id(), total_cost=0)
        warbands.apply_weirdo_payload(weirdo, entry)
        warband.weirdos.append(weirdo)
    for index, weirdo in enumerate(warband.weirdos):
        weirdo.position = index
    costs.update_cached_costs(warband)
    db.add(warband)
    db.commit()
    logger.info(
        "Imported warband %s as %s with %d weirdos",
        source.name,
        warband.id,
        len(warband.weirdos),
    )
    return warband
