from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional, TypeVar

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .data.catalog import Equipment, PsychicPower, Weapon
from .db import Base

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Attributes:
    speed: Optional[int] = None
    defense: Optional[str] = None
    firepower: Optional[str] = None
    prowess: Optional[str] = None
    willpower: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def item_payload(item: Any) -> dict[str, Any]:
    if isinstance(item, Mapping):
        return dict(item)
    if hasattr(item, "model_dump"):
        return item.model_dump()
    if hasattr(item, "to_dict"):
        return item.to_dict()
    return dict(vars(item))


def _load_items(raw: str | None, factory: Callable[[Mapping[str, Any]], T]) -> List[T]:
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return []
    if not isinstance(data, list):
        return []
    return [factory(entry) for entry in data if isinstance(entry, dict)]


def _dump_items(items: Iterable[Any] | None) -> str:
    return json.dumps([item_payload(item) for item in items or []], ensure_ascii=False)


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)


def touch_timestamps(mapper, connection, target) -> None:  # pragma: no cover - SQLAlchemy hook
    now = _utcnow()
    if getattr(target, "created_at", None) is None:
        target.created_at = now
    target.updated_at = now


class Warband(TimestampMixin, Base):
    __tablename__ = "warbands"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    ability: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    point_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=75)
    total_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    weirdos: Mapped[List["Weirdo"]] = relationship(
        back_populates="warband",
        cascade="all, delete-orphan",
        order_by="Weirdo.position",
    )


class Weirdo(TimestampMixin, Base):
    __tablename__ = "weirdos"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    warband_id: Mapped[str] = mapped_column(ForeignKey("warbands.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="trooper")
    speed: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    defense: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    firepower: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    prowess: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    willpower: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    close_combat_weapons_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    ranged_weapons_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    equipment_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    psychic_powers_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    leader_trait: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    total_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    warband: Mapped[Warband] = relationship(back_populates="weirdos")

    @property
    def attributes(self) -> Optional[Attributes]:
        values = Attributes(
            speed=self.speed,
            defense=self.defense,
            firepower=self.firepower,
            prowess=self.prowess,
            willpower=self.willpower,
        )
        if all(value is None for value in values.to_dict().values()):
            return None
        return values

    @attributes.setter
    def attributes(self, value: Any) -> None:
        if isinstance(value, Mapping):
            value = Attributes(**{key: value.get(key) for key in Attributes.__dataclass_fields__})
        self.speed = getattr(value, "speed", None)
        self.defense = getattr(value, "defense", None)
        self.firepower = getattr(value, "firepower", None)
        self.prowess = getattr(value, "prowess", None)
        self.willpower = getattr(value, "willpower", None)

    @property
    def close_combat_weapons(self) -> List[Weapon]:
        return _load_items(self.close_combat_weapons_json, Weapon.from_dict)

    @close_combat_weapons.setter
    def close_combat_weapons(self, items: Iterable[Any] | None) -> None:
        self.close_combat_weapons_json = _dump_items(items)

    @property
    def ranged_weapons(self) -> List[Weapon]:
        return _load_items(self.ranged_weapons_json, Weapon.from_dict)

    @ranged_weapons.setter
    def ranged_weapons(self, items: Iterable[Any] | None) -> None:
        self.ranged_weapons_json = _dump_items(items)

    @property
    def equipment(self) -> List[Equipment]:
        return _load_items(self.equipment_json, Equipment.from_dict)

    @equipment.setter
    def equipment(self, items: Iterable[Any] | None) -> None:
        self.equipment_json = _dump_items(items)

    @property
    def psychic_powers(self) -> List[PsychicPower]:
        return _load_items(self.psychic_powers_json, PsychicPower.from_dict)

    @psychic_powers.setter
    def psychic_powers(self, items: Iterable[Any] | None) -> None:
        self.psychic_powers_json = _dump_items(items)


for cls in [Warband, Weirdo]:
    event.listen(cls, "before_insert", touch_timestamps)
    event.listen(cls, "before_update", touch_timestamps)
