"""Row <-> entity helpers shared by the SQL repositories."""

from dataclasses import fields
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

from booking_engine.domain.value_objects.datetime_range import ensure_utc


def _utc_datetimes(row: Mapping[str, Any]) -> dict[str, Any]:
    # SQLite drops tzinfo on the way back; every stored timestamp is UTC.
    return {
        key: ensure_utc(value) if isinstance(value, datetime) else value
        for key, value in row.items()
    }


def to_entity(entity_cls, row: Mapping[str, Any], enums: Mapping[str, type[Enum]] | None = None):
    data = _utc_datetimes(row)
    names = {f.name for f in fields(entity_cls)}
    values = {k: v for k, v in data.items() if k in names}
    for name, enum_cls in (enums or {}).items():
        if values.get(name) is not None:
            values[name] = enum_cls(values[name])
    return entity_cls(**values)


def to_row(entity, exclude: tuple[str, ...] = ("id",)) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for f in fields(entity):
        if f.name in exclude:
            continue
        value = getattr(entity, f.name)
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, Decimal):
            value = value.quantize(Decimal("0.01"))
        values[f.name] = value
    return values
