"""Convert output values to JSON-ready records for the persistence layer."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any

from .drift.models import ArchSnapshot
from .graph.models import DependencyGraph, FileNode
from .temporal.models import FileDiff, GitMetrics

# Derived properties that belong in the stored record
_PROPERTIES: dict[type, tuple[str, ...]] = {
    ArchSnapshot: ("decision_count",),
    DependencyGraph: ("total_modules", "cycle_count"),
    FileNode: ("fan_in", "fan_out"),
    FileDiff: ("additions", "deletions"),
    GitMetrics: ("total_lines_changed",),
}


def to_record(obj: Any) -> Any:
    """Convert object to JSON-serializable form.

    Dataclasses become dicts, enums their values, sets and frozensets
    sorted lists, datetimes ISO-8601 strings and timedeltas seconds.
    """
    if obj is None:
        return None
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, timedelta):
        return obj.total_seconds()
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (list, tuple)):
        return [to_record(x) for x in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted((to_record(x) for x in obj), key=str)
    if isinstance(obj, dict):
        return {str(to_record(k)): to_record(v) for k, v in obj.items()}
    if is_dataclass(obj) and not isinstance(obj, type):
        record = {f.name: to_record(getattr(obj, f.name)) for f in fields(obj)}
        for name in _PROPERTIES.get(type(obj), ()):
            record[name] = to_record(getattr(obj, name))
        return record
    raise TypeError(f"Cannot convert {type(obj).__name__} to a record")
