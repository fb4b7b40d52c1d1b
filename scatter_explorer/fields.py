"""Field inspection: numeric vs categorical classification of records."""

from __future__ import annotations

import math
from typing import Any, Iterable, Optional

import numpy as np
import pandas as pd

from .loader import Record

FIELD_NUMERIC = "numeric"
FIELD_CATEGORICAL = "categorical"


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


def to_number(value: Any) -> Optional[float]:
    """Coerce a record value to a finite float, or ``None`` when it is not one."""
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def field_names(records: Iterable[Record]) -> list[str]:
    """All keys seen across the records, in first-seen order."""
    names: dict[str, None] = {}
    for record in records:
        names.update(dict.fromkeys(record))
    return list(names)


def records_frame(records: list[Record]) -> pd.DataFrame:
    return pd.DataFrame.from_records(records, columns=field_names(records)).astype(object)


def infer_field_types(records: list[Record]) -> dict[str, str]:
    """Classify every field as numeric or categorical.

    Empty values (``None``, NaN, ``""``) are ignored. A field is numeric when
    each remaining value parses to a finite number; a field with nothing left
    to inspect is categorical.
    """
    if not records:
        return {}
    frame = records_frame(records)
    types: dict[str, str] = {}
    for name in frame.columns:
        series = frame[name]
        present = series[~series.map(is_empty)]
        if present.empty:
            types[name] = FIELD_CATEGORICAL
            continue
        numbers = present.map(to_number)
        types[name] = FIELD_NUMERIC if numbers.notna().all() else FIELD_CATEGORICAL
    return types


def unique_values(records: list[Record], field: str) -> list[Any]:
    """Distinct non-null values of ``field``.

    First-seen order, or ascending numeric order when every value is a number
    (or a numeric string).
    """
    series = pd.Series([record.get(field) for record in records], dtype=object)
    series = series[series.notna()]
    values = list(pd.unique(series))
    if values and all(to_number(value) is not None for value in values):
        values.sort(key=to_number)
    return values


def split_fields(types: dict[str, str]) -> tuple[list[str], list[str], list[str]]:
    """Return ``(numeric, categorical, all)`` field names, preserving order."""
    numeric = [name for name, kind in types.items() if kind == FIELD_NUMERIC]
    categorical = [name for name, kind in types.items() if kind == FIELD_CATEGORICAL]
    return numeric, categorical, list(types)
