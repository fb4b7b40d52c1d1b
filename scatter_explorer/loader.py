"""Dataset loading for the scatter explorer.

Uploaded files arrive as raw bytes; the bundled sample lives next to the
package. Both paths produce a list of records (plain dicts) in file order.
"""

from __future__ import annotations

import io
import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import pandas as pd

Record = dict[str, Any]


class DatasetError(ValueError):
    """Raised when an input file cannot be turned into records."""


def _read_csv(text: str, engine: str, **options: Any) -> pd.DataFrame:
    return pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        engine=engine,
        **options,
    )


def parse_csv(text: str) -> list[Record]:
    """Parse CSV text with a header row; every cell is kept as a string.

    Rows align to the header: extra trailing cells are dropped, missing ones
    become ``""``, and a repeated column name keeps its last value.
    """
    if not text.strip():
        return []
    try:
        try:
            header = _read_csv(text, "c", header=None, nrows=1)
            df = _read_csv(text, "c", index_col=False)
        except pd.errors.ParserError:
            header = _read_csv(text, "python", header=None, nrows=1)
            df = _read_csv(text, "python", index_col=False)
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as exc:
        raise DatasetError(f"Malformed CSV: {exc}") from exc
    names = [str(name) for name in header.iloc[0]]
    # pandas renames repeated headers (x, x.1); zipping against the raw names
    # folds them back into one key.
    return [
        dict(zip(names, values))
        for values in df.fillna("").itertuples(index=False, name=None)
    ]


def parse_json(text: str) -> list[Record]:
    """Accept a top-level array of records or an object with a ``data`` array."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DatasetError(f"Malformed JSON: {exc.msg} (line {exc.lineno})") from exc
    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        rows = payload["data"]
    else:
        rows = []
    return [row for row in rows if isinstance(row, dict)]


def is_csv_name(filename: str) -> bool:
    return Path(filename or "").suffix.lower() == ".csv"


def parse_upload(filename: str, payload: bytes) -> list[Record]:
    """Decode an uploaded file and parse it by extension.

    ``.csv`` files go through the CSV reader, anything else is treated as
    JSON. Raises :class:`DatasetError` when nothing usable comes out.
    """
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DatasetError("File is not valid UTF-8 text.") from exc

    records = parse_csv(text) if is_csv_name(filename) else parse_json(text)
    if not records:
        raise DatasetError("No data rows were parsed.")
    return records


@lru_cache(maxsize=4)
def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def load_sample(path: str | Path) -> list[Record]:
    """Load the bundled JSON dataset."""
    records = parse_json(_read_text(str(path)))
    if not records:
        raise DatasetError(f"Sample dataset {Path(path).name} has no rows.")
    return records
