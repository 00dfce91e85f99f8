"""Loading student records and deriving their class codes."""

from typing import Any
from pathlib import Path
import json
import logging

import pandas as pd

from .errors import NotFoundError, ShapeError

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "data2.json"
CLASSCODE_BASE = 18
CLASSCODE_BLOCK_SIZE = 20


def classcode_for(index: int, base: int = CLASSCODE_BASE, block_size: int = CLASSCODE_BLOCK_SIZE) -> int:
    """Return the class code of the record at position ``index``.

    Every run of ``block_size`` consecutive records shares one code,
    starting at ``base``: 0-19 -> 18, 20-39 -> 19, and so on.
    """
    if index < 0:
        raise ValueError(f"Record index must be non-negative, got {index}")
    if block_size < 1:
        raise ValueError(f"Block size must be at least 1, got {block_size}")
    return base + index // block_size


def load_records(
    data_path: str | Path | None = None,
    base_dir: str | Path | None = None,
    base: int = CLASSCODE_BASE,
    block_size: int = CLASSCODE_BLOCK_SIZE,
) -> list[dict[str, Any]]:
    """
    Read a JSON array of records and add ``classcode`` to each one.

    Args:
        data_path: Path to the JSON file. Relative paths resolve against
            ``base_dir``; None means ``data2.json`` in ``base_dir``.
        base_dir: Directory used for relative paths (defaults to cwd).
        base: Class code of the first block.
        block_size: Number of records per class code.

    Returns:
        New dicts in input order, each with ``classcode`` added.

    Raises:
        NotFoundError: The file does not exist.
        ShapeError: The file is not JSON, not an array, or holds non-objects.
    """
    root = Path(base_dir) if base_dir is not None else Path.cwd()
    path = Path(data_path) if data_path is not None else Path(DEFAULT_DATA_FILE)
    if not path.is_absolute():
        path = root / path

    if not path.exists():
        raise NotFoundError(f"Data file not found: {path}")

    with path.open("r", encoding="utf-8-sig") as f:
        try:
            items = json.load(f)
        except json.JSONDecodeError as exc:
            raise ShapeError(f"Data file is not valid JSON: {path} ({exc})") from exc

    records = build_records(items, base, block_size, source=f"Data file {path}")
    logger.debug("Loaded %d records from %s", len(records), path)
    return records


def build_records(
    items: list[Any],
    base: int = CLASSCODE_BASE,
    block_size: int = CLASSCODE_BLOCK_SIZE,
    source: str = "data",
) -> list[dict[str, Any]]:
    """Copy each object of ``items`` with its ``classcode`` added."""
    if not isinstance(items, list):
        raise ShapeError(f"{source} does not contain an array")

    records = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise ShapeError(f"Record {idx} in {source} is not an object")
        records.append({**item, "classcode": classcode_for(idx, base, block_size)})
    return records


def select_slice(
    records: list[dict[str, Any]],
    start: int = 0,
    end: int | None = None,
) -> list[dict[str, Any]]:
    """Return the contiguous run ``records[start:end]``."""
    if start is None:
        start = 0
    if start < 0 or (end is not None and end < 0):
        raise ValueError(f"Slice bounds must be non-negative (start={start}, end={end})")
    if end is not None and start > end:
        raise ValueError(f"Slice start {start} is after end {end}")
    return records[start:end]


def select_classcode(records: list[dict[str, Any]], classcode: int) -> list[dict[str, Any]]:
    """Return the block of records carrying the given class code."""
    return [r for r in records if r.get("classcode") == classcode]


class _BlankMissing(dict):
    def __missing__(self, key):
        return ""


def field_value(record: dict[str, Any], field: str | list[str]) -> Any:
    """
    Look up ``field`` in ``record``, treating absent and null as ``""``.

    ``field`` may be a list of names tried in order; the first one present
    and not null wins (``["year", "name"]`` falls back to the name).
    """
    names = [field] if isinstance(field, str) else list(field)
    for name in names:
        value = record.get(name)
        if value is not None:
            return value
    return ""


def render_label(template: str, record: dict[str, Any]) -> str:
    """Format ``template`` with record fields; unknown or null fields render blank."""
    values = _BlankMissing({k: v for k, v in record.items() if v is not None})
    return template.format_map(values)


def records_to_frame(records: list[dict[str, Any]]) -> pd.DataFrame:
    """Build a preview table with ``classcode`` first and blanks for missing fields."""
    columns = ["classcode"]
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)

    df = pd.DataFrame(records, columns=columns)
    return df.astype(object).where(df.notna(), "")
