"""Write collected records to disk as JSON Lines, JSON or CSV."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, List, Sequence

from collector.pagination.errors import InvalidInput
from collector.pagination.models import Record

SUPPORTED_SUFFIXES = (".jsonl", ".json", ".csv")


def collect_columns(records: Iterable[Record]) -> List[str]:
    """Return the union of record keys in first-seen order."""
    seen: dict[str, None] = {}
    for record in records:
        for key in record:
            seen.setdefault(key, None)
    return list(seen)


def _cell(value: object) -> object:
    # Lists and nested objects survive flattening; keep them readable in CSV.
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return "" if value is None else value


def write_records(records: Sequence[Record], path: Path) -> Path:
    """Write *records* to *path*, choosing the format from its suffix.

    Raises:
        InvalidInput: If the suffix is not one of ``.jsonl``, ``.json``, ``.csv``.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise InvalidInput(
            f"unsupported output format {suffix or '(none)'!r}; "
            f"use one of {', '.join(SUPPORTED_SUFFIXES)}"
        )
    path.parent.mkdir(parents=True, exist_ok=True)

    if suffix == ".jsonl":
        with path.open("w", encoding="utf-8") as fh:
            for record in records:
                fh.write(json.dumps(record, ensure_ascii=False) + "\n")
    elif suffix == ".json":
        path.write_text(json.dumps(list(records), indent=2, ensure_ascii=False), encoding="utf-8")
    else:
        columns = collect_columns(records)
        with path.open("w", encoding="utf-8", newline="") as fh:
            writer = csv.DictWriter(fh, fieldnames=columns)
            writer.writeheader()
            for record in records:
                writer.writerow({key: _cell(value) for key, value in record.items()})
    return path
