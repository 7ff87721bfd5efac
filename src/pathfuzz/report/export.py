# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JSON/CSV export of fuzz results and loading them back."""

from __future__ import annotations

import csv
import json
import os
from collections.abc import Iterable

from ..errors import ExportError
from ..models.result import RESULT_FIELDS, FuzzResult

SUPPORTED_FORMATS = ("json", "csv")


def export_format(path: str) -> str | None:
    """Return ``json``/``csv`` from the file extension, or None."""
    ext = os.path.splitext(path)[1].lower().lstrip(".")
    return ext if ext in SUPPORTED_FORMATS else None


def _csv_row(result: FuzzResult) -> dict[str, str | int]:
    return {
        "url": result.url,
        "word": result.word,
        "status": result.status,
        "reflected": "true" if result.reflected else "false",
        "error": result.error or "",
    }


def export_results(results: Iterable[FuzzResult], path: str) -> int:
    """Write ``results`` to ``path``; the extension selects the format. Returns the record count."""
    fmt = export_format(path)
    if fmt is None:
        raise ExportError(f"Unknown export format for {path}. Supported: .json, .csv")

    records = list(results)
    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as handle:
            if fmt == "json":
                json.dump([record.to_dict() for record in records], handle, indent=2)
                handle.write("\n")
            else:
                writer = csv.DictWriter(handle, fieldnames=RESULT_FIELDS)
                writer.writeheader()
                for record in records:
                    writer.writerow(_csv_row(record))
    except OSError as exc:
        raise ExportError(f"Failed to write {path}: {exc}") from exc
    return len(records)


def load_results(path: str) -> list[FuzzResult]:
    """Read a JSON or CSV export back into FuzzResult records."""
    fmt = export_format(path) or "json"
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            if fmt == "csv":
                rows = list(csv.DictReader(handle))
            else:
                rows = json.load(handle)
    except OSError as exc:
        raise ExportError(f"Failed to read {path}: {exc}") from exc
    except (json.JSONDecodeError, csv.Error, UnicodeDecodeError) as exc:
        raise ExportError(f"Failed to parse {path}: {exc}") from exc

    if not isinstance(rows, list):
        raise ExportError(f"Failed to parse {path}: expected an array of records")
    try:
        return [FuzzResult.from_mapping(row) for row in rows]
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ExportError(f"Malformed record in {path}: {exc}") from exc


__all__ = ["SUPPORTED_FORMATS", "export_format", "export_results", "load_results"]
