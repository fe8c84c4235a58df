# file: phonedial/io/report.py
"""
Report building and export helpers.

Reports are plain dictionaries (JSON-serializable) so the CLI and any other
front end render the same data.
"""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from phonedial import __version__
from phonedial.core.localtime import LocalTimeInfo
from phonedial.core.parser import ParseResult
from phonedial.history import HistoryEntry

CSV_FIELDS = [
    "id",
    "timestamp",
    "input",
    "success",
    "formatted_number",
    "display_number",
    "dial_code",
    "national_number",
    "country_code",
    "country_name",
    "country_name_en",
    "alternates",
    "error",
]


def utc_now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def lookup_report(
    result: ParseResult,
    *,
    time_info: LocalTimeInfo | None = None,
    link: str | None = None,
) -> dict[str, Any]:
    """Assemble a JSON-serializable report for one lookup."""

    country = result.country
    return {
        "metadata": {
            "tool": "phonedial",
            "version": __version__,
            "generated_at": utc_now_iso(),
        },
        "result": result.to_dict(),
        "country": country.to_dict() if country else None,
        "alternates": [c.to_dict() for c in result.alternates] if result.alternates else [],
        "local_time": time_info.to_dict() if time_info else None,
        "whatsapp_link": link,
    }


def export_json(report: Mapping[str, Any] | list[Any], path: Path) -> None:
    """Write a report to disk as pretty-printed JSON."""

    path.write_text(
        json.dumps(report, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8"
    )


def _safe_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, int, float, bool)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def _history_rows(entries: Iterable[HistoryEntry]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for entry in entries:
        r = entry.result
        rows.append(
            {
                "id": entry.id,
                "timestamp": datetime.fromtimestamp(
                    entry.timestamp / 1000, tz=timezone.utc
                ).isoformat(),
                "input": entry.input,
                "success": _safe_str(r.success),
                "formatted_number": r.formatted_number,
                "display_number": r.display_number,
                "dial_code": r.dial_code,
                "national_number": r.national_number,
                "country_code": r.country.code if r.country else "",
                "country_name": r.country.name if r.country else "",
                "country_name_en": r.country.name_en if r.country else "",
                "alternates": " ".join(c.code for c in r.alternates) if r.alternates else "",
                "error": _safe_str(r.error),
            }
        )
    return rows


def export_history_csv(entries: Iterable[HistoryEntry], path: Path) -> None:
    """Export history entries as CSV, one row per entry."""

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in _history_rows(entries):
            writer.writerow(row)
