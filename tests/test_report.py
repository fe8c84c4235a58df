# file: tests/test_report.py
from __future__ import annotations

import csv
import json
from pathlib import Path

from phonedial.core.localtime import report_local_time
from phonedial.core.parser import parse_phone_number
from phonedial.history import SQLiteHistoryStore
from phonedial.io.report import export_history_csv, export_json, lookup_report


def test_lookup_report_is_json_serializable(tmp_path: Path) -> None:
    result = parse_phone_number("+1 202 555 0173")
    info = report_local_time("America/New_York")
    report = lookup_report(result, time_info=info, link="https://wa.me/12025550173")

    assert report["result"]["country"] == "US"
    assert report["country"]["name_en"] == "United States"
    assert [a["code"] for a in report["alternates"]] == ["US", "CA"]
    assert report["local_time"]["timezone"] == "America/New_York"

    out = tmp_path / "report.json"
    export_json(report, out)
    loaded = json.loads(out.read_text(encoding="utf-8"))
    assert loaded["result"]["formatted_number"] == "+12025550173"
    assert loaded["whatsapp_link"] == "https://wa.me/12025550173"


def test_lookup_report_for_failure() -> None:
    report = lookup_report(parse_phone_number("0755123456"))
    assert report["result"]["error"] == "missing country code"
    assert report["country"] is None
    assert report["alternates"] == []
    assert report["local_time"] is None


def test_export_history_csv(monkeypatch, tmp_path: Path) -> None:
    store = SQLiteHistoryStore(tmp_path / "history.sqlite3")
    monkeypatch.setattr("phonedial.history.time.time", lambda: 1_700_000_000)
    store.append(parse_phone_number("+7 701 234 5678"))

    out = tmp_path / "history.csv"
    export_history_csv(store.entries(), out)
    with out.open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))

    assert len(rows) == 1
    row = rows[0]
    assert row["id"] == "1700000000000"
    assert row["timestamp"].startswith("2023-11-14T22:13:20")
    assert row["country_code"] == "RU"
    assert row["alternates"] == "RU KZ"
    assert row["success"] == "True"
    assert row["error"] == ""
