# file: tests/test_history.py
from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from phonedial.core.parser import parse_phone_number
from phonedial.history import SQLiteHistoryStore


def _freeze(monkeypatch, seconds: float) -> None:
    monkeypatch.setattr("phonedial.history.time.time", lambda: seconds)


def test_append_and_read_back(monkeypatch, tmp_path: Path) -> None:
    store = SQLiteHistoryStore(tmp_path / "history.sqlite3")
    _freeze(monkeypatch, 1_700_000_000)
    result = parse_phone_number("+8613812345678")
    entry = store.append(result)

    assert entry.id == "1700000000000"
    assert entry.timestamp == 1_700_000_000_000
    assert entry.input == "+8613812345678"

    got = store.get(entry.id)
    assert got is not None
    assert got.result == result
    assert len(store) == 1


def test_ids_are_unique_within_one_millisecond(monkeypatch, tmp_path: Path) -> None:
    store = SQLiteHistoryStore(tmp_path / "history.sqlite3")
    _freeze(monkeypatch, 1_700_000_000)
    a = store.append(parse_phone_number("+8613812345678"))
    b = store.append(parse_phone_number("+442083661177"))
    assert a.id != b.id
    assert b.id == "1700000000000-1"


def test_entries_newest_first_and_limit(monkeypatch, tmp_path: Path) -> None:
    store = SQLiteHistoryStore(tmp_path / "history.sqlite3")
    for i, number in enumerate(["+8613812345678", "+442083661177", "+12025550173"]):
        _freeze(monkeypatch, 1_700_000_000 + i)
        store.append(parse_phone_number(number))

    entries = store.entries()
    assert [e.input for e in entries] == ["+12025550173", "+442083661177", "+8613812345678"]
    assert [e.input for e in store.entries(limit=1)] == ["+12025550173"]


def test_capacity_evicts_oldest(monkeypatch, tmp_path: Path) -> None:
    store = SQLiteHistoryStore(tmp_path / "history.sqlite3", capacity=2)
    for i, number in enumerate(["+8613812345678", "+442083661177", "+12025550173"]):
        _freeze(monkeypatch, 1_700_000_000 + i)
        store.append(parse_phone_number(number))

    assert len(store) == 2
    assert [e.input for e in store.entries()] == ["+12025550173", "+442083661177"]


def test_delete_and_clear(monkeypatch, tmp_path: Path) -> None:
    store = SQLiteHistoryStore(tmp_path / "history.sqlite3")
    _freeze(monkeypatch, 1_700_000_000)
    first = store.append(parse_phone_number("+8613812345678"))
    _freeze(monkeypatch, 1_700_000_001)
    store.append(parse_phone_number("+442083661177"))

    assert store.delete(first.id)
    assert not store.delete(first.id)
    assert store.get(first.id) is None
    assert len(store) == 1

    assert store.clear() == 1
    assert store.entries() == []


def test_history_survives_reopen(monkeypatch, tmp_path: Path) -> None:
    path = tmp_path / "nested" / "history.sqlite3"
    _freeze(monkeypatch, 1_700_000_000)
    SQLiteHistoryStore(path).append(parse_phone_number("+1 876 555 1234"))

    entries = SQLiteHistoryStore(path).entries()
    assert len(entries) == 1
    r = entries[0].result
    assert r.country is not None and r.country.code == "JM"
    assert r.alternates is not None and len(r.alternates) == 3


def test_capacity_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        SQLiteHistoryStore(tmp_path / "history.sqlite3", capacity=0)


def test_connections_are_closed_after_each_call(monkeypatch, tmp_path: Path) -> None:
    store = SQLiteHistoryStore(tmp_path / "history.sqlite3")
    opened: list[sqlite3.Connection] = []
    connect = store._connect

    def tracking_connect() -> sqlite3.Connection:
        conn = connect()
        opened.append(conn)
        return conn

    monkeypatch.setattr(store, "_connect", tracking_connect)
    entry = store.append(parse_phone_number("+8613812345678"))
    store.entries()
    store.get(entry.id)
    assert len(store) == 1

    assert len(opened) == 4
    for conn in opened:
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")
