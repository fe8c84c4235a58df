# file: phonedial/reference.py
"""
Country reference data.

The reference table is read-only: a list of `CountryRecord` entries and a
mapping from dial code (`+` followed by 1-4 digits) to every country registered
under that code. Record order is preserved; the first country listed for a dial
code is the canonical representative of that code.

The bundled table lives in `phonedial/data/countries.yaml`. A different YAML
file with the same shape can be supplied through settings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic import ConfigDict as PydanticConfigDict

logger = logging.getLogger(__name__)

DIAL_CODE_PATTERN = r"^\+\d{1,4}$"

# Dial codes most used in export trade, in display order.
COMMON_DIAL_CODES: tuple[str, ...] = (
    "+86", "+1", "+44", "+49", "+33", "+39", "+34", "+31", "+41", "+46",
    "+81", "+82", "+65", "+60", "+62", "+66", "+84", "+63", "+91", "+92",
    "+880", "+94", "+971", "+966", "+20", "+27", "+234", "+254", "+61",
    "+64", "+55", "+54", "+52", "+7", "+90", "+98", "+964", "+972",
)


class ReferenceDataError(ValueError):
    """Raised when a country data file is missing or malformed."""


def flag_for_code(code: str) -> str:
    """Return the regional-indicator flag glyph for a two-letter country code."""

    code = code.strip().upper()
    if len(code) != 2 or not code.isalpha() or not code.isascii():
        return ""
    return "".join(chr(0x1F1E6 + ord(ch) - ord("A")) for ch in code)


@dataclass(frozen=True, slots=True)
class CountryRecord:
    """
    A single country/region entry.

    `format` is an example-number hint for people; it is never parsed.
    """

    code: str
    name: str
    name_en: str
    dial_code: str
    timezone: str
    capital: str
    currency: str
    currency_name: str
    region: str
    languages: tuple[str, ...]
    flag: str
    format: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "name_en": self.name_en,
            "dial_code": self.dial_code,
            "timezone": self.timezone,
            "capital": self.capital,
            "currency": self.currency,
            "currency_name": self.currency_name,
            "region": self.region,
            "languages": list(self.languages),
            "flag": self.flag,
            "format": self.format,
        }


class _CountryModel(BaseModel):
    model_config = PydanticConfigDict(extra="ignore")

    code: str = Field(min_length=2)
    name: str
    name_en: str
    dial_code: str = Field(pattern=DIAL_CODE_PATTERN)
    timezone: str
    capital: str = ""
    currency: str = ""
    currency_name: str = ""
    region: str = ""
    languages: list[str] = Field(default_factory=list)
    flag: str | None = None
    format: str = ""

    @field_validator("code")
    @classmethod
    def _upper_code(cls, v: str) -> str:
        return v.strip().upper()

    def to_record(self) -> CountryRecord:
        return CountryRecord(
            code=self.code,
            name=self.name,
            name_en=self.name_en,
            dial_code=self.dial_code,
            timezone=self.timezone,
            capital=self.capital,
            currency=self.currency,
            currency_name=self.currency_name,
            region=self.region,
            languages=tuple(self.languages),
            flag=self.flag if self.flag else flag_for_code(self.code),
            format=self.format,
        )


class CountryTable:
    """
    Immutable lookup service over a list of country records.

    `lookup` takes exact dial-code keys such as "+86" or "+1876".
    """

    def __init__(self, records: Iterable[CountryRecord]) -> None:
        self._records: tuple[CountryRecord, ...] = tuple(records)
        by_dial: dict[str, list[CountryRecord]] = {}
        by_code: dict[str, CountryRecord] = {}
        for rec in self._records:
            by_dial.setdefault(rec.dial_code, []).append(rec)
            if rec.code in by_code:
                raise ReferenceDataError(f"Duplicate country code: {rec.code}")
            by_code[rec.code] = rec
        self._by_dial = {k: tuple(v) for k, v in by_dial.items()}
        self._by_code = by_code

    def __len__(self) -> int:
        return len(self._records)

    @property
    def countries(self) -> tuple[CountryRecord, ...]:
        return self._records

    @property
    def dial_codes(self) -> Mapping[str, tuple[CountryRecord, ...]]:
        return dict(self._by_dial)

    def lookup(self, dial_code: str) -> tuple[CountryRecord, ...]:
        """Return every country registered under `dial_code` (empty if none)."""

        return self._by_dial.get(dial_code, ())

    def by_code(self, code: str) -> CountryRecord | None:
        return self._by_code.get(code.strip().upper())

    def search(self, query: str) -> list[CountryRecord]:
        """
        Case-insensitive substring search over name, English name, dial code and
        country code. A blank query returns no results.
        """

        q = query.strip().lower()
        if not q:
            return []
        return [
            c
            for c in self._records
            if q in c.name.lower()
            or q in c.name_en.lower()
            or q in c.dial_code
            or q in c.code.lower()
        ]

    def by_region(self, region: str) -> list[CountryRecord]:
        return [c for c in self._records if c.region == region]

    def regions(self) -> list[str]:
        out: list[str] = []
        for c in self._records:
            if c.region and c.region not in out:
                out.append(c.region)
        return out

    def common(self) -> list[CountryRecord]:
        """Frequently used trade countries, one per dial code, in display order."""

        out: list[CountryRecord] = []
        for dial_code in COMMON_DIAL_CODES:
            matches = self.lookup(dial_code)
            if matches:
                out.append(matches[0])
        return out


def _read_countries_yaml(text: str, *, source: str) -> list[CountryRecord]:
    raw = yaml.safe_load(text)
    items = raw.get("countries") if isinstance(raw, dict) else raw
    if not isinstance(items, list):
        raise ReferenceDataError(f"{source}: expected a list of countries")

    records: list[CountryRecord] = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise ReferenceDataError(f"{source}: entry {idx} is not a mapping")
        try:
            records.append(_CountryModel.model_validate(item).to_record())
        except ValidationError as exc:
            raise ReferenceDataError(f"{source}: invalid entry {idx}: {exc}") from exc
    return records


def load_country_table(path: Path | None = None) -> CountryTable:
    """
    Load a country table from YAML.

    Args:
        path: Optional YAML file. Defaults to the bundled table.

    Raises:
        ReferenceDataError: if the file is missing or an entry is invalid.
    """

    if path is None:
        text = resources.files("phonedial").joinpath("data/countries.yaml").read_text(
            encoding="utf-8"
        )
        source = "countries.yaml"
    else:
        if not path.exists():
            raise ReferenceDataError(f"Country data file not found: {path}")
        text = path.read_text(encoding="utf-8")
        source = str(path)

    records = _read_countries_yaml(text, source=source)
    table = CountryTable(records)
    logger.debug(
        "Loaded %d countries (%d dial codes) from %s", len(table), len(table.dial_codes), source
    )
    return table


@lru_cache(maxsize=1)
def default_country_table() -> CountryTable:
    """Return the bundled country table (loaded once)."""

    return load_country_table()
