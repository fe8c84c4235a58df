# file: phonedial/core/parser.py
"""
Phone number sanitization and parsing.

`parse_phone_number` turns free-form user input into a `ParseResult`:
- sanitize the input (separators removed, `00` prefix rewritten to `+`),
- reject input that is blank or looks like a national number (leading `0`),
- resolve the dial code against the country table (longest prefix wins),
- build the canonical `+<dial code><national number>` form and a spaced
  display form.

Parsing never raises for bad input. Failures are returned as results carrying
one of the fixed `ParseError` reasons.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Literal

from phonedial.core.formatter import NumberFormatter, default_formatter
from phonedial.core.resolver import resolve_country
from phonedial.reference import CountryRecord, CountryTable, default_country_table

logger = logging.getLogger(__name__)

ParseError = Literal["missing input", "missing country code", "unrecognized country code"]

MISSING_INPUT: ParseError = "missing input"
MISSING_COUNTRY_CODE: ParseError = "missing country code"
UNRECOGNIZED_COUNTRY_CODE: ParseError = "unrecognized country code"

PLAUSIBLE_NATIONAL_LENGTH = (7, 12)

_NON_DIALABLE = re.compile(r"[^0-9+]+")

# Fullwidth plus sign, as typed with CJK input methods.
_PLUS_SIGNS = str.maketrans({"\uff0b": "+"})


def _ascii_digits(s: str) -> str:
    """Map any Unicode decimal digit (fullwidth, Arabic-Indic, ...) to ASCII."""

    return "".join(str(unicodedata.decimal(ch)) if ch.isdecimal() else ch for ch in s)


def sanitize_number(raw: str) -> str:
    """
    Normalize common phone number input into digits with an optional leading `+`.

    - Trims whitespace.
    - Maps non-ASCII decimal digits and the fullwidth plus sign to ASCII.
    - Removes separators (spaces, dashes, parentheses, dots) and any other
      character that is not a digit or `+`.
    - Keeps a `+` only in leading position; stray `+` signs are dropped.
    - Converts an international dialing prefix `00` into `+`.

    A result without a leading `+` means the input carried no explicit country
    marker. This function does not validate; it only sanitizes input.
    """

    s = raw.strip()
    if not s:
        return s

    s = _NON_DIALABLE.sub("", _ascii_digits(s).translate(_PLUS_SIGNS))
    if s.startswith("+"):
        s = "+" + s[1:].replace("+", "")
    else:
        s = s.replace("+", "")
    if s.startswith("00"):
        s = f"+{s[2:]}"
    return s


def is_plausible_length(national_number: str) -> bool:
    """Return True if a national number has a typical length (7-12 digits)."""

    lo, hi = PLAUSIBLE_NATIONAL_LENGTH
    return lo <= len(national_number) <= hi


@dataclass(frozen=True, slots=True)
class ParseResult:
    """
    Outcome of parsing one input.

    On success `formatted_number` is the canonical `+<dial code><national>` form
    and `display_number` its spaced rendering. On failure both echo whatever the
    sanitizer produced (possibly empty) and `error` holds the reason.
    `alternates` is set only when more than one country matched.
    """

    success: bool
    original_input: str
    formatted_number: str
    display_number: str
    country: CountryRecord | None = None
    alternates: tuple[CountryRecord, ...] | None = None
    national_number: str = ""
    dial_code: str = ""
    error: ParseError | None = None
    plausible_length: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "original_input": self.original_input,
            "formatted_number": self.formatted_number,
            "display_number": self.display_number,
            "country": self.country.code if self.country else None,
            "alternates": [c.code for c in self.alternates] if self.alternates else None,
            "national_number": self.national_number,
            "dial_code": self.dial_code,
            "error": self.error,
            "plausible_length": self.plausible_length,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, table: CountryTable | None = None) -> ParseResult:
        """
        Rebuild a result from `to_dict` output.

        Countries are looked up by code in `table`; codes the table no longer
        knows are dropped.
        """

        if table is None:
            table = default_country_table()
        country_code = data.get("country")
        country = table.by_code(country_code) if isinstance(country_code, str) else None

        alternates: tuple[CountryRecord, ...] | None = None
        raw_alternates = data.get("alternates")
        if isinstance(raw_alternates, list):
            found = [table.by_code(str(c)) for c in raw_alternates]
            alternates = tuple(c for c in found if c is not None) or None

        error = data.get("error")
        if error not in (MISSING_INPUT, MISSING_COUNTRY_CODE, UNRECOGNIZED_COUNTRY_CODE):
            error = None
        return cls(
            success=bool(data.get("success")),
            original_input=str(data.get("original_input") or ""),
            formatted_number=str(data.get("formatted_number") or ""),
            display_number=str(data.get("display_number") or ""),
            country=country,
            alternates=alternates,
            national_number=str(data.get("national_number") or ""),
            dial_code=str(data.get("dial_code") or ""),
            error=error,
            plausible_length=bool(data.get("plausible_length")),
        )


def _failure(original: str, reason: ParseError, echo: str = "") -> ParseResult:
    logger.debug("Parse failed (%s) for %r", reason, original)
    return ParseResult(
        success=False,
        original_input=original,
        formatted_number=echo,
        display_number=echo,
        error=reason,
    )


def parse_phone_number(
    raw: str,
    *,
    table: CountryTable | None = None,
    formatter: NumberFormatter | None = None,
) -> ParseResult:
    """
    Parse free-form input into a `ParseResult`.

    Input without a leading `+` (or `00`) is handled heuristically: a leading
    `0` is treated as a national number and rejected; otherwise the digits are
    tried as if a `+` had been typed in front of them. A national number that
    happens to start with a valid dial code is therefore read as international.

    Args:
        raw: User-provided input (can include spaces/dashes, etc).
        table: Country table (defaults to the bundled one).
        formatter: Display formatter (defaults to the bundled grouping table).
    """

    if not raw or not raw.strip():
        return _failure(raw or "", MISSING_INPUT)

    if table is None:
        table = default_country_table()
    if formatter is None:
        formatter = default_formatter()

    original = raw.strip()
    cleaned = sanitize_number(original)

    if not cleaned.startswith("+"):
        if cleaned.startswith("0"):
            return _failure(original, MISSING_COUNTRY_CODE, cleaned)

        guess = resolve_country(f"+{cleaned}", table=table)
        if guess.matched:
            cleaned = guess.dial_code + guess.national_number
            logger.debug("Read %r as %s (no '+' given)", original, cleaned)

    resolution = resolve_country(cleaned, table=table)
    if resolution.country is None:
        return _failure(original, UNRECOGNIZED_COUNTRY_CODE, cleaned)

    canonical = resolution.dial_code + resolution.national_number
    display = formatter.format(canonical[1:], resolution.dial_code)
    alternates = resolution.candidates if len(resolution.candidates) > 1 else None

    return ParseResult(
        success=True,
        original_input=original,
        formatted_number=canonical,
        display_number=display,
        country=resolution.country,
        alternates=alternates,
        national_number=resolution.national_number,
        dial_code=resolution.dial_code,
        plausible_length=is_plausible_length(resolution.national_number),
    )
