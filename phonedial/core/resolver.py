# file: phonedial/core/resolver.py
"""
Dial-code resolution.

Matching is longest-prefix-first: prefixes of 4, 3, 2 and 1 digits are looked up
in that order. The first length that matches wins; every country found at any
length is reported as a candidate.

Very short inputs (1-3 digits) can match short dial codes such as "+7". This is
accepted: callers that care should check the national number length.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from phonedial.reference import CountryRecord, CountryTable, default_country_table

logger = logging.getLogger(__name__)

MAX_DIAL_CODE_DIGITS = 4


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome of matching a number against the dial-code table."""

    country: CountryRecord | None
    candidates: tuple[CountryRecord, ...] = field(default_factory=tuple)
    dial_code: str = ""
    national_number: str = ""

    @property
    def matched(self) -> bool:
        return self.country is not None


def resolve_country(number: str, *, table: CountryTable | None = None) -> ResolutionResult:
    """
    Identify the country of a sanitized number.

    Args:
        number: Digits with an optional leading `+`.
        table: Country table (defaults to the bundled one).
    """

    if table is None:
        table = default_country_table()
    digits = number[1:] if number.startswith("+") else number

    country: CountryRecord | None = None
    dial_code = ""
    national = number
    candidates: list[CountryRecord] = []
    seen: set[int] = set()

    for length in range(min(MAX_DIAL_CODE_DIGITS, len(digits)), 0, -1):
        prefix = f"+{digits[:length]}"
        matches = table.lookup(prefix)
        if not matches:
            continue
        for rec in matches:
            if id(rec) not in seen:
                seen.add(id(rec))
                candidates.append(rec)
        if country is None:
            country = matches[0]
            dial_code = prefix
            national = digits[length:]

    if country is None:
        logger.debug("No dial code matched %r", number)
    else:
        logger.debug(
            "Resolved %r to %s via %s (%d candidates)",
            number,
            country.code,
            dial_code,
            len(candidates),
        )

    return ResolutionResult(
        country=country,
        candidates=tuple(candidates),
        dial_code=dial_code,
        national_number=national,
    )
