# file: phonedial/core/formatter.py
"""
Display formatting for canonical numbers.

Formatting is table-driven: each dial code may have a `GroupingTemplate` that
splits the national number into fixed-size groups followed by a final group
holding whatever is left. Numbers without a template (or too short for theirs)
use a generic rule: first group of 3 digits, then groups of 4.

The output only inserts spaces. Removing them always gives back `+` followed by
the input digits.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic import ConfigDict as PydanticConfigDict

from phonedial.reference import DIAL_CODE_PATTERN

logger = logging.getLogger(__name__)

# The generic rule leaves national numbers shorter than this ungrouped.
MIN_GROUPED_LENGTH = 5


class GroupingTableError(ValueError):
    """Raised when a grouping table file is missing or malformed."""


@dataclass(frozen=True, slots=True)
class GroupingTemplate:
    """
    Fixed group lengths for a national number.

    `min_length` is the shortest national number the template applies to.
    """

    groups: tuple[int, ...]
    min_length: int

    def applies_to(self, national: str) -> bool:
        return len(national) >= self.min_length

    def split(self, national: str) -> list[str]:
        out: list[str] = []
        pos = 0
        for size in self.groups:
            out.append(national[pos : pos + size])
            pos += size
        if pos < len(national):
            out.append(national[pos:])
        return out


def default_groups(digits: str) -> list[str]:
    """Split digits into a group of 3 followed by groups of 4."""

    out: list[str] = []
    pos = 0
    size = 3
    while pos < len(digits):
        out.append(digits[pos : pos + size])
        pos += size
        size = 4
    return out


class _TemplateModel(BaseModel):
    model_config = PydanticConfigDict(extra="forbid")

    groups: list[int] = Field(min_length=1)
    min_length: int | None = None

    @model_validator(mode="after")
    def _check(self) -> "_TemplateModel":
        if any(g < 1 for g in self.groups):
            raise ValueError("group lengths must be positive")
        fixed = sum(self.groups)
        if self.min_length is None:
            self.min_length = fixed + 1
        elif self.min_length < fixed:
            raise ValueError(f"min_length {self.min_length} is shorter than the groups ({fixed})")
        return self

    def to_template(self) -> GroupingTemplate:
        min_length = self.min_length if self.min_length is not None else sum(self.groups) + 1
        return GroupingTemplate(groups=tuple(self.groups), min_length=min_length)


class NumberFormatter:
    """Applies grouping templates keyed by dial code."""

    def __init__(self, templates: Mapping[str, GroupingTemplate] | None = None) -> None:
        self._templates: dict[str, GroupingTemplate] = dict(templates or {})

    @property
    def templates(self) -> Mapping[str, GroupingTemplate]:
        return dict(self._templates)

    def template_for(self, dial_code: str) -> GroupingTemplate | None:
        return self._templates.get(dial_code)

    def format(self, digits: str, dial_code: str) -> str:
        """
        Format canonical digits (no leading `+`) for display.

        Args:
            digits: Dial code digits followed by the national number.
            dial_code: The matched dial code, e.g. "+86". May be empty.

        Returns:
            e.g. "+86 13 8 1234 5678".
        """

        code_digits = dial_code[1:] if dial_code.startswith("+") else dial_code
        if not code_digits or not digits.startswith(code_digits):
            # No usable dial code: group the whole digit string.
            if len(digits) >= MIN_GROUPED_LENGTH:
                return "+" + " ".join(default_groups(digits))
            return f"+{digits}"

        national = digits[len(code_digits) :]
        template = self._templates.get(f"+{code_digits}")
        if template is not None and template.applies_to(national):
            return f"+{code_digits} " + " ".join(template.split(national))
        if template is not None:
            logger.debug(
                "National number for %s too short for its template (%d < %d)",
                dial_code,
                len(national),
                template.min_length,
            )

        if len(national) >= MIN_GROUPED_LENGTH:
            return f"+{code_digits} " + " ".join(default_groups(national))
        return f"+{digits}"


def load_grouping_table(path: Path | None = None) -> dict[str, GroupingTemplate]:
    """
    Load grouping templates from YAML.

    Args:
        path: Optional YAML file. Defaults to the bundled table.

    Raises:
        GroupingTableError: if the file is missing or an entry is invalid.
    """

    if path is None:
        text = resources.files("phonedial").joinpath("data/grouping.yaml").read_text(
            encoding="utf-8"
        )
        source = "grouping.yaml"
    else:
        if not path.exists():
            raise GroupingTableError(f"Grouping table not found: {path}")
        text = path.read_text(encoding="utf-8")
        source = str(path)

    raw = yaml.safe_load(text)
    entries = raw.get("templates") if isinstance(raw, dict) else None
    if not isinstance(entries, dict):
        raise GroupingTableError(f"{source}: expected a 'templates' mapping")

    dial_re = re.compile(DIAL_CODE_PATTERN)
    out: dict[str, GroupingTemplate] = {}
    for key, value in entries.items():
        dial_code = str(key)
        if not dial_re.match(dial_code):
            raise GroupingTableError(f"{source}: invalid dial code {dial_code!r}")
        try:
            out[dial_code] = _TemplateModel.model_validate(value).to_template()
        except ValidationError as exc:
            raise GroupingTableError(f"{source}: invalid template for {dial_code}: {exc}") from exc

    logger.debug("Loaded %d grouping templates from %s", len(out), source)
    return out


@lru_cache(maxsize=1)
def default_formatter() -> NumberFormatter:
    """Return a formatter over the bundled grouping table (loaded once)."""

    return NumberFormatter(load_grouping_table())


def format_number(digits: str, dial_code: str) -> str:
    """Format canonical digits with the bundled grouping table."""

    return default_formatter().format(digits, dial_code)
