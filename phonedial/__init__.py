# file: phonedial/__init__.py
"""
phonedial - international phone number lookup.

This package sanitizes free-form phone number input, resolves the country from
the international dial code, formats the number for display and reports the
local time and business-hours status in the destination country.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
