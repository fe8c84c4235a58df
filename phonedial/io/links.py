# file: phonedial/io/links.py
"""WhatsApp click-to-chat links."""

from __future__ import annotations

import re
from urllib.parse import quote

WHATSAPP_BASE_URL = "https://wa.me/"

_STRIP = re.compile(r"[+\s]")

# Characters left unescaped, matching JavaScript's encodeURIComponent.
_SAFE = "-_.!~*'()"


def whatsapp_link(number: str, message: str | None = None) -> str:
    """
    Build a `https://wa.me/` link for a canonical or display-formatted number.

    `+` signs and whitespace are removed from the number; `message` is
    percent-encoded into the `text` query parameter.
    """

    digits = _STRIP.sub("", number)
    url = f"{WHATSAPP_BASE_URL}{digits}"
    if message:
        url = f"{url}?text={quote(message, safe=_SAFE)}"
    return url
