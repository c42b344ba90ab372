from __future__ import annotations

import re

_WORD = re.compile(r"\S+")


def normalize(text: str | None) -> str:
    """Turn a token like ``whole_milk`` into display text (``Whole Milk``)."""
    if not text:
        return ""
    spaced = text.replace("_", " ")
    return _WORD.sub(lambda m: m.group(0)[:1].upper() + m.group(0)[1:].lower(), spaced)
