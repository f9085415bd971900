from __future__ import annotations

import re
import unicodedata
from typing import Any

_WHITESPACE = re.compile(r"\s+")


def normalize_name(value: Any) -> str:
    """Upper-case, accent-free, single-spaced form used to match person names.

    Both the roster index and every lookup go through this function so the two
    sides never disagree on what a "normalized" name is.
    """
    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", stripped.upper()).strip()
