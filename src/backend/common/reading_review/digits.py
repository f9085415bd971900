from __future__ import annotations

from decimal import Decimal
from typing import Optional

from .context import format_reading
from .models import DigitFault

PLACE_LABELS = {
    1: "unidad",
    2: "decena",
    3: "centena",
    4: "unidad de mil",
    5: "decena de mil",
    6: "centena de mil",
    7: "unidad de millón",
    8: "decena de millón",
}


def place_label(from_right: int) -> str:
    return PLACE_LABELS.get(from_right, f"{from_right}º lugar")


def locate_digit_fault(taken: Decimal, reference: Decimal) -> Optional[DigitFault]:
    """First digit where ``taken`` differs from ``reference``, scanning from the left.

    Both values are zero-padded on the left to a common width. Only the first
    mismatch is reported; identical values give None.
    """
    a = format_reading(taken)
    b = format_reading(reference)
    width = max(len(a), len(b))
    a = a.rjust(width, "0")
    b = b.rjust(width, "0")

    for i in range(width):
        if a[i] != b[i]:
            from_right = width - i
            return DigitFault(
                position=i + 1,
                from_right=from_right,
                label=place_label(from_right),
                taken_digit=a[i],
                reference_digit=b[i],
            )
    return None
