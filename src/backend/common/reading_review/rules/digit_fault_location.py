from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from .. import reasons
from ..consumption import slot_decimals
from ..context import ValidationContext, as_decimal
from ..digits import locate_digit_fault
from ..models import SLOT_COUNT, EnrichedRecord
from ..registry import register_rule
from ..rule import Rule


def _same(a: Optional[Decimal], b: Optional[Decimal]) -> bool:
    return a is not None and b is not None and a == b


def reference_slot(slots: List[Optional[Decimal]], taken_slot: int) -> Optional[int]:
    """Slot holding the trusted value to diff the taken reading against, if any.

    For the taken reading in slot n the next-older slot is trusted when the
    readings either side of n agree (n-1 == n+1); otherwise the next-newer slot
    is trusted when it repeats the one before it (n-2 == n-1).
    """

    def s(n: int) -> Optional[Decimal]:
        return slots[n - 1] if 1 <= n <= SLOT_COUNT else None

    n = taken_slot
    if n == SLOT_COUNT:
        return n - 1 if _same(s(n - 2), s(n - 1)) else None
    if _same(s(n - 1), s(n + 1)):
        return n + 1
    if n - 2 >= 1 and _same(s(n - 2), s(n - 1)):
        return n - 1
    return None


@register_rule
class DIGIT_FAULT_LOCATION(Rule):
    rule_id = "DIGIT-FAULT-LOCATION"
    rule_title = "Locate the mistyped digit of the taken reading"
    order = 80

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        # Runs whatever the validation status is.
        taken = as_decimal(record.taken_value)
        slots = slot_decimals(record)
        taken_slot = None
        if taken is not None:
            taken_slot = next((i + 1 for i, v in enumerate(slots) if v is not None and v == taken), None)

        if taken_slot is None:
            record.error_location = reasons.READING_NOT_FOUND
            return record
        if taken_slot == 1:
            record.error_location = reasons.MISSING_LATER_READING
            return record

        ref_slot = reference_slot(slots, taken_slot)
        if ref_slot is None:
            if taken_slot == SLOT_COUNT:
                record.error_location = reasons.MISSING_EARLIER_READING
            return record

        fault = locate_digit_fault(taken, slots[ref_slot - 1])
        if fault is not None:
            record.set_digit_fault(fault)
        return record
