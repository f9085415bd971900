from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Tuple

from .. import reasons
from ..config import ReadingSequenceRuleConfig
from ..consumption import slot_decimals
from ..context import ValidationContext
from ..models import SLOT_COUNT, Confirmed, EnrichedRecord, Pending
from ..registry import register_rule
from ..rule import Rule


def sequence_break(slots: List[Optional[Decimal]]) -> Optional[Tuple[int, int]]:
    """First adjacent pair of slots (1-based) where the newer reading is not above the older one.

    Pairs with a missing reading are not comparable and are skipped.
    """
    for i in range(len(slots) - 1):
        newer, older = slots[i], slots[i + 1]
        if newer is None or older is None:
            continue
        if newer <= older:
            return i + 1, i + 2
    return None


def is_complete_descending(slots: List[Optional[Decimal]]) -> bool:
    return (
        len(slots) == SLOT_COUNT
        and all(v is not None for v in slots)
        and sequence_break(slots) is None
    )


def sequence_slots(record: EnrichedRecord, *, missing_as_zero: bool) -> List[Optional[Decimal]]:
    """Slot readings as numbers; empty months become zero when `missing_as_zero` is set."""
    slots = slot_decimals(record)
    if not missing_as_zero:
        return slots
    return [
        Decimal(0) if raw is None or (isinstance(raw, str) and not raw.strip()) else value
        for raw, value in zip(record.slot_values, slots)
    ]


@register_rule
class READING_SEQUENCE(Rule):
    rule_id = "READING-SEQUENCE"
    rule_title = "Out-of-sequence history acknowledged by the operator"
    order = 60
    config_model = ReadingSequenceRuleConfig

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if not isinstance(record.state, Pending):
            return record

        cfg = self.config(ctx)
        slots = sequence_slots(record, missing_as_zero=cfg.missing_as_zero)
        if is_complete_descending(slots):
            return record
        broken = sequence_break(slots)
        if broken is None:
            return record

        code = (record.reading.observation_code or "").strip()
        values = {"break_between": list(broken), "observation_code": code}
        if code == cfg.aware_observation_code:
            record.decide(Confirmed(reason=reasons.OPERATOR_AWARE, rule_id=self.rule_id, values=values))
        elif cfg.confirm_unaware_operator:
            record.decide(Confirmed(reason=reasons.OPERATOR_UNAWARE, rule_id=self.rule_id, values=values))
        return record
