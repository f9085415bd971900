"""Alternative ways to fill `UbicacionError`; both are off unless enabled per run."""

from __future__ import annotations

from .. import reasons
from ..config import KwAdjustedMagnitudeRuleConfig, ReadingOutOfRangeRuleConfig
from ..consumption import slot_decimals
from ..context import ValidationContext, as_decimal
from ..digits import PLACE_LABELS
from ..models import EnrichedRecord
from ..registry import register_rule
from ..rule import Rule

MAX_KW_DIGITS = 6


@register_rule
class KW_ADJUSTED_MAGNITUDE(Rule):
    rule_id = "KW-ADJUSTED-MAGNITUDE"
    rule_title = "Error place taken from the size of the adjusted kW"
    order = 90
    config_model = KwAdjustedMagnitudeRuleConfig

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        cfg = self.config(ctx)
        if (record.reading.reading_type or "").strip() != cfg.reading_type:
            return record
        # A located digit fault already names the place.
        if record.digit_fault is not None:
            return record
        kw = as_decimal(record.adjusted_kw)
        if kw is None:
            return record

        digits = len(str(abs(int(kw))))
        if digits <= MAX_KW_DIGITS:
            record.error_location = PLACE_LABELS[digits]
        else:
            record.error_location = reasons.KW_OUT_OF_RANGE
        return record


@register_rule
class READING_OUT_OF_RANGE(Rule):
    rule_id = "READING-OUT-OF-RANGE"
    rule_title = "Taken reading outside the span of the history"
    order = 100
    config_model = ReadingOutOfRangeRuleConfig

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if record.error_location:
            return record
        taken = as_decimal(record.taken_value)
        if taken is None:
            return record
        billed = as_decimal(record.billed_value)

        others = [
            v for v in slot_decimals(record) if v is not None and v != taken and (billed is None or v != billed)
        ]
        if len(others) < 2:
            return record
        if taken < min(others) or taken > max(others):
            record.error_location = reasons.READING_OUT_OF_RANGE
        return record
