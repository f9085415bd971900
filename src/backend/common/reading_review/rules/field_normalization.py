"""Rules that settle defaults and types before any verdict rule runs."""

from __future__ import annotations

from typing import Any

from ..context import ValidationContext, as_decimal
from ..models import EnrichedRecord, Pending, Unset
from ..registry import register_rule
from ..rule import Rule

# What a nested object turned into after a lossy text export.
STRINGIFIED_OBJECT = "[object Object]"


@register_rule
class STATUS_DEFAULT(Rule):
    rule_id = "STATUS-DEFAULT"
    rule_title = "Undecided records start as pending"
    order = 20

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if isinstance(record.state, Unset):
            record.state = Pending()
        return record


@register_rule
class JUSTIFICATION_DEFAULT(Rule):
    rule_id = "JUSTIFICATION-DEFAULT"
    rule_title = "Justification text defaults to empty"
    order = 21

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if record.justification is None:
            record.justification = ""
        return record


def _clean_verification(value: Any) -> Any:
    if isinstance(value, str) and value.strip() in (STRINGIFIED_OBJECT, ""):
        return {}
    return value


@register_rule
class VERIFICATION_FIELDS(Rule):
    rule_id = "VERIFICATION-FIELDS"
    rule_title = "Verification fields hold structured values, not stringified placeholders"
    order = 22

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        record.verification_consolidated = _clean_verification(record.verification_consolidated)
        record.verification_previous_week = _clean_verification(record.verification_previous_week)
        return record


def _coerce(value: Any) -> Any:
    if isinstance(value, str):
        number = as_decimal(value)
        if number is not None:
            return number
    return value


@register_rule
class NUMERIC_FIELDS(Rule):
    rule_id = "NUMERIC-FIELDS"
    rule_title = "Numeric-looking text in reading fields becomes a number"
    order = 23

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        record.taken_value = _coerce(record.taken_value)
        record.billed_value = _coerce(record.billed_value)
        record.adjusted_kw = _coerce(record.adjusted_kw)
        record.slot_values = [_coerce(v) for v in record.slot_values]
        return record
