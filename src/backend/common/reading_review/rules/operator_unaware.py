from __future__ import annotations

from typing import Optional

from .. import reasons
from ..config import OperatorUnawareDistinctRuleConfig, OperatorUnawareRuleConfig
from ..consumption import slot_decimals
from ..context import ValidationContext, as_decimal
from ..models import SLOT_COUNT, Confirmed, EnrichedRecord, Pending
from ..registry import register_rule
from ..rule import Rule


def _unacknowledged_repeat(record: EnrichedRecord) -> Optional[dict]:
    """Values describing an unexplained repeat/skip around the taken reading, or None.

    Needs every slot observation empty. The taken reading is located among the
    slots; it is suspicious when it equals the next-older reading or differs
    from the next-newer one.
    """
    if any(isinstance(obs, str) and obs.strip() for obs in record.slot_observations):
        return None
    taken = as_decimal(record.taken_value)
    if taken is None:
        return None

    slots = slot_decimals(record)
    pos = next((i for i, v in enumerate(slots) if v is not None and v == taken), None)
    if pos is None:
        return None

    older = slots[pos + 1] if pos + 1 < SLOT_COUNT else None
    newer = slots[pos - 1] if pos - 1 >= 0 else None
    if (older is not None and taken == older) or (newer is not None and taken != newer):
        return {
            "taken_slot": pos + 1,
            "older": None if older is None else str(older),
            "newer": None if newer is None else str(newer),
        }
    return None


@register_rule
class OPERATOR_UNAWARE_REPEATED(Rule):
    rule_id = "OPERATOR-UNAWARE-REPEATED"
    rule_title = "Repeated or skipped reading without any observation code"
    order = 110
    config_model = OperatorUnawareRuleConfig

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if not isinstance(record.state, Pending):
            return record
        if (record.reading.observation_code or "").strip():
            return record
        values = _unacknowledged_repeat(record)
        if values is not None:
            record.decide(Confirmed(reason=reasons.OPERATOR_UNAWARE, rule_id=self.rule_id, values=values))
        return record


@register_rule
class OPERATOR_UNAWARE_DISTINCT(Rule):
    rule_id = "OPERATOR-UNAWARE-DISTINCT"
    rule_title = "Repeated or skipped reading under a generic observation code"
    order = 120
    config_model = OperatorUnawareDistinctRuleConfig

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if not isinstance(record.state, Pending):
            return record
        code = (record.reading.observation_code or "").strip()
        if not code or code not in self.config(ctx).observation_codes:
            return record
        values = _unacknowledged_repeat(record)
        if values is not None:
            values["observation_code"] = code
            record.decide(Confirmed(reason=reasons.OPERATOR_UNAWARE, rule_id=self.rule_id, values=values))
        return record
