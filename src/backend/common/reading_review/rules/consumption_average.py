from __future__ import annotations

from .. import reasons
from ..config import ConsumptionAverageRuleConfig
from ..consumption import assess_consumption
from ..context import ValidationContext
from ..models import Confirmed, EnrichedRecord, Rejected, is_open
from ..registry import register_rule
from ..rule import Rule


@register_rule
class CONSUMPTION_AVERAGE(Rule):
    rule_id = "CONSUMPTION-AVERAGE"
    rule_title = "Implied consumption compared with the usual consumption"
    order = 30
    config_model = ConsumptionAverageRuleConfig

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if not is_open(record.state):
            return record

        cfg = self.config(ctx)
        assessment = assess_consumption(
            record,
            tolerance=cfg.tolerance,
            exclude_billed_value=cfg.exclude_billed_value,
        )
        if assessment is None:
            return record

        if assessment.within_band:
            record.decide(
                Rejected(
                    reason=reasons.CONSUMPTION_IN_RANGE,
                    rule_id=self.rule_id,
                    values=assessment.as_values(),
                )
            )
        else:
            record.decide(
                Confirmed(
                    reason=reasons.CONSUMPTION_OUT_OF_RANGE,
                    rule_id=self.rule_id,
                    values=assessment.as_values(),
                )
            )
        return record
