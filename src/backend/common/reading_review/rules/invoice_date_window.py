from __future__ import annotations

from datetime import date

from .. import reasons
from ..config import InvoiceDateWindowRuleConfig
from ..context import ValidationContext, parse_dmy_date, shift_month
from ..models import EnrichedRecord, Pending, Rejected, Unset, ValidationLabel, is_open
from ..registry import register_rule
from ..rule import Rule


def window_start(reference_date: date, window_months: int) -> date:
    """First day of the month ``window_months`` before the month preceding ``reference_date``."""
    year, month = shift_month(reference_date.year, reference_date.month, -1 - window_months)
    return date(year, month, 1)


@register_rule
class INVOICE_DATE_WINDOW(Rule):
    rule_id = "INVOICE-DATE-WINDOW"
    rule_title = "Billing date falls inside the review window"
    order = 10
    config_model = InvoiceDateWindowRuleConfig

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if not is_open(record.state):
            return record

        billed_on = parse_dmy_date(record.reading.billing_date)
        if billed_on is None:
            return record

        cfg = self.config(ctx)
        start = window_start(ctx.reference_date, cfg.window_months)
        if billed_on < start:
            record.decide(
                Rejected(
                    reason=reasons.OUT_OF_WINDOW,
                    rule_id=self.rule_id,
                    label=ValidationLabel.OUT_OF_WINDOW,
                    values={
                        "billing_date": billed_on.isoformat(),
                        "window_start": start.isoformat(),
                    },
                )
            )
            return record

        if isinstance(record.state, Unset):
            record.state = Pending()
        return record
