"""Rules that confirm a reading from what the operator wrote in past observations."""

from __future__ import annotations

import re
from decimal import Decimal

from .. import reasons
from ..config import ObservationKeywordsRuleConfig, ObservationNumbersRuleConfig, RuleConfigBase
from ..context import ValidationContext, as_decimal, format_reading
from ..models import Confirmed, EnrichedRecord, Pending, is_open
from ..registry import register_rule
from ..rule import Rule

_DIGITS = re.compile(r"\d+")
_DIGITS_WITH_TEXT = re.compile(r"[a-zA-Z]+.*\d+|\d+.*[a-zA-Z]+")


@register_rule
class ALPHANUMERIC_CONFIRMATION(Rule):
    rule_id = "ALPHANUMERIC-CONFIRMATION"
    rule_title = "Billed reading written in a past observation"
    order = 40
    config_model = RuleConfigBase

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if not is_open(record.state):
            return record

        billed = record.billed_value
        number = as_decimal(billed)
        if number is not None:
            if number == Decimal("0"):
                return record
            needle = format_reading(number)
        elif isinstance(billed, str) and billed.strip():
            needle = billed.strip()
        else:
            return record

        for slot, obs in enumerate(record.slot_observations, start=1):
            if isinstance(obs, str) and needle in obs:
                record.decide(
                    Confirmed(
                        reason=reasons.ALPHANUMERIC_CONFIRMED,
                        rule_id=self.rule_id,
                        values={"billed_value": needle, "observation_slot": slot},
                    )
                )
                break
        return record


@register_rule
class OBSERVATION_KEYWORDS(Rule):
    rule_id = "OBSERVATION-KEYWORDS"
    rule_title = "Past observation acknowledges the reading"
    order = 50
    config_model = ObservationKeywordsRuleConfig

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if not isinstance(record.state, Pending):
            return record

        keywords = [k.lower() for k in self.config(ctx).keywords if k]
        for slot, obs in enumerate(record.slot_observations, start=1):
            if not isinstance(obs, str) or not obs:
                continue
            text = obs.lower()
            keyword = next((k for k in keywords if k in text), None)
            if keyword is not None:
                record.decide(
                    Confirmed(
                        reason=reasons.ALPHANUMERIC_CONFIRMED,
                        rule_id=self.rule_id,
                        values={"keyword": keyword, "observation_slot": slot},
                    )
                )
                break
        return record


@register_rule
class OBSERVATION_NUMBERS(Rule):
    rule_id = "OBSERVATION-NUMBERS"
    rule_title = "Past observation quotes a number with explanatory text"
    order = 70
    config_model = ObservationNumbersRuleConfig

    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if not isinstance(record.state, Pending):
            return record

        bare_number_slot = None
        for slot, obs in enumerate(record.slot_observations, start=1):
            if not isinstance(obs, str) or not _DIGITS.search(obs):
                continue
            if _DIGITS_WITH_TEXT.search(obs):
                record.decide(
                    Confirmed(
                        reason=reasons.ALPHANUMERIC_CONFIRMED,
                        rule_id=self.rule_id,
                        values={"observation_slot": slot},
                    )
                )
                return record
            if bare_number_slot is None:
                bare_number_slot = slot

        if bare_number_slot is not None and self.config(ctx).confirm_bare_numbers:
            record.decide(
                Confirmed(
                    reason=reasons.ALPHANUMERIC_PARTIAL,
                    rule_id=self.rule_id,
                    values={"observation_slot": bare_number_slot},
                )
            )
        return record
