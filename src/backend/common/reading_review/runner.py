from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from .context import ValidationContext
from .logging_utils import log_event
from .models import Confirmed, EnrichedRecord, Rejected, ValidationRunReport, label_for_state
from .registry import registry
from .rule import Rule

logger = logging.getLogger(__name__)


class ValidationPipeline:
    """Applies rules to records in order, each rule seeing the state left by the previous one.

    Records are mutated in place. A rule that raises is logged and skipped for
    that record; the remaining rules still run.
    """

    def __init__(self, rules: Optional[Iterable[Rule]] = None):
        self._rules = list(rules) if rules is not None else registry.create_all()

    @property
    def rules(self) -> List[Rule]:
        return list(self._rules)

    def _active_rules(self, ctx: ValidationContext, rule_ids: Optional[set[str]]) -> List[Rule]:
        known = {rule.rule_id for rule in self._rules}
        unknown = sorted(set(ctx.config.rules) - known)
        if unknown:
            raise ValueError(f"Configuration references unknown rule ids: {', '.join(unknown)}")

        active = []
        for rule in self._rules:
            if rule_ids is not None and rule.rule_id not in rule_ids:
                continue
            if not rule.config(ctx).enabled:
                continue
            active.append(rule)
        return active

    def _apply(self, rules: List[Rule], record: EnrichedRecord, ctx: ValidationContext) -> Tuple[EnrichedRecord, int]:
        errors = 0
        for rule in rules:
            try:
                record = rule.apply(record, ctx)
            except Exception:
                errors += 1
                logger.exception(
                    "Rule %s failed for client %s; record left unchanged by this rule.",
                    rule.rule_id,
                    record.client_id,
                )
        return record, errors

    def validate(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:
        if not isinstance(record, EnrichedRecord):
            raise TypeError(f"Expected EnrichedRecord, got {type(record).__name__}.")
        validated, _ = self._apply(self._active_rules(ctx, None), record, ctx)
        return validated

    def run(
        self,
        records: Iterable[EnrichedRecord],
        ctx: ValidationContext,
        *,
        rule_ids: Optional[set[str]] = None,
    ) -> Tuple[List[EnrichedRecord], ValidationRunReport]:
        if isinstance(records, (str, bytes, dict)) or not isinstance(records, Iterable):
            raise TypeError(f"Records must be an iterable of EnrichedRecord, got {type(records).__name__}.")
        records = list(records)
        for record in records:
            if not isinstance(record, EnrichedRecord):
                raise TypeError(f"Expected EnrichedRecord, got {type(record).__name__}.")

        rules = self._active_rules(ctx, rule_ids)
        run_id = str(uuid.uuid4())
        log_event(
            logger,
            logging.INFO,
            "validation_started",
            run_id=run_id,
            records=len(records),
            rules=[rule.rule_id for rule in rules],
            reference_date=ctx.reference_date,
        )

        validated: List[EnrichedRecord] = []
        rule_errors = 0
        for record in records:
            result, errors = self._apply(rules, record, ctx)
            rule_errors += errors
            validated.append(result)

        totals: Dict[str, int] = {}
        decided_by: Dict[str, int] = {}
        for record in validated:
            label = label_for_state(record.state) or "UNSET"
            totals[label] = totals.get(label, 0) + 1
            if isinstance(record.state, (Confirmed, Rejected)) and record.state.rule_id:
                decided_by[record.state.rule_id] = decided_by.get(record.state.rule_id, 0) + 1

        report = ValidationRunReport(
            run_id=run_id,
            generated_at=datetime.now(timezone.utc),
            reference_date=ctx.reference_date,
            record_count=len(validated),
            totals=totals,
            decided_by=decided_by,
            rule_errors=rule_errors,
        )
        log_event(
            logger,
            logging.INFO,
            "validation_completed",
            run_id=run_id,
            totals=totals,
            decided_by=decided_by,
            rule_errors=rule_errors,
        )
        return validated, report
