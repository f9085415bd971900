from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from typing import Any, List, Optional, Tuple

from .context import parse_dmy_date, shift_month
from .logging_utils import log_event
from .models import (
    SLOT_COUNT,
    EnrichedRecord,
    RawReading,
    ReadingValue,
)
from .resolver import ReferenceResolver

logger = logging.getLogger(__name__)


class RecordEnricher:
    """Builds `EnrichedRecord`s from raw readings.

    Every lookup miss becomes an empty field; a raw reading is never dropped.
    """

    def __init__(self, resolver: ReferenceResolver, *, reference_date: Optional[date] = None):
        self._resolver = resolver
        self._reference_date = reference_date or date.today()

    def enrich(self, raw: Any) -> EnrichedRecord:
        reading = raw if isinstance(raw, RawReading) else RawReading.model_validate(raw)
        client = reading.client_id

        meter = self._resolver.resolve_meter(client)

        reader_identity = self._resolver.resolve_reader_identity(client, reading.reading_date)
        by_identity = self._resolver.resolve_operator(reader_identity)
        clarified_name = (reading.clarifications or "").strip() or None
        by_name = self._resolver.resolve_operator_by_name(clarified_name)

        operator_name = (by_identity.name if by_identity else None) or clarified_name or (
            by_name.name if by_name else None
        )
        operator_identity = reader_identity or (by_name.identity_card if by_name else None)
        operator_title = (by_identity.job_title if by_identity else None) or (by_name.job_title if by_name else None)
        operator_site = (by_identity.site if by_identity else None) or (by_name.site if by_name else None)

        values, observations = self.historical_slots(reading)

        return EnrichedRecord.from_reading(
            reading,
            slot_values=values,
            slot_observations=observations,
            operator_name=operator_name,
            operator_identity=operator_identity,
            operator_title=operator_title,
            operator_site=operator_site,
            meter_number=meter.meter_number if meter else None,
            meter_brand=meter.brand if meter else None,
            meter_type=meter.meter_type if meter else None,
        )

    def enrich_all(self, raws: Iterable[Any]) -> List[EnrichedRecord]:
        if isinstance(raws, (str, bytes, dict)) or not isinstance(raws, Iterable):
            raise TypeError(f"Raw readings must be an iterable of rows, got {type(raws).__name__}.")
        records = [self.enrich(raw) for raw in raws]
        log_event(
            logger,
            logging.INFO,
            "enrichment_completed",
            records=len(records),
            historical_rows=len(self._resolver.index),
            with_history=sum(1 for r in records if any(v is not None for v in r.slot_values)),
            with_operator=sum(1 for r in records if r.operator_name),
        )
        return records

    def anchor_month(self, reading: RawReading) -> Tuple[int, int]:
        """(year, month) that `Lectura_1` represents."""
        parsed = parse_dmy_date(reading.reading_date)
        anchor = parsed or self._reference_date
        return anchor.year, anchor.month

    def historical_slots(self, reading: RawReading) -> Tuple[List[ReadingValue], List[Optional[str]]]:
        values: List[ReadingValue] = [None] * SLOT_COUNT
        observations: List[Optional[str]] = [None] * SLOT_COUNT

        history = self._resolver.index.for_client_task(reading.client_id, reading.reading_type)
        if not history:
            return values, observations

        year, month = self.anchor_month(reading)
        for slot in range(SLOT_COUNT):
            target_year, target_month = shift_month(year, month, -slot)
            match = next(
                (h for h in history if h.year == target_year and h.month == target_month),
                None,
            )
            if match is None:
                continue
            values[slot] = match.value
            observations[slot] = match.observation
        return values, observations
