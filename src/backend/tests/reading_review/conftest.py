import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from datetime import date

import pytest

from common.reading_review.config import EngineConfig
from common.reading_review.context import ValidationContext, shift_month
from common.reading_review.models import EnrichedRecord, RawReading


@pytest.fixture
def reference_date() -> date:
    return date(2025, 2, 10)


@pytest.fixture
def make_record():
    def _make(*, slots=(), observations=(), state=None, **raw) -> EnrichedRecord:
        reading = RawReading.model_validate({"USUARIO": "123", **raw})
        slot_values = list(slots) + [None] * (6 - len(slots))
        slot_observations = list(observations) + [None] * (6 - len(observations))
        record = EnrichedRecord.from_reading(
            reading,
            slot_values=slot_values,
            slot_observations=slot_observations,
        )
        if state is not None:
            record.state = state
        return record

    return _make


@pytest.fixture
def make_ctx(reference_date):
    def _make(*, client_rules=None, as_of=None) -> ValidationContext:
        return ValidationContext(
            reference_date=as_of or reference_date,
            config=EngineConfig(rules=client_rules or {}),
        )

    return _make


@pytest.fixture
def make_history():
    def _make(*, values, start=(2025, 2), client="123", task="10", reader=None, observations=()):
        rows = []
        for i, value in enumerate(values):
            year, month = shift_month(start[0], start[1], -i)
            rows.append(
                {
                    "cliente": client,
                    "codtarea": task,
                    "ano": year,
                    "mes": month,
                    "lectura_actual": value,
                    "obs_texto": observations[i] if i < len(observations) else None,
                    "lector": reader,
                }
            )
        return rows

    return _make
