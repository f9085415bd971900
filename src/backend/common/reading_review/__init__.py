"""Enrichment and validation engine for flagged meter readings.

This package intentionally contains only domain logic:
- Inputs are in-memory raw readings, historical readings, meter and employee data.
- No spreadsheet, database, or HTTP access lives here.
"""

from .config import EngineConfig
from .context import ValidationContext
from .enricher import RecordEnricher
from .history import HistoricalIndex
from .models import (
    Confirmed,
    DigitFault,
    EmployeeInfo,
    EnrichedRecord,
    HistoricalReading,
    MeterInfo,
    Pending,
    RawReading,
    Rejected,
    Unset,
    ValidationRunReport,
)
from .resolver import EmployeeRoster, ReferenceResolver
from .runner import ValidationPipeline

# Import built-in rules so they self-register with the global registry.
from . import rules as _builtin_rules  # noqa: F401
