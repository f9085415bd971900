from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Dict, List, Optional, Tuple

from .models import HistoricalReading


class HistoricalIndex:
    """Read-only lookups over the historical readings of a batch.

    Built once per run and shared by every record. Duplicate (client, year,
    month) rows are kept; `at` returns the first one in input order.
    """

    def __init__(
        self,
        by_client_task: Dict[Tuple[str, str], List[HistoricalReading]],
        by_client_date: Dict[Tuple[str, int, int], HistoricalReading],
    ):
        self._by_client_task = by_client_task
        self._by_client_date = by_client_date

    @classmethod
    def build(cls, readings: Iterable[Any]) -> "HistoricalIndex":
        if isinstance(readings, (str, bytes, dict)) or not isinstance(readings, Iterable):
            raise TypeError(
                f"Historical readings must be an iterable of rows, got {type(readings).__name__}."
            )

        by_client_task: Dict[Tuple[str, str], List[HistoricalReading]] = {}
        by_client_date: Dict[Tuple[str, int, int], HistoricalReading] = {}
        for row in readings:
            reading = row if isinstance(row, HistoricalReading) else HistoricalReading.model_validate(row)
            by_client_task.setdefault((reading.client_id, reading.task_code), []).append(reading)
            by_client_date.setdefault((reading.client_id, reading.year, reading.month), reading)

        for rows in by_client_task.values():
            rows.sort(key=lambda r: (r.year, r.month), reverse=True)
        return cls(by_client_task, by_client_date)

    def for_client_task(self, client_id: str, task_code: Optional[str]) -> List[HistoricalReading]:
        """Readings for the client and task code, most recent first."""
        key = (str(client_id).strip(), str(task_code or "").strip())
        return list(self._by_client_task.get(key, ()))

    def at(self, client_id: str, year: int, month: int) -> Optional[HistoricalReading]:
        return self._by_client_date.get((str(client_id).strip(), year, month))

    def __len__(self) -> int:
        return sum(len(rows) for rows in self._by_client_task.values())
