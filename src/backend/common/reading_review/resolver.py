from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Dict, List, Optional

from .context import parse_dmy_date
from .history import HistoricalIndex
from .models import EmployeeInfo, MeterInfo
from .normalize import normalize_name


def select_preferred_meter(rows: Iterable[MeterInfo]) -> Optional[MeterInfo]:
    """Most recent row by ``created_at``; ties (or missing dates) go to the highest id."""
    best: Optional[MeterInfo] = None
    for row in rows:
        if best is None:
            best = row
            continue
        t_best, t_row = _created_ts(best), _created_ts(row)
        if t_row != t_best:
            if t_row > t_best:
                best = row
            continue
        if (row.id or 0) > (best.id or 0):
            best = row
    return best


def _created_ts(row: MeterInfo) -> float:
    created: Optional[datetime] = row.created_at
    return created.timestamp() if created is not None else 0.0


class EmployeeRoster:
    """Employees indexed by identity card and by normalized name."""

    def __init__(self, employees: Iterable[Any] = ()):
        self._by_identity: Dict[str, EmployeeInfo] = {}
        self._by_name: Dict[str, EmployeeInfo] = {}
        for raw in employees:
            emp = raw if isinstance(raw, EmployeeInfo) else EmployeeInfo.model_validate(raw)
            if emp.identity_card and emp.identity_card not in self._by_identity:
                self._by_identity[emp.identity_card] = emp
            key = normalize_name(emp.name)
            if key:
                # Later rows win, matching how the roster export is indexed.
                self._by_name[key] = emp

    def by_identity(self, identity_card: Optional[str]) -> Optional[EmployeeInfo]:
        if identity_card is None:
            return None
        key = str(identity_card).strip()
        if not key:
            return None
        return self._by_identity.get(key)

    def by_name(self, name: Optional[str]) -> Optional[EmployeeInfo]:
        key = normalize_name(name)
        if not key:
            return None
        return self._by_name.get(key)

    def __len__(self) -> int:
        return len(self._by_identity)


class ReferenceResolver:
    def __init__(
        self,
        *,
        index: HistoricalIndex,
        roster: EmployeeRoster,
        meter_map: Optional[Mapping[str, Any]] = None,
        meter_db_rows: Optional[Mapping[str, List[Any]]] = None,
    ):
        self._index = index
        self._roster = roster
        self._meter_map: Dict[str, Optional[str]] = {
            str(k).strip(): (None if v is None else str(v)) for k, v in (meter_map or {}).items()
        }
        self._preferred_meters: Dict[str, MeterInfo] = {}
        for client, rows in (meter_db_rows or {}).items():
            parsed = [r if isinstance(r, MeterInfo) else MeterInfo.model_validate(r) for r in rows or ()]
            preferred = select_preferred_meter(parsed)
            if preferred is not None:
                self._preferred_meters[str(client).strip()] = preferred

    def resolve_meter(self, client_id: str) -> Optional[MeterInfo]:
        key = str(client_id).strip()
        preferred = self._preferred_meters.get(key)
        if preferred is not None and preferred.meter_number is not None:
            return preferred
        fallback_number = self._meter_map.get(key)
        if preferred is not None:
            # DB row without a number: keep its brand/type, take the number from the map.
            return preferred.model_copy(update={"meter_number": fallback_number})
        if fallback_number is None:
            return None
        return MeterInfo(meter_number=fallback_number)

    def resolve_reader_identity(self, client_id: str, reading_date: Optional[str]) -> Optional[str]:
        if not client_id:
            return None
        parsed = parse_dmy_date(reading_date)
        if parsed is None:
            return None
        row = self._index.at(client_id, parsed.year, parsed.month)
        return row.reader_id if row is not None else None

    def resolve_operator(self, identity_card: Optional[str]) -> Optional[EmployeeInfo]:
        return self._roster.by_identity(identity_card)

    def resolve_operator_by_name(self, name: Optional[str]) -> Optional[EmployeeInfo]:
        return self._roster.by_name(name)

    @property
    def index(self) -> HistoricalIndex:
        return self._index
