from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Protocol

from common.reading_review.models import EnrichedRecord


class RecordStore(Protocol):
    def save_records(self, *, name: str, records: Iterable[EnrichedRecord]) -> Path:
        ...


@dataclass(frozen=True)
class LocalRecordStore:
    root_dir: Path

    def save_records(self, *, name: str, records: Iterable[EnrichedRecord]) -> Path:
        self.root_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.root_dir / f"{name}.json"
        payload = [record.to_export() for record in records]
        out_path.write_text(dump_records(payload), encoding="utf-8")
        return out_path


def dump_records(payload: list[dict[str, Any]]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)
