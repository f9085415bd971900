from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .config import EngineConfig


load_dotenv()


@dataclass(frozen=True)
class ReviewSettings:
    data_dir: Path
    rules_config_path: Optional[Path]
    reference_date: Optional[date]
    log_level: str

    def engine_config(self) -> EngineConfig:
        if self.rules_config_path is None:
            return EngineConfig()
        return EngineConfig.from_file(self.rules_config_path)


def get_review_settings() -> ReviewSettings:
    """
    Load batch settings from environment variables (a local `.env` is honoured).

    Reads:
      READING_REVIEW_DATA_DIR, READING_REVIEW_RULES_CONFIG,
      READING_REVIEW_REFERENCE_DATE (YYYY-MM-DD), READING_REVIEW_LOG_LEVEL
    """
    data_dir = os.getenv("READING_REVIEW_DATA_DIR", "").strip()
    rules_config = os.getenv("READING_REVIEW_RULES_CONFIG", "").strip()
    return ReviewSettings(
        data_dir=Path(data_dir) if data_dir else _default_data_dir(),
        rules_config_path=Path(rules_config) if rules_config else None,
        reference_date=_optional_date("READING_REVIEW_REFERENCE_DATE"),
        log_level=os.getenv("READING_REVIEW_LOG_LEVEL", "INFO").strip() or "INFO",
    )


def _optional_date(name: str) -> Optional[date]:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}.") from exc


def _default_data_dir() -> Path:
    return Path(__file__).resolve().parents[4] / "data"
