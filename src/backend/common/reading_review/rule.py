from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Type

from pydantic import BaseModel

from .config import RuleConfigBase
from .context import ValidationContext
from .models import EnrichedRecord


class Rule(ABC):
    rule_id: str
    rule_title: str
    # Position in the pipeline; lower runs first.
    order: int
    config_model: Type[BaseModel] = RuleConfigBase

    def __init__(self):
        if not getattr(self, "rule_id", None):
            raise ValueError("Rule must define rule_id")
        if getattr(self, "order", None) is None:
            raise ValueError(f"Rule {self.rule_id} must define order")

    def config(self, ctx: ValidationContext):
        return ctx.config.get_rule_config(self.rule_id, self.config_model)

    @abstractmethod
    def apply(self, record: EnrichedRecord, ctx: ValidationContext) -> EnrichedRecord:  # pragma: no cover
        raise NotImplementedError
