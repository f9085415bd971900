from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field

T = TypeVar("T", bound=BaseModel)

DEFAULT_CONFIRMATION_KEYWORDS = [
    "lectura real",
    "lectura confirmada",
    "lectura",
    "real",
    "confirmada",
    "error",
    "correcta",
    "corrige",
    "periodos anteriores",
    "genera",
    "desviacion",
]


class RuleConfigBase(BaseModel):
    enabled: bool = True


class InvoiceDateWindowRuleConfig(RuleConfigBase):
    # Billing dates earlier than the first day of (reference month - 1 - window_months) are out of window.
    window_months: int = 4


class ConsumptionAverageRuleConfig(RuleConfigBase):
    # Inclusive band around the mean of the other consumptions: [mean*(1-tol), mean*(1+tol)].
    tolerance: Decimal = Decimal("0.20")
    # Older revisions only excluded the taken value from the sequence check.
    exclude_billed_value: bool = True


class ObservationKeywordsRuleConfig(RuleConfigBase):
    keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_CONFIRMATION_KEYWORDS))


class ReadingSequenceRuleConfig(RuleConfigBase):
    # Observation code an operator enters when they knowingly record an out-of-sequence reading.
    aware_observation_code: str = "39"
    # Confirm broken sequences without the code as well (inactive in the current product behavior).
    confirm_unaware_operator: bool = False
    # Empty history months count as a zero reading, so a gap breaks the sequence.
    missing_as_zero: bool = True


class ObservationNumbersRuleConfig(RuleConfigBase):
    # Digit-only observations ("12345") are tracked but only confirm when this is on.
    confirm_bare_numbers: bool = False


class KwAdjustedMagnitudeRuleConfig(RuleConfigBase):
    enabled: bool = False
    reading_type: str = "10"


class ReadingOutOfRangeRuleConfig(RuleConfigBase):
    enabled: bool = False


class OperatorUnawareRuleConfig(RuleConfigBase):
    enabled: bool = False


class OperatorUnawareDistinctRuleConfig(OperatorUnawareRuleConfig):
    observation_codes: List[str] = Field(
        default_factory=lambda: ["21", "34", "35", "88", "91", "92", "93", "94", "98"]
    )


class EngineConfig(BaseModel):
    """Per-rule overrides for a validation run.

    Rules pull their typed config via `get_rule_config`; a rule without an
    entry runs with its model defaults.
    """

    rules: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def get_rule_config(
        self,
        rule_id: str,
        model: Type[T],
        default: Optional[T] = None,
    ) -> T:
        if rule_id not in self.rules:
            if default is not None:
                return default
            return model()  # type: ignore[call-arg]
        raw = self.rules.get(rule_id, {})
        return model.model_validate(raw)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "EngineConfig":
        """Load overrides from a JSON or YAML file (``{"rules": {rule_id: {...}}}``)."""
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            import yaml

            payload = yaml.safe_load(text) or {}
        else:
            payload = json.loads(text)
        return cls.model_validate(payload)
