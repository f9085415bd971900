from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from .context import as_decimal
from .models import SLOT_COUNT, EnrichedRecord

# Consumption_i = Lectura_i - Lectura_{i+1}; slot 6 has no older neighbour.
CONSUMPTION_SLOTS = SLOT_COUNT - 1


@dataclass(frozen=True)
class ConsumptionAssessment:
    taken_slot: int
    consumption: Decimal
    mean: Decimal
    lower: Decimal
    upper: Decimal
    samples: int

    @property
    def within_band(self) -> bool:
        return self.lower <= self.consumption <= self.upper

    def as_values(self) -> dict:
        return {
            "taken_slot": self.taken_slot,
            "consumption": str(self.consumption),
            "mean": str(self.mean.quantize(Decimal("0.01"))),
            "lower": str(self.lower),
            "upper": str(self.upper),
            "samples": self.samples,
        }


def slot_decimals(record: EnrichedRecord) -> List[Optional[Decimal]]:
    return [as_decimal(v) for v in record.slot_values]


def is_strictly_descending(values: List[Decimal]) -> bool:
    return all(values[i] > values[i + 1] for i in range(len(values) - 1))


def consumption_deltas(slots: List[Optional[Decimal]]) -> List[Optional[Decimal]]:
    deltas: List[Optional[Decimal]] = []
    for i in range(CONSUMPTION_SLOTS):
        newer, older = slots[i], slots[i + 1]
        deltas.append(newer - older if newer is not None and older is not None else None)
    return deltas


def assess_consumption(
    record: EnrichedRecord,
    *,
    tolerance: Decimal,
    exclude_billed_value: bool = True,
) -> Optional[ConsumptionAssessment]:
    """Compare the consumption implied by the taken reading with the usual consumption.

    Returns None whenever the history cannot support a verdict: no numeric taken
    value, fewer than two other readings, other readings not strictly
    descending, taken value not among slots 1-5, or no other positive
    consumption to average.
    """
    taken = as_decimal(record.taken_value)
    if taken is None:
        return None
    billed = as_decimal(record.billed_value) if exclude_billed_value else None

    slots = slot_decimals(record)
    others = [
        v for v in slots if v is not None and v != taken and (billed is None or v != billed)
    ]
    if len(others) < 2 or not is_strictly_descending(others):
        return None

    taken_slot = next((i for i, v in enumerate(slots) if v is not None and v == taken), None)
    if taken_slot is None or taken_slot >= CONSUMPTION_SLOTS:
        return None

    deltas = consumption_deltas(slots)
    current = deltas[taken_slot]
    if current is None:
        return None

    usable = [abs(d) for i, d in enumerate(deltas) if i != taken_slot and d is not None and d > 0]
    if not usable:
        return None

    mean = sum(usable, Decimal("0")) / len(usable)
    return ConsumptionAssessment(
        taken_slot=taken_slot + 1,
        consumption=abs(current),
        mean=mean,
        lower=mean * (Decimal("1") - tolerance),
        upper=mean * (Decimal("1") + tolerance),
        samples=len(usable),
    )
