from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

# Numeric inputs stay as text until the numeric-fields rule coerces them.
ReadingValue = Optional[Union[Decimal, str]]
VerificationValue = Optional[Union[Dict[str, Any], str]]

SLOT_COUNT = 6


class ValidationStatus(str, Enum):
    UNSET = "UNSET"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"


class ValidationLabel(str, Enum):
    PENDING = "PENDIENTE"
    CONFIRMED = "SI"
    REJECTED = "NO"
    # The invoice window rule historically writes this casing.
    OUT_OF_WINDOW = "No"


class Unset(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal[ValidationStatus.UNSET] = ValidationStatus.UNSET


class Pending(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal[ValidationStatus.PENDING] = ValidationStatus.PENDING


class Confirmed(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal[ValidationStatus.CONFIRMED] = ValidationStatus.CONFIRMED
    reason: str
    rule_id: str = ""
    values: Dict[str, Any] = Field(default_factory=dict)


class Rejected(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal[ValidationStatus.REJECTED] = ValidationStatus.REJECTED
    reason: str
    rule_id: str = ""
    label: ValidationLabel = ValidationLabel.REJECTED
    values: Dict[str, Any] = Field(default_factory=dict)


ValidationState = Annotated[
    Union[Unset, Pending, Confirmed, Rejected],
    Field(discriminator="status"),
]


def is_open(state: ValidationState) -> bool:
    """True while a rule may still decide the record."""
    return isinstance(state, (Unset, Pending))


def label_for_state(state: ValidationState) -> Optional[str]:
    if isinstance(state, Pending):
        return ValidationLabel.PENDING.value
    if isinstance(state, Confirmed):
        return ValidationLabel.CONFIRMED.value
    if isinstance(state, Rejected):
        return state.label.value
    return None


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


def _scalar_text(value: Any) -> Optional[str]:
    """Text form of a spreadsheet cell; numeric cells become their digits, containers become None."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal, date)):
        return str(value)
    return None


def _reading_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, Decimal)):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    return None


def _verification_value(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, dict):
        return {str(k): v for k, v in value.items()}
    return str(value)


class RawReading(BaseModel):
    """One reading as captured in the field, keyed the way the query export names it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    client_id: str = Field(default="", validation_alias=_aliases("USUARIO", "client_id"))
    zone: Optional[str] = Field(default=None, validation_alias=_aliases("ZONA", "zone"))
    cycle: Optional[Union[int, str]] = Field(default=None, validation_alias=_aliases("CICLO", "cycle"))
    consumption_solution: Optional[str] = Field(
        default=None, validation_alias=_aliases("SOLUCION_CONSUMO", "consumption_solution")
    )
    reading_date: Optional[str] = Field(default=None, validation_alias=_aliases("FECHALECTURA", "reading_date"))
    billing_date: Optional[str] = Field(default=None, validation_alias=_aliases("FECHAFACTURA", "billing_date"))
    taken_value: ReadingValue = Field(default=None, validation_alias=_aliases("LECTURATOMADA", "taken_value"))
    observation_code: Optional[str] = Field(
        default=None, validation_alias=_aliases("OBSERVACIONDELECTURA", "observation_code")
    )
    text: Optional[str] = Field(default=None, validation_alias=_aliases("TEXTO", "text"))
    billed_value: ReadingValue = Field(default=None, validation_alias=_aliases("LECTURAFACTURADA", "billed_value"))
    clarifications: Optional[str] = Field(default=None, validation_alias=_aliases("ACLARACIONES", "clarifications"))
    reading_type: Optional[str] = Field(default=None, validation_alias=_aliases("TIPOLECTURA", "reading_type"))
    error_type: Optional[str] = Field(default=None, validation_alias=_aliases("TIPODEERROR", "error_type"))
    adjusted_kw: ReadingValue = Field(default=None, validation_alias=_aliases("KWAJUSTADOS", "adjusted_kw"))
    nue: Optional[str] = Field(default=None, validation_alias=_aliases("NUE", "nue"))
    verification_consolidated: VerificationValue = Field(
        default=None,
        validation_alias=_aliases("VERIFICACIONC/CONSOLIDADO", "verification_consolidated"),
    )
    verification_previous_week: VerificationValue = Field(
        default=None,
        validation_alias=_aliases("VERIFICACIONC/SEMANAANTERIOR", "verification_previous_week"),
    )

    @field_validator("client_id", mode="before")
    @classmethod
    def _strip_client(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator(
        "zone",
        "consumption_solution",
        "reading_date",
        "billing_date",
        "observation_code",
        "text",
        "clarifications",
        "reading_type",
        "error_type",
        "nue",
        mode="before",
    )
    @classmethod
    def _cells_as_text(cls, value: Any) -> Optional[str]:
        return _scalar_text(value)

    @field_validator("cycle", mode="before")
    @classmethod
    def _cycle_as_code(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return _scalar_text(value)

    @field_validator("taken_value", "billed_value", "adjusted_kw", mode="before")
    @classmethod
    def _readings(cls, value: Any) -> Any:
        return _reading_value(value)

    @field_validator("verification_consolidated", "verification_previous_week", mode="before")
    @classmethod
    def _verifications(cls, value: Any) -> Any:
        return _verification_value(value)


class HistoricalReading(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    client_id: str = Field(default="", validation_alias=_aliases("cliente", "CLIENTE", "client_id"))
    reader_id: Optional[str] = Field(default=None, validation_alias=_aliases("lector", "LECTOR", "reader_id"))
    year: int = Field(default=0, validation_alias=_aliases("ano", "ANO", "year"))
    month: int = Field(default=0, validation_alias=_aliases("mes", "MES", "month"))
    task_code: str = Field(default="", validation_alias=_aliases("codtarea", "CODTAREA", "task_code"))
    value: ReadingValue = Field(
        default=None,
        validation_alias=_aliases("lectura_actual", "LECTURA_ACTUAL", "lectura_act", "LECTURA_ACT", "value"),
    )
    observation: Optional[str] = Field(
        default=None, validation_alias=_aliases("obs_texto", "OBS_TEXTO", "observation")
    )

    @field_validator("client_id", "task_code", mode="before")
    @classmethod
    def _stripped_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("reader_id", mode="before")
    @classmethod
    def _reader_as_text(cls, value: Any) -> Optional[str]:
        if value is None or str(value).strip() == "":
            return None
        return str(value).strip()

    @field_validator("observation", mode="before")
    @classmethod
    def _observation_as_text(cls, value: Any) -> Optional[str]:
        return _scalar_text(value)

    @field_validator("value", mode="before")
    @classmethod
    def _reading(cls, value: Any) -> Any:
        return _reading_value(value)

    @field_validator("year", "month", mode="before")
    @classmethod
    def _int_or_zero(cls, value: Any) -> int:
        try:
            return int(str(value).strip())
        except (TypeError, ValueError):
            return 0


class MeterInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    meter_number: Optional[str] = Field(default=None, validation_alias=_aliases("num_medidor", "meter_number"))
    brand: Optional[str] = Field(default=None, validation_alias=_aliases("marca_medidor", "brand"))
    technology: Optional[str] = Field(
        default=None, validation_alias=_aliases("tecnologia_medidor", "tecnologia", "technology")
    )
    meter_type: Optional[str] = Field(default=None, validation_alias=_aliases("tipo_medidor", "meter_type"))
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @field_validator("meter_number", mode="before")
    @classmethod
    def _number_as_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("id", mode="before")
    @classmethod
    def _id_or_none(cls, value: Any) -> Optional[int]:
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    @field_validator("brand", "technology", "meter_type", mode="before")
    @classmethod
    def _details_as_text(cls, value: Any) -> Optional[str]:
        return _scalar_text(value)

    @field_validator("created_at", mode="wrap")
    @classmethod
    def _created_or_none(cls, value: Any, handler) -> Optional[datetime]:
        if value in (None, ""):
            return None
        try:
            return handler(value)
        except ValidationError:
            return None


class EmployeeInfo(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    identity_card: Optional[str] = Field(default=None, validation_alias=_aliases("cedula", "identity_card"))
    name: Optional[str] = Field(default=None, validation_alias=_aliases("nombre", "name"))
    job_title: Optional[str] = Field(default=None, validation_alias=_aliases("cargo", "job_title"))
    site: Optional[str] = Field(default=None, validation_alias=_aliases("sede", "site"))

    @field_validator("identity_card", mode="before")
    @classmethod
    def _card_as_text(cls, value: Any) -> Optional[str]:
        if value is None or str(value).strip() == "":
            return None
        return str(value).strip()

    @field_validator("name", "job_title", "site", mode="before")
    @classmethod
    def _details_as_text(cls, value: Any) -> Optional[str]:
        return _scalar_text(value)


class DigitFault(BaseModel):
    position: int = Field(serialization_alias="posicion")
    from_right: int = Field(serialization_alias="desdeDerecha")
    label: str = Field(serialization_alias="orden")
    taken_digit: str = Field(serialization_alias="tomada")
    reference_digit: str = Field(serialization_alias="referencia")


class EnrichedRecord(BaseModel):
    """The unit the pipeline works on: a raw reading plus its resolved context."""

    model_config = ConfigDict(populate_by_name=True)

    reading: RawReading
    # Index 0 is the anchor month (Lectura_1), index 5 five months earlier.
    slot_values: List[ReadingValue] = Field(default_factory=lambda: [None] * SLOT_COUNT)
    slot_observations: List[Optional[str]] = Field(default_factory=lambda: [None] * SLOT_COUNT)

    operator_name: Optional[str] = None
    operator_identity: Optional[str] = None
    operator_title: Optional[str] = None
    operator_site: Optional[str] = None

    meter_number: Optional[str] = None
    meter_brand: Optional[str] = None
    meter_type: Optional[str] = None

    # Working copies of raw fields that normalization rules may coerce.
    taken_value: ReadingValue = None
    billed_value: ReadingValue = None
    adjusted_kw: ReadingValue = None
    verification_consolidated: VerificationValue = None
    verification_previous_week: VerificationValue = None

    state: ValidationState = Field(default_factory=Unset)
    justification: Optional[str] = None
    error_location: Optional[str] = None
    digit_fault: Optional[DigitFault] = None

    @classmethod
    def from_reading(cls, reading: RawReading, **fields: Any) -> "EnrichedRecord":
        return cls(
            reading=reading,
            taken_value=reading.taken_value,
            billed_value=reading.billed_value,
            adjusted_kw=reading.adjusted_kw,
            verification_consolidated=reading.verification_consolidated,
            verification_previous_week=reading.verification_previous_week,
            **fields,
        )

    @property
    def client_id(self) -> str:
        return self.reading.client_id

    def slot(self, number: int) -> ReadingValue:
        """1-based slot accessor (``slot(1)`` is ``Lectura_1``)."""
        return self.slot_values[number - 1]

    def observation(self, number: int) -> Optional[str]:
        return self.slot_observations[number - 1]

    def decide(self, state: Union[Confirmed, Rejected]) -> None:
        self.state = state
        self.justification = state.reason

    def set_digit_fault(self, fault: DigitFault) -> None:
        self.digit_fault = fault
        self.error_location = fault.label

    def to_export(self) -> Dict[str, Any]:
        r = self.reading
        out: Dict[str, Any] = {
            "USUARIO": r.client_id,
            "ZONA": r.zone,
            "CICLO": r.cycle,
            "SOLUCION_CONSUMO": r.consumption_solution,
            "FECHALECTURA": r.reading_date,
            "FECHAFACTURA": r.billing_date,
            "LECTURATOMADA": _export_value(self.taken_value),
            "OBSERVACIONDELECTURA": r.observation_code,
            "TEXTO": r.text,
            "LECTURAFACTURADA": _export_value(self.billed_value),
            "ACLARACIONES": r.clarifications,
            "TIPOLECTURA": r.reading_type,
            "TIPODEERROR": r.error_type,
            "KWAJUSTADOS": _export_value(self.adjusted_kw),
            "NUE": r.nue,
            "VERIFICACIONC/CONSOLIDADO": self.verification_consolidated,
            "VERIFICACIONC/SEMANAANTERIOR": self.verification_previous_week,
        }
        for i in range(SLOT_COUNT):
            out[f"Lectura_{i + 1}"] = _export_value(self.slot_values[i])
        for i in range(SLOT_COUNT):
            out[f"Obs_Lectura_{i + 1}"] = self.slot_observations[i]
        out.update(
            {
                "Operario": self.operator_name,
                "medidor": self.meter_number,
                "marcamedidor": self.meter_brand,
                "tipomedidor": self.meter_type,
                "cedula": self.operator_identity,
                "tipo": self.operator_title,
                "sede": self.operator_site,
                "Validacion": label_for_state(self.state),
                "obsValidacion": self.justification,
                "UbicacionError": self.error_location,
                "DigitoError": self.digit_fault.model_dump(by_alias=True) if self.digit_fault else None,
            }
        )
        return out


def _export_value(value: ReadingValue) -> Any:
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    return value


class ValidationRunReport(BaseModel):
    run_id: str
    generated_at: datetime
    reference_date: date
    record_count: int = 0
    totals: Dict[str, int] = Field(default_factory=dict)
    decided_by: Dict[str, int] = Field(default_factory=dict)
    rule_errors: int = 0
