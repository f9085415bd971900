from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from common.reading_review import (
    EmployeeRoster,
    HistoricalIndex,
    RecordEnricher,
    ReferenceResolver,
    ValidationPipeline,
)
from common.reading_review.models import Confirmed, EnrichedRecord, Pending, Rejected
from common.reading_review.rule import Rule
from common.reading_review.rules.field_normalization import JUSTIFICATION_DEFAULT, STATUS_DEFAULT

CANONICAL_ORDER = [
    "INVOICE-DATE-WINDOW",
    "STATUS-DEFAULT",
    "JUSTIFICATION-DEFAULT",
    "VERIFICATION-FIELDS",
    "NUMERIC-FIELDS",
    "CONSUMPTION-AVERAGE",
    "ALPHANUMERIC-CONFIRMATION",
    "OBSERVATION-KEYWORDS",
    "READING-SEQUENCE",
    "OBSERVATION-NUMBERS",
    "DIGIT-FAULT-LOCATION",
]


class _ExplodingRule(Rule):
    rule_id = "TEST-EXPLODING"
    rule_title = "Always raises"
    order = 500

    def apply(self, record, ctx):
        raise RuntimeError("boom")


def test_default_pipeline_runs_rules_in_fixed_order():
    ids = [rule.rule_id for rule in ValidationPipeline().rules]
    assert ids[: len(CANONICAL_ORDER)] == CANONICAL_ORDER
    assert ids[len(CANONICAL_ORDER):] == [
        "KW-ADJUSTED-MAGNITUDE",
        "READING-OUT-OF-RANGE",
        "OPERATOR-UNAWARE-REPEATED",
        "OPERATOR-UNAWARE-DISTINCT",
    ]


def test_end_to_end_scenario(make_history, make_ctx):
    resolver = ReferenceResolver(
        index=HistoricalIndex.build(make_history(values=[100, 90, 80, 70, 60, 50])),
        roster=EmployeeRoster([]),
    )
    enricher = RecordEnricher(resolver, reference_date=date(2025, 2, 10))
    records = enricher.enrich_all(
        [
            {
                "USUARIO": "123",
                "FECHAFACTURA": "15/01/2025",
                "LECTURATOMADA": 80,
                "TIPOLECTURA": "10",
            }
        ]
    )
    assert records[0].slot_values == [Decimal(v) for v in (100, 90, 80, 70, 60, 50)]

    validated, report = ValidationPipeline().run(records, make_ctx())
    out = validated[0].to_export()
    assert out["Validacion"] == "NO"
    assert out["obsValidacion"] == "consumo dentro de rango"
    assert out["UbicacionError"] is None
    assert out["DigitoError"] is None
    assert out["LECTURATOMADA"] == 80
    assert report.totals == {"NO": 1}
    assert report.decided_by == {"CONSUMPTION-AVERAGE": 1}
    assert report.rule_errors == 0


def test_invoice_rejection_takes_precedence(make_record, make_ctx):
    record = make_record(
        FECHAFACTURA="01/01/2024",
        LECTURATOMADA=180,
        slots=[200, 190, 180, 130, 120, 110],
        observations=["lectura real"],
    )
    validated, _ = ValidationPipeline().run([record], make_ctx())
    out = validated[0]
    assert isinstance(out.state, Rejected)
    assert out.justification == "fecha fuera de rango"
    assert out.to_export()["Validacion"] == "No"


def test_undecided_record_ends_pending_with_empty_justification(make_record, make_ctx):
    record = make_record(FECHAFACTURA="15/01/2025", LECTURATOMADA=75, slots=[100, 90, 80, 70, 60, 50])
    validated, report = ValidationPipeline().run([record], make_ctx())
    out = validated[0].to_export()
    assert out["Validacion"] == "PENDIENTE"
    assert out["obsValidacion"] == ""
    assert out["UbicacionError"] == "Lectura no encontrada"
    assert report.totals == {"PENDIENTE": 1}


def test_text_fields_are_coerced_before_verdict_rules(make_record, make_ctx):
    record = make_record(
        FECHAFACTURA="15/01/2025",
        LECTURATOMADA="180",
        slots=["200", "190", "180", "130", "120", "110"],
    )
    validated, _ = ValidationPipeline().run([record], make_ctx())
    assert isinstance(validated[0].state, Confirmed)
    assert validated[0].taken_value == Decimal("180")


def test_running_twice_changes_nothing(make_record, make_ctx):
    records = [
        make_record(FECHAFACTURA="01/01/2024", LECTURATOMADA=80, slots=[100, 90, 80]),
        make_record(FECHAFACTURA="15/01/2025", LECTURATOMADA=80, slots=[100, 90, 80, 70, 60, 50]),
        make_record(FECHAFACTURA="15/01/2025", LECTURATOMADA=1290, slots=[1300, 1250, 1290, 1250, 1200, 1150]),
        make_record(FECHAFACTURA="15/01/2025", observations=["medidor 77 oculto"], TEXTO="sin acceso"),
        make_record(FECHAFACTURA="sin fecha", **{"VERIFICACIONC/CONSOLIDADO": "[object Object]"}),
    ]
    ctx = make_ctx()
    pipeline = ValidationPipeline()
    first, _ = pipeline.run(records, ctx)
    snapshot = [r.model_dump() for r in first]
    second, _ = pipeline.run(first, ctx)
    assert [r.model_dump() for r in second] == snapshot


def test_rule_ids_subset_runs_only_selected_rules(make_record, make_ctx):
    record = make_record(FECHAFACTURA="15/01/2025", LECTURATOMADA=80, slots=[100, 90, 80, 70, 60, 50])
    validated, _ = ValidationPipeline().run([record], make_ctx(), rule_ids={"INVOICE-DATE-WINDOW"})
    assert isinstance(validated[0].state, Pending)
    assert validated[0].justification is None


def test_supplemental_rule_runs_once_enabled(make_record, make_ctx):
    raw = dict(FECHAFACTURA="15/01/2025", LECTURATOMADA=120, slots=[None, 120, 90, 80, 70, 60])
    validated, _ = ValidationPipeline().run([make_record(**raw)], make_ctx())
    assert validated[0].error_location is None

    ctx = make_ctx(client_rules={"READING-OUT-OF-RANGE": {"enabled": True}})
    validated, _ = ValidationPipeline().run([make_record(**raw)], ctx)
    assert validated[0].error_location == "Lectura Diferente"

    # A location found by DIGIT-FAULT-LOCATION is kept.
    record = make_record(FECHAFACTURA="15/01/2025", LECTURATOMADA=120, slots=[120, 90, 80, 70, 60, 50])
    validated, _ = ValidationPipeline().run([record], ctx)
    assert validated[0].error_location == "falta lectura posterior"


def test_failing_rule_is_isolated(make_record, make_ctx, caplog):
    pipeline = ValidationPipeline([STATUS_DEFAULT(), _ExplodingRule(), JUSTIFICATION_DEFAULT()])
    validated, report = pipeline.run([make_record()], make_ctx())
    assert isinstance(validated[0].state, Pending)
    assert validated[0].justification == ""
    assert report.rule_errors == 1
    assert "TEST-EXPLODING" in caplog.text


def test_unknown_rule_id_in_config_is_rejected(make_record, make_ctx):
    ctx = make_ctx(client_rules={"NOT-A-RULE": {}})
    with pytest.raises(ValueError):
        ValidationPipeline().run([make_record()], ctx)


def test_invalid_rule_config_is_rejected(make_record, make_ctx):
    ctx = make_ctx(client_rules={"CONSUMPTION-AVERAGE": {"tolerance": "mucho"}})
    with pytest.raises(ValidationError):
        ValidationPipeline().run([make_record()], ctx)


def test_structural_input_errors(make_ctx):
    pipeline = ValidationPipeline()
    with pytest.raises(TypeError):
        pipeline.run(42, make_ctx())
    with pytest.raises(TypeError):
        pipeline.run([{"USUARIO": "123"}], make_ctx())
    with pytest.raises(TypeError):
        pipeline.validate({"USUARIO": "123"}, make_ctx())


def test_validate_single_record(make_record, make_ctx):
    record = make_record(FECHAFACTURA="15/01/2025", LECTURATOMADA=80, slots=[100, 90, 80, 70, 60, 50])
    out = ValidationPipeline().validate(record, make_ctx())
    assert isinstance(out, EnrichedRecord)
    assert out.justification == "consumo dentro de rango"
