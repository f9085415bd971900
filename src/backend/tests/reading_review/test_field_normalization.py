from decimal import Decimal

from common.reading_review.models import Pending, Rejected, Unset
from common.reading_review.rules.field_normalization import (
    JUSTIFICATION_DEFAULT,
    NUMERIC_FIELDS,
    STATUS_DEFAULT,
    VERIFICATION_FIELDS,
)


def test_status_default_only_fills_unset(make_record, make_ctx):
    ctx = make_ctx()
    assert isinstance(STATUS_DEFAULT().apply(make_record(), ctx).state, Pending)

    rejected = Rejected(reason="fecha fuera de rango")
    out = STATUS_DEFAULT().apply(make_record(state=rejected), ctx)
    assert out.state == rejected


def test_justification_default_keeps_existing_text(make_record, make_ctx):
    ctx = make_ctx()
    assert JUSTIFICATION_DEFAULT().apply(make_record(), ctx).justification == ""

    record = make_record()
    record.justification = "consumo dentro de rango"
    assert JUSTIFICATION_DEFAULT().apply(record, ctx).justification == "consumo dentro de rango"


def test_verification_placeholders_become_empty_objects(make_record, make_ctx):
    record = make_record(
        **{
            "VERIFICACIONC/CONSOLIDADO": "[object Object]",
            "VERIFICACIONC/SEMANAANTERIOR": {"estado": "revisado"},
        }
    )
    out = VERIFICATION_FIELDS().apply(record, make_ctx())
    assert out.verification_consolidated == {}
    assert out.verification_previous_week == {"estado": "revisado"}


def test_verification_free_text_is_kept(make_record, make_ctx):
    record = make_record(**{"VERIFICACIONC/CONSOLIDADO": "revisado", "VERIFICACIONC/SEMANAANTERIOR": "  "})
    out = VERIFICATION_FIELDS().apply(record, make_ctx())
    assert out.verification_consolidated == "revisado"
    assert out.verification_previous_week == {}


def test_numeric_fields_coerce_numeric_text_only(make_record, make_ctx):
    record = make_record(
        LECTURATOMADA="80",
        LECTURAFACTURADA="AB12",
        KWAJUSTADOS=" 15.5 ",
        slots=["100", None, "x", Decimal("70")],
    )
    out = NUMERIC_FIELDS().apply(record, make_ctx())
    assert out.taken_value == Decimal("80")
    assert out.billed_value == "AB12"
    assert out.adjusted_kw == Decimal("15.5")
    assert out.slot_values[:4] == [Decimal("100"), None, "x", Decimal("70")]
    assert isinstance(out.state, Unset)
