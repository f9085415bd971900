from common.reading_review.models import Rejected
from common.reading_review.rules.digit_fault_location import DIGIT_FAULT_LOCATION


def _locate(make_record, make_ctx, *, taken, slots, **raw):
    return DIGIT_FAULT_LOCATION().apply(make_record(LECTURATOMADA=taken, slots=slots, **raw), make_ctx())


def test_taken_in_newest_slot_has_no_later_reading(make_record, make_ctx):
    out = _locate(make_record, make_ctx, taken=80, slots=[80, 70, 60, 50, 40, 30])
    assert out.error_location == "falta lectura posterior"
    assert out.digit_fault is None


def test_neighbours_agree_so_older_slot_is_reference(make_record, make_ctx):
    out = _locate(make_record, make_ctx, taken=1340, slots=[1250, 1340, 1250, 1200, 1150, 1100])
    assert out.error_location == "centena"
    assert out.to_export()["DigitoError"] == {
        "posicion": 2,
        "desdeDerecha": 3,
        "orden": "centena",
        "tomada": "3",
        "referencia": "2",
    }


def test_middle_slot_compares_with_next_older(make_record, make_ctx):
    out = _locate(make_record, make_ctx, taken=1290, slots=[1300, 1250, 1290, 1250, 1200, 1150])
    assert out.error_location == "decena"
    assert out.digit_fault.taken_digit == "9"
    assert out.digit_fault.reference_digit == "5"


def test_repeated_newer_readings_make_newer_slot_the_reference(make_record, make_ctx):
    out = _locate(make_record, make_ctx, taken=1350, slots=[1250, 1250, 1350, 1200, 1100, 1000])
    assert out.error_location == "centena"
    assert out.digit_fault.reference_digit == "2"


def test_oldest_slot_without_repeat_lacks_earlier_reading(make_record, make_ctx):
    out = _locate(make_record, make_ctx, taken=100, slots=[600, 500, 400, 300, 200, 100])
    assert out.error_location == "falta lectura anterior"


def test_oldest_slot_with_repeat_uses_fifth_slot(make_record, make_ctx):
    out = _locate(make_record, make_ctx, taken=310, slots=[600, 500, 400, 300, 300, 310])
    assert out.error_location == "decena"
    assert (out.digit_fault.taken_digit, out.digit_fault.reference_digit) == ("1", "0")


def test_taken_value_missing_from_history(make_record, make_ctx):
    assert _locate(make_record, make_ctx, taken=999, slots=[600, 500]).error_location == "Lectura no encontrada"
    assert _locate(make_record, make_ctx, taken=None, slots=[600, 500]).error_location == "Lectura no encontrada"


def test_no_lattice_match_leaves_location_empty(make_record, make_ctx):
    out = _locate(make_record, make_ctx, taken=80, slots=[100, 90, 80, 70, 60, 50])
    assert out.error_location is None
    assert out.digit_fault is None


def test_runs_on_decided_records(make_record, make_ctx):
    decided = Rejected(reason="consumo dentro de rango")
    record = make_record(LECTURATOMADA=80, slots=[80, 70], state=decided)
    out = DIGIT_FAULT_LOCATION().apply(record, make_ctx())
    assert out.state == decided
    assert out.error_location == "falta lectura posterior"
