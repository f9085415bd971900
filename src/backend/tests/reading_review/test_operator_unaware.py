from common.reading_review.models import Confirmed, Pending
from common.reading_review.rules.operator_unaware import OPERATOR_UNAWARE_DISTINCT, OPERATOR_UNAWARE_REPEATED


def test_repeated_reading_without_code_confirms(make_record, make_ctx):
    record = make_record(LECTURATOMADA=90, slots=[100, 90, 90, 80, 70, 60], state=Pending())
    out = OPERATOR_UNAWARE_REPEATED().apply(record, make_ctx())
    assert isinstance(out.state, Confirmed)
    assert out.justification == "operario no consciente del error"
    assert out.state.values == {"taken_slot": 2, "older": "90", "newer": "100"}


def test_newest_reading_differing_from_older_is_not_suspicious(make_record, make_ctx):
    record = make_record(LECTURATOMADA=100, slots=[100, 90, 80], state=Pending())
    out = OPERATOR_UNAWARE_REPEATED().apply(record, make_ctx())
    assert isinstance(out.state, Pending)


def test_any_observation_text_blocks_the_rule(make_record, make_ctx):
    record = make_record(
        LECTURATOMADA=90,
        slots=[100, 90, 90],
        observations=[None, None, "perro bravo"],
        state=Pending(),
    )
    assert isinstance(OPERATOR_UNAWARE_REPEATED().apply(record, make_ctx()).state, Pending)


def test_repeated_rule_skips_records_with_a_code(make_record, make_ctx):
    record = make_record(LECTURATOMADA=90, slots=[100, 90, 90], OBSERVACIONDELECTURA="88", state=Pending())
    assert isinstance(OPERATOR_UNAWARE_REPEATED().apply(record, make_ctx()).state, Pending)


def test_distinct_rule_requires_listed_code(make_record, make_ctx):
    ctx = make_ctx()
    listed = make_record(LECTURATOMADA=90, slots=[100, 90, 90], OBSERVACIONDELECTURA="88", state=Pending())
    out = OPERATOR_UNAWARE_DISTINCT().apply(listed, ctx)
    assert isinstance(out.state, Confirmed)
    assert out.state.values["observation_code"] == "88"

    unlisted = make_record(LECTURATOMADA=90, slots=[100, 90, 90], OBSERVACIONDELECTURA="39", state=Pending())
    assert isinstance(OPERATOR_UNAWARE_DISTINCT().apply(unlisted, ctx).state, Pending)


def test_operator_unaware_rules_are_opt_in(make_ctx):
    ctx = make_ctx()
    assert OPERATOR_UNAWARE_REPEATED().config(ctx).enabled is False
    assert OPERATOR_UNAWARE_DISTINCT().config(ctx).enabled is False
