import pytest

from app.records.entities import EntityType
from app.workflow.state import (
    IMPUTATION_TRANSITIONS,
    PERIOD_TRANSITIONS,
    TransitionTable,
    ValidationStatus,
)

DRAFT, SUBMITTED, VALIDATED, REJECTED = (
    ValidationStatus.DRAFT,
    ValidationStatus.SUBMITTED,
    ValidationStatus.VALIDATED,
    ValidationStatus.REJECTED,
)


def test_imputation_rules_match_expected_table():
    assert IMPUTATION_TRANSITIONS["validate"].allowed_from == {DRAFT, SUBMITTED, REJECTED}
    assert IMPUTATION_TRANSITIONS["validate"].target is VALIDATED
    assert IMPUTATION_TRANSITIONS["reject"].allowed_from == {DRAFT, SUBMITTED}
    assert IMPUTATION_TRANSITIONS["reject"].target is REJECTED


def test_period_rules_match_expected_table():
    assert PERIOD_TRANSITIONS["submit"].allowed_from == {DRAFT, REJECTED}
    assert PERIOD_TRANSITIONS["submit"].target is SUBMITTED
    assert PERIOD_TRANSITIONS["validate"].allowed_from == {SUBMITTED}
    assert PERIOD_TRANSITIONS["validate"].target is VALIDATED
    assert PERIOD_TRANSITIONS["reject"].allowed_from == {SUBMITTED}
    assert PERIOD_TRANSITIONS["reject"].target is REJECTED


def test_validated_period_is_terminal():
    table = TransitionTable()
    for action in PERIOD_TRANSITIONS:
        assert not table.rule_for(EntityType.IMPUTATION_PERIODS, action).allows("VALIDATED")


@pytest.mark.parametrize(
    ("entity", "action"),
    [
        (EntityType.IMPUTATION_PERIODS, "sendToStraTIME"),
        (EntityType.TIME_LOGS, "sendToStraTIME"),
    ],
)
def test_send_actions_have_no_rule(entity, action):
    table = TransitionTable()
    assert table.rule_for(entity, action) is None


def test_status_fields_per_entity():
    table = TransitionTable()
    assert table.status_field(EntityType.IMPUTATIONS) == "validationStatus"
    assert table.status_field(EntityType.IMPUTATION_PERIODS) == "status"
    assert table.status_field(EntityType.TIME_LOGS) is None


def test_rule_rejects_unknown_status_values():
    rule = IMPUTATION_TRANSITIONS["reject"]
    assert rule.allows("SUBMITTED")
    assert not rule.allows("submitted")
    assert not rule.allows(None)
