"""Tests for alert rule evaluation."""

from dataclasses import replace
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from marketfeed.constants import AlertCondition
from marketfeed.data.seed import seed_stocks
from marketfeed.scheduler.alert_engine import AlertEngine, condition_met
from marketfeed.watchlist.store import AlertRule


@pytest.fixture
def stocks():
    return {s.symbol: s for s in seed_stocks()}


def make_rule(symbol, condition, value, rule_id="r1"):
    return AlertRule(
        id=rule_id,
        watchlist_id="1",
        symbol=symbol,
        condition=condition,
        value=Decimal(str(value)),
    )


def test_price_above_triggers_on_first_call(stocks):
    engine = AlertEngine()
    rule = make_rule("RELIANCE", AlertCondition.ABOVE, 2650)

    hits = engine.evaluate(stocks.values(), [rule])

    assert [h.rule for h in hits] == [rule]
    assert hits[0].stock.symbol == "RELIANCE"
    assert rule.triggered is True


def test_triggered_rule_never_fires_again(stocks):
    engine = AlertEngine()
    rule = make_rule("RELIANCE", AlertCondition.ABOVE, 2650)

    first = engine.evaluate(stocks.values(), [rule])
    second = engine.evaluate(stocks.values(), [rule])

    assert len(first) == 1
    assert second == []
    assert rule.triggered is True


def test_rule_stays_armed_until_condition_met(stocks):
    engine = AlertEngine()
    rule = make_rule("RELIANCE", AlertCondition.BELOW, 2800)

    assert engine.evaluate(stocks.values(), [rule]) == []
    assert rule.triggered is False

    dipped = replace(stocks["RELIANCE"], price=Decimal("2799.95"))
    hits = engine.evaluate([dipped], [rule])
    assert len(hits) == 1


@pytest.mark.parametrize(
    "condition,value,expected",
    [
        (AlertCondition.ABOVE, "2856.75", False),  # strict inequality
        (AlertCondition.ABOVE, "2856.74", True),
        (AlertCondition.BELOW, "2856.75", False),
        (AlertCondition.BELOW, "2856.76", True),
        (AlertCondition.PERCENT_CHANGE, "0.86", False),
        (AlertCondition.PERCENT_CHANGE, "0.5", True),
        (AlertCondition.VOLUME, "3789542", False),
        (AlertCondition.VOLUME, "3000000", True),
    ],
)
def test_condition_boundaries(stocks, condition, value, expected):
    rule = make_rule("RELIANCE", condition, value)
    assert condition_met(rule, stocks["RELIANCE"]) is expected


def test_percent_change_uses_absolute_value(stocks):
    # TCS is down 0.44%
    rule = make_rule("TCS", AlertCondition.PERCENT_CHANGE, "0.4")
    assert condition_met(rule, stocks["TCS"]) is True


def test_rules_for_missing_symbols_are_skipped(stocks):
    engine = AlertEngine()
    orphan = make_rule("WIPRO", AlertCondition.ABOVE, 1, "orphan")
    live = make_rule("INFY", AlertCondition.ABOVE, 1, "live")

    hits = engine.evaluate(stocks.values(), [orphan, live])

    assert [h.rule.id for h in hits] == ["live"]
    assert orphan.triggered is False


def test_every_eligible_rule_checked(stocks):
    engine = AlertEngine()
    rules = [
        make_rule("RELIANCE", AlertCondition.ABOVE, 1, "a"),
        make_rule("TCS", AlertCondition.VOLUME, 1, "b"),
        make_rule("SBIN", AlertCondition.BELOW, 1, "c"),
        make_rule("HDFCBANK", AlertCondition.PERCENT_CHANGE, "0.1", "d"),
    ]

    hits = engine.evaluate(stocks.values(), rules)

    assert sorted(h.rule.id for h in hits) == ["a", "b", "d"]


def test_on_alert_callback_failure_does_not_block(stocks):
    callback = MagicMock(side_effect=RuntimeError("sink down"))
    engine = AlertEngine(on_alert=callback)
    rules = [
        make_rule("RELIANCE", AlertCondition.ABOVE, 1, "a"),
        make_rule("TCS", AlertCondition.ABOVE, 1, "b"),
    ]

    hits = engine.evaluate(stocks.values(), rules)

    assert len(hits) == 2
    assert callback.call_count == 2
    assert all(r.triggered for r in rules)
