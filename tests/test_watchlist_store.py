"""Tests for watchlists and alert rule validation."""

from decimal import Decimal

import pytest

from marketfeed.constants import AlertCondition, AlertKind
from marketfeed.watchlist.store import AlertRuleRequest, WatchlistStore


@pytest.fixture
def store():
    return WatchlistStore(seed_defaults=True)


def test_seeded_watchlists(store):
    lists = {w.id: w for w in store.list_watchlists()}

    assert lists["1"].name == "Default Watchlist"
    assert lists["1"].symbols == ["RELIANCE", "INFY", "HDFCBANK"]
    assert lists["2"].symbols == ["INFY", "TCS", "WIPRO"]

    rules = store.rules()
    assert len(rules) == 1
    assert rules[0].symbol == "RELIANCE"
    assert rules[0].condition == AlertCondition.ABOVE
    assert rules[0].value == Decimal("2650")
    assert rules[0].triggered is False


def test_empty_store():
    assert WatchlistStore().list_watchlists() == []


def test_create_rename_delete(store):
    created = store.create("  Banks ")
    assert created.name == "Banks"
    assert store.get(created.id) is created

    assert store.rename(created.id, "PSU Banks").name == "PSU Banks"
    assert store.rename("missing", "x") is None

    assert store.delete(created.id) is True
    assert store.delete(created.id) is False


def test_blank_names_rejected(store):
    with pytest.raises(ValueError):
        store.create("   ")
    with pytest.raises(ValueError):
        store.rename("1", "")


def test_add_and_remove_stock(store):
    store.add_stock("2", "SBIN", "State Bank of India")
    store.add_stock("2", "SBIN", "State Bank of India")

    assert store.get("2").symbols.count("SBIN") == 1

    store.remove_stock("2", "SBIN")
    assert "SBIN" not in store.get("2").symbols
    assert store.add_stock("missing", "SBIN", "x") is None
    assert store.remove_stock("missing", "SBIN") is None


def test_symbols_are_case_insensitive(store):
    store.add_stock("2", "sbin", "State Bank of India")
    store.add_stock("2", "SBIN", "State Bank of India")

    assert store.get("2").symbols.count("SBIN") == 1
    assert store.get("2").get_item("Sbin").symbol == "SBIN"

    store.remove_stock("2", "sBiN")
    assert "SBIN" not in store.get("2").symbols


def test_add_alert(store):
    rule = store.add_alert("1", "INFY", {"condition": "below", "value": "1400.50"})

    assert rule.condition == AlertCondition.BELOW
    assert rule.value == Decimal("1400.50")
    assert rule.kind == AlertKind.PRICE
    assert rule in store.get("1").get_item("INFY").alerts


def test_add_alert_accepts_request_model(store):
    request = AlertRuleRequest(condition=AlertCondition.VOLUME, value=5_000_000)
    rule = store.add_alert("1", "HDFCBANK", request)

    assert rule.kind == AlertKind.VOLUME
    assert rule.value == Decimal("5000000")


@pytest.mark.parametrize("bad", ["abc", "", "NaN", float("nan"), float("inf"), "Infinity", True, None])
def test_invalid_threshold_rejected_and_not_stored(store, bad):
    before = len(store.rules())

    with pytest.raises(ValueError):
        store.add_alert("1", "INFY", {"condition": "above", "value": bad})

    assert len(store.rules()) == before


def test_unknown_condition_rejected(store):
    with pytest.raises(ValueError):
        store.add_alert("1", "INFY", {"condition": "sideways", "value": 1})


def test_unknown_watchlist_or_symbol(store):
    request = {"condition": "above", "value": 1}

    assert store.add_alert("missing", "INFY", request) is None
    assert store.add_alert("1", "TCS", request) is None


def test_remove_alert(store):
    rule = store.add_alert("2", "TCS", {"condition": "percent_change", "value": 2})

    assert store.remove_alert("2", "TCS", rule.id) is True
    assert store.remove_alert("2", "TCS", rule.id) is False
    assert store.remove_alert("missing", "TCS", rule.id) is False
