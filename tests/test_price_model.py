"""Tests for the bounded random-walk price model."""

import random
from dataclasses import replace
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

import pytest

from marketfeed.config_loader import PerturbationConfig
from marketfeed.constants import Category
from marketfeed.data.market_data import change_from_close
from marketfeed.data.price_model import PriceModel
from marketfeed.data.seed import (
    CHART_SESSION_START,
    generate_chart,
    seed_indices,
    seed_option_chains,
    seed_stocks,
)

TOLERANCE = Decimal("0.01")


@pytest.fixture
def model():
    return PriceModel(rng=random.Random(1234))


@pytest.fixture
def reliance():
    return next(s for s in seed_stocks() if s.symbol == "RELIANCE")


def _bracketed(snapshot):
    return (
        snapshot.high >= max(snapshot.open, snapshot.close, snapshot.last)
        and snapshot.low <= min(snapshot.open, snapshot.close, snapshot.last)
    )


def test_reliance_single_tick_within_half_percent(model, reliance):
    stock = model.perturb_stock(reliance)

    lower = Decimal("2856.75") * Decimal("0.995")
    upper = Decimal("2856.75") * Decimal("1.005")
    assert lower - TOLERANCE <= stock.price <= upper + TOLERANCE

    expected_pct = ((stock.price - Decimal("2832.45")) / Decimal("2832.45") * 100).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    assert stock.change_percent == expected_pct
    assert stock.change == stock.price - Decimal("2832.45")


def test_perturb_does_not_mutate_input(model, reliance):
    before = replace(reliance)
    model.perturb_stock(reliance)
    assert reliance == before


def test_stock_bounds_hold_over_many_ticks(model):
    for stock in seed_stocks():
        for _ in range(300):
            prev = stock
            stock = model.perturb_stock(stock)
            assert _bracketed(stock)
            assert stock.high >= prev.high
            assert stock.low <= prev.low
            assert stock.volume >= prev.volume


def test_index_bounds_hold_over_many_ticks(model):
    for index in seed_indices():
        assert _bracketed(index)
        for _ in range(300):
            prev = index
            index = model.perturb_index(index)
            assert _bracketed(index)
            bound = prev.value * Decimal("0.003")
            assert abs(index.value - prev.value) <= bound + TOLERANCE


def test_option_leg_bounds_hold_over_many_ticks(model):
    chain = seed_option_chains()["RELIANCE"]
    for leg in chain.legs:
        assert _bracketed(leg)
        for _ in range(300):
            prev = leg
            leg = model.perturb_option_leg(leg)
            assert _bracketed(leg)
            assert abs(leg.last_price - prev.last_price) <= prev.last_price * Decimal("0.02") + TOLERANCE


def test_zero_close_reference_gives_zero_percent():
    change, pct = change_from_close(Decimal("12.50"), Decimal("0"))
    assert change == Decimal("12.50")
    assert pct == Decimal("0.00")


def test_option_leg_with_zero_reference(model):
    leg = seed_option_chains()["RELIANCE"].calls[0]
    leg = replace(leg, close=Decimal("0"), open=Decimal("0"), low=Decimal("0"))
    moved = model.perturb_option_leg(leg)
    assert moved.change_percent == Decimal("0.00")


def test_perturb_dispatch(model, reliance):
    assert model.perturb(Category.STOCKS, reliance).symbol == "RELIANCE"
    with pytest.raises(ValueError):
        model.perturb(Category.CHART, reliance)


def test_bound_for_categories(model):
    assert model.bound_for(Category.STOCKS) == 0.5
    assert model.bound_for(Category.INDICES) == 0.3
    assert model.bound_for(Category.OPTION_CHAIN) == 2.0


def test_custom_bound_respected(reliance):
    model = PriceModel(PerturbationConfig(stock_max_pct=0.1), rng=random.Random(5))
    for _ in range(100):
        stock = model.perturb_stock(reliance)
        assert abs(stock.price - reliance.price) <= reliance.price * Decimal("0.001") + TOLERANCE


def test_same_seed_same_path(reliance):
    a = PriceModel(rng=random.Random(42))
    b = PriceModel(rng=random.Random(42))
    assert [a.perturb_stock(reliance).price for _ in range(10)] == [
        b.perturb_stock(reliance).price for _ in range(10)
    ]


def test_next_candle_continues_series(model):
    candles = generate_chart("RELIANCE", Decimal("2830"), 5, 5, random.Random(3))
    last = candles[-1]

    nxt = model.next_candle(last)

    assert nxt.open == last.close
    assert nxt.timestamp - last.timestamp == timedelta(minutes=5)
    assert nxt.high >= max(nxt.open, nxt.close)
    assert nxt.low <= min(nxt.open, nxt.close)
    assert nxt.symbol == "RELIANCE"


def test_generated_chart_is_time_ordered():
    candles = generate_chart("TCS", Decimal("3583.95"), 78, 5, random.Random(9))
    assert len(candles) == 78
    assert candles[0].timestamp == CHART_SESSION_START
    steps = {b.timestamp - a.timestamp for a, b in zip(candles, candles[1:])}
    assert steps == {timedelta(minutes=5)}
    for c in candles:
        assert c.high >= max(c.open, c.close)
        assert c.low <= min(c.open, c.close)
