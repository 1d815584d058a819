"""Bounded random-walk price model.

Every function here returns a fresh snapshot and leaves its input untouched;
the caller writes the result back into the engine's state.
"""

from __future__ import annotations

import random
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

from marketfeed.config_loader import ChartConfig, PerturbationConfig
from marketfeed.constants import HUNDRED, Category
from marketfeed.data.market_data import (
    Candle,
    Instrument,
    MarketIndex,
    OptionLeg,
    Stock,
    change_from_close,
    quantize_price,
)


class PriceModel:
    """
    Applies a uniform percent delta, bounded per category, to a snapshot.

    `change` and `change_percent` are recomputed against the instrument's
    close, and high/low only ever widen.
    """

    def __init__(
        self,
        config: PerturbationConfig | None = None,
        chart_config: ChartConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or PerturbationConfig()
        self.chart_config = chart_config or ChartConfig()
        self.rng = rng or random.Random()

    def bound_for(self, category: Category) -> float:
        """Max absolute percent move per tick for a category."""
        if category in (Category.STOCKS, Category.CHART):
            return self.config.stock_max_pct
        if category == Category.INDICES:
            return self.config.index_max_pct
        return self.config.option_max_pct

    def _step(self, price: Decimal, bound_pct: float) -> Decimal:
        delta_pct = Decimal(str(self.rng.uniform(-bound_pct, bound_pct)))
        return quantize_price(price * (1 + delta_pct / HUNDRED))

    def perturb(self, category: Category, snapshot: Instrument) -> Instrument:
        """Dispatch on category."""
        if category == Category.STOCKS:
            return self.perturb_stock(snapshot)
        if category == Category.INDICES:
            return self.perturb_index(snapshot)
        if category == Category.OPTION_CHAIN:
            return self.perturb_option_leg(snapshot)
        raise ValueError(f"Category {category.value} has no instrument perturbation")

    def perturb_stock(self, stock: Stock) -> Stock:
        price = self._step(stock.price, self.config.stock_max_pct)
        change, change_percent = change_from_close(price, stock.close)
        return replace(
            stock,
            price=price,
            change=change,
            change_percent=change_percent,
            high=max(stock.high, price),
            low=min(stock.low, price),
            volume=stock.volume + self.rng.randint(0, self.config.stock_volume_step),
        )

    def perturb_index(self, index: MarketIndex) -> MarketIndex:
        value = self._step(index.value, self.config.index_max_pct)
        change, change_percent = change_from_close(value, index.close)
        return replace(
            index,
            value=value,
            change=change,
            change_percent=change_percent,
            high=max(index.high, value),
            low=min(index.low, value),
        )

    def perturb_option_leg(self, leg: OptionLeg) -> OptionLeg:
        last_price = self._step(leg.last_price, self.config.option_max_pct)
        change, change_percent = change_from_close(last_price, leg.close)
        return replace(
            leg,
            last_price=last_price,
            change=change,
            change_percent=change_percent,
            high=max(leg.high, last_price),
            low=min(leg.low, last_price),
            volume=leg.volume + self.rng.randint(0, self.config.option_volume_step),
        )

    def next_candle(self, previous: Candle) -> Candle:
        """Candle one step after `previous`, opening at its close."""
        open_ = previous.close
        close = self._step(open_, self.config.stock_max_pct)
        wick = Decimal(str(self.rng.uniform(0, float(self.config.stock_max_pct)))) / HUNDRED
        high = quantize_price(max(open_, close) * (1 + wick))
        low = quantize_price(min(open_, close) * (1 - wick))
        return Candle(
            symbol=previous.symbol,
            timestamp=previous.timestamp + timedelta(minutes=self.chart_config.candle_minutes),
            open=open_,
            high=high,
            low=low,
            close=close,
            volume=self.rng.randint(10_000, 60_000),
        )
