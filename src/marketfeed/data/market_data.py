"""Market data structures and types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from marketfeed.constants import HUNDRED, PERCENT_QUANT, PRICE_QUANT, OptionType


def quantize_price(value: Decimal) -> Decimal:
    """Round a price to paisa/cent precision."""
    return value.quantize(PRICE_QUANT, rounding=ROUND_HALF_UP)


def change_from_close(price: Decimal, close: Decimal) -> tuple[Decimal, Decimal]:
    """
    Absolute and percent change of `price` against the session reference.

    A zero reference yields a 0% change.
    """
    change = quantize_price(price - close)
    if close == 0:
        return change, Decimal("0.00")
    percent = ((price - close) / close * HUNDRED).quantize(PERCENT_QUANT, rounding=ROUND_HALF_UP)
    return change, percent


@dataclass(frozen=True)
class Stock:
    """Equity quote snapshot."""

    symbol: str
    name: str
    price: Decimal
    change: Decimal
    change_percent: Decimal
    high: Decimal
    low: Decimal
    open: Decimal
    close: Decimal
    volume: int
    market_cap: int = 0
    sector: str | None = None

    @property
    def last(self) -> Decimal:
        return self.price


@dataclass(frozen=True)
class MarketIndex:
    """Index level snapshot. `close` is the previous session's close."""

    symbol: str
    name: str
    value: Decimal
    change: Decimal
    change_percent: Decimal
    high: Decimal
    low: Decimal
    open: Decimal
    close: Decimal
    volume: int = 0

    @property
    def last(self) -> Decimal:
        return self.value


@dataclass(frozen=True)
class OptionLeg:
    """One call or put contract in a chain."""

    strike_price: Decimal
    expiry_date: str
    option_type: OptionType
    last_price: Decimal
    change: Decimal
    change_percent: Decimal
    high: Decimal
    low: Decimal
    open: Decimal
    close: Decimal
    volume: int
    open_interest: int
    implied_volatility: Decimal

    @property
    def last(self) -> Decimal:
        return self.last_price


@dataclass(frozen=True)
class OptionChain:
    """Calls and puts for one underlying and expiry."""

    underlying_symbol: str
    expiry_date: str
    calls: tuple[OptionLeg, ...]
    puts: tuple[OptionLeg, ...]

    @property
    def legs(self) -> tuple[OptionLeg, ...]:
        return self.calls + self.puts


@dataclass(frozen=True)
class Candle:
    """OHLCV chart point."""

    symbol: str
    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int


Instrument = Stock | MarketIndex | OptionLeg
