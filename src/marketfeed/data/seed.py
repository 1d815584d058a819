"""Static seed universe: NSE stocks, indices, a RELIANCE option chain and chart series."""

from __future__ import annotations

import math
import random
from datetime import datetime, timedelta
from decimal import Decimal

from marketfeed.constants import AlertCondition, OptionType
from marketfeed.data.market_data import (
    Candle,
    MarketIndex,
    OptionChain,
    OptionLeg,
    Stock,
    quantize_price,
)

D = Decimal

# symbol, name, price, change, change%, high, low, open, close, volume, market cap, sector
_STOCK_ROWS = [
    ("RELIANCE", "Reliance Industries Ltd.", "2856.75", "24.30", "0.86", "2870.15", "2830.05", "2834.50", "2832.45", 3789542, 1932562000000, "Oil & Gas"),
    ("TCS", "Tata Consultancy Services Ltd.", "3568.20", "-15.75", "-0.44", "3590.45", "3552.10", "3582.25", "3583.95", 1245678, 1253647000000, "IT"),
    ("HDFCBANK", "HDFC Bank Ltd.", "1678.35", "12.85", "0.77", "1689.90", "1668.50", "1670.60", "1665.50", 3257896, 978562000000, "Banking"),
    ("INFY", "Infosys Ltd.", "1456.90", "-8.45", "-0.58", "1470.25", "1450.30", "1468.45", "1465.35", 2458761, 652345000000, "IT"),
    ("ICICIBANK", "ICICI Bank Ltd.", "1043.25", "7.60", "0.73", "1048.45", "1035.70", "1038.50", "1035.65", 2896541, 745896000000, "Banking"),
    ("HINDUNILVR", "Hindustan Unilever Ltd.", "2367.80", "-3.25", "-0.14", "2378.45", "2360.15", "2370.25", "2371.05", 1045672, 523678000000, "FMCG"),
    ("BAJFINANCE", "Bajaj Finance Ltd.", "6789.45", "56.80", "0.84", "6820.15", "6740.50", "6745.75", "6732.65", 856932, 369875000000, "Finance"),
    ("BHARTIARTL", "Bharti Airtel Ltd.", "943.60", "11.25", "1.21", "947.85", "935.40", "936.50", "932.35", 1759634, 546879000000, "Telecom"),
    ("TATAMOTORS", "Tata Motors Ltd.", "875.30", "-4.65", "-0.53", "882.40", "872.15", "880.25", "879.95", 3498761, 289765000000, "Automobile"),
    ("SBIN", "State Bank of India", "743.90", "9.85", "1.34", "748.25", "736.40", "738.55", "734.05", 4789562, 654789000000, "Banking"),
]

# symbol, name, value, change, change%, open, high, low
_INDEX_ROWS = [
    ("NIFTY50", "Nifty 50", "21643.75", "157.30", "0.72", "21510.25", "21685.40", "21496.50"),
    ("BANKNIFTY", "Nifty Bank", "47893.20", "342.65", "0.76", "47625.45", "47975.10", "47590.75"),
    ("NIFTYIT", "Nifty IT", "37824.50", "-289.80", "-0.76", "38044.35", "38125.90", "37780.15"),
    ("SENSEX", "BSE Sensex", "71785.30", "458.95", "0.64", "71410.25", "71845.70", "71385.40"),
]

_CHAIN_EXPIRY = "2023-11-30"

# strike, last, change, change%, volume, open interest, IV
_RELIANCE_CALLS = [
    ("2800", "75.45", "12.35", "19.58", 12456, 5678, "22.5"),
    ("2850", "45.20", "9.75", "27.45", 18765, 7890, "21.8"),
    ("2900", "25.85", "5.60", "27.65", 14523, 6543, "20.4"),
]
_RELIANCE_PUTS = [
    ("2800", "23.65", "-7.80", "-24.83", 9876, 4567, "23.2"),
    ("2850", "38.90", "-6.25", "-13.84", 8765, 5432, "22.1"),
    ("2900", "62.45", "-4.30", "-6.44", 7654, 3456, "24.7"),
]

CHART_SESSION_START = datetime(2023, 11, 15, 9, 15)

# watchlist id, name, [(symbol, name, [(condition, value)])]
DEFAULT_WATCHLISTS = [
    (
        "1",
        "Default Watchlist",
        [
            ("RELIANCE", "Reliance Industries Ltd.", [(AlertCondition.ABOVE, "2650")]),
            ("INFY", "Infosys Ltd.", []),
            ("HDFCBANK", "HDFC Bank Ltd.", []),
        ],
    ),
    (
        "2",
        "IT Stocks",
        [
            ("INFY", "Infosys Ltd.", []),
            ("TCS", "Tata Consultancy Services Ltd.", []),
            ("WIPRO", "Wipro Ltd.", []),
        ],
    ),
]


def _bracket(high: Decimal, low: Decimal, *prices: Decimal) -> tuple[Decimal, Decimal]:
    return max(high, *prices), min(low, *prices)


def seed_stocks() -> list[Stock]:
    stocks = []
    for row in _STOCK_ROWS:
        symbol, name, price, change, pct, high, low, open_, close, volume, cap, sector = row
        hi, lo = _bracket(D(high), D(low), D(price), D(open_), D(close))
        stocks.append(
            Stock(
                symbol=symbol,
                name=name,
                price=D(price),
                change=D(change),
                change_percent=D(pct),
                high=hi,
                low=lo,
                open=D(open_),
                close=D(close),
                volume=volume,
                market_cap=cap,
                sector=sector,
            )
        )
    return stocks


def seed_indices() -> list[MarketIndex]:
    """Indices carry no close in the source data; it is derived as value - change."""
    indices = []
    for symbol, name, value, change, pct, open_, high, low in _INDEX_ROWS:
        close = D(value) - D(change)
        hi, lo = _bracket(D(high), D(low), D(value), D(open_), close)
        indices.append(
            MarketIndex(
                symbol=symbol,
                name=name,
                value=D(value),
                change=D(change),
                change_percent=D(pct),
                high=hi,
                low=lo,
                open=D(open_),
                close=close,
            )
        )
    return indices


def _leg(option_type: OptionType, row: tuple) -> OptionLeg:
    strike, last, change, pct, volume, oi, iv = row
    close = D(last) - D(change)
    hi, lo = _bracket(D(last), D(last), close)
    return OptionLeg(
        strike_price=D(strike),
        expiry_date=_CHAIN_EXPIRY,
        option_type=option_type,
        last_price=D(last),
        change=D(change),
        change_percent=D(pct),
        high=hi,
        low=lo,
        open=close,
        close=close,
        volume=volume,
        open_interest=oi,
        implied_volatility=D(iv),
    )


def seed_option_chains() -> dict[str, OptionChain]:
    chain = OptionChain(
        underlying_symbol="RELIANCE",
        expiry_date=_CHAIN_EXPIRY,
        calls=tuple(_leg(OptionType.CALL, row) for row in _RELIANCE_CALLS),
        puts=tuple(_leg(OptionType.PUT, row) for row in _RELIANCE_PUTS),
    )
    return {chain.underlying_symbol: chain}


def generate_chart(
    symbol: str,
    base_price: Decimal,
    count: int,
    candle_minutes: int,
    rng: random.Random,
    start: datetime = CHART_SESSION_START,
) -> list[Candle]:
    """Intraday series oscillating around `base_price`, one candle per step."""
    candles = []
    amplitude = float(base_price) * 0.014
    for i in range(count):
        base = float(base_price) + math.sin(i / 10) * amplitude
        open_ = base + rng.uniform(-5, 5)
        close = open_ + rng.uniform(-5, 5)
        high = max(open_, close) + rng.uniform(0, 5)
        low = min(open_, close) - rng.uniform(0, 5)
        candles.append(
            Candle(
                symbol=symbol,
                timestamp=start + timedelta(minutes=i * candle_minutes),
                open=quantize_price(D(str(open_))),
                high=quantize_price(D(str(high))),
                low=quantize_price(D(str(low))),
                close=quantize_price(D(str(close))),
                volume=rng.randint(10_000, 60_000),
            )
        )
    return candles
