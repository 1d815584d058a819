"""Market data snapshots, seed universe and price model."""

from marketfeed.data.market_data import Candle, MarketIndex, OptionChain, OptionLeg, Stock
from marketfeed.data.price_model import PriceModel

__all__ = [
    "Candle",
    "MarketIndex",
    "OptionChain",
    "OptionLeg",
    "PriceModel",
    "Stock",
]
