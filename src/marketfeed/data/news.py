"""Static market news feed."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class NewsItem:
    """One headline with the symbols it concerns."""

    id: str
    headline: str
    summary: str
    source: str
    published_at: datetime
    related_symbols: tuple[str, ...]
    sentiment: str = "neutral"
    is_important: bool = False
    url: str = "#"


_HOUR = timedelta(hours=1)

# id, headline, summary, source, age, symbols, sentiment, important
_NEWS_ROWS = [
    (
        "1",
        "Reliance Industries to Invest ₹75,000 Crore in Green Energy",
        "Reliance Industries announced plans to invest ₹75,000 crore in green energy "
        "initiatives over the next three years, focusing on solar power, hydrogen, and fuel cells.",
        "Economic Times",
        _HOUR,
        ("RELIANCE",),
        "positive",
        True,
    ),
    (
        "2",
        "HDFC Bank Reports 20% Increase in Q1 Profit",
        "HDFC Bank reported a 20% year-on-year increase in net profit for Q1 FY2024, "
        "beating market expectations.",
        "LiveMint",
        2 * _HOUR,
        ("HDFCBANK",),
        "positive",
        False,
    ),
    (
        "3",
        "Infosys Wins $1.5 Billion Deal from Global Financial Services Firm",
        "Infosys has secured a $1.5 billion deal from a leading global financial services "
        "company for digital transformation services spanning across 5 years.",
        "Business Standard",
        3 * _HOUR,
        ("INFY",),
        "positive",
        True,
    ),
    (
        "4",
        "TCS Partners with Microsoft for Cloud Solutions",
        "Tata Consultancy Services announced a strategic partnership with Microsoft to develop "
        "industry-specific cloud solutions.",
        "Financial Express",
        4 * _HOUR,
        ("TCS",),
        "positive",
        False,
    ),
    (
        "5",
        "Markets End Lower on Global Cues; IT, Bank Stocks Drag",
        "Indian benchmark indices ended lower, dragged by IT and banking stocks.",
        "NDTV Profit",
        5 * _HOUR,
        ("NIFTY", "BANKNIFTY"),
        "negative",
        False,
    ),
    (
        "6",
        "RBI Keeps Repo Rate Unchanged at 6.5% for Fourth Consecutive Time",
        "The Reserve Bank of India maintained the repo rate at 6.5% for the fourth "
        "consecutive policy meeting.",
        "Bloomberg Quint",
        24 * _HOUR,
        ("NIFTY", "BANKNIFTY", "HDFCBANK", "ICICIBANK", "SBIN"),
        "neutral",
        True,
    ),
    (
        "7",
        "Wipro Announces Share Buyback Worth ₹10,000 Crore",
        "Wipro has announced a share buyback program worth ₹10,000 crore at ₹445 per share.",
        "Moneycontrol",
        48 * _HOUR,
        ("WIPRO",),
        "positive",
        True,
    ),
]


class NewsFeed:
    """Read-only news store, newest first on every query."""

    def __init__(self, items: list[NewsItem] | None = None, now: datetime | None = None):
        if items is None:
            now = now or datetime.now()
            items = [
                NewsItem(
                    id=id_,
                    headline=headline,
                    summary=summary,
                    source=source,
                    published_at=now - age,
                    related_symbols=symbols,
                    sentiment=sentiment,
                    is_important=important,
                )
                for id_, headline, summary, source, age, symbols, sentiment, important in _NEWS_ROWS
            ]
        self._items = sorted(items, key=lambda n: n.published_at, reverse=True)

    def all(self) -> list[NewsItem]:
        return list(self._items)

    def for_symbol(self, symbol: str) -> list[NewsItem]:
        return [n for n in self._items if symbol in n.related_symbols]

    def important(self) -> list[NewsItem]:
        return [n for n in self._items if n.is_important]

    def latest(self, limit: int = 5) -> list[NewsItem]:
        return self._items[:limit]

    def get(self, news_id: str) -> NewsItem | None:
        return next((n for n in self._items if n.id == news_id), None)
