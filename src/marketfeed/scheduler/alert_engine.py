"""Alert Engine - Checks watchlist threshold rules against live quotes.

Triggers alerts for:
- Price crossing above / below a level
- Absolute percent change beyond a threshold
- Session volume beyond a threshold

Each rule fires at most once; triggered rules are never re-armed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from marketfeed.constants import AlertCondition

if TYPE_CHECKING:
    from marketfeed.data.market_data import Stock
    from marketfeed.watchlist.store import AlertRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriggeredRule:
    """A rule that crossed its threshold, with the quote that crossed it."""

    rule: AlertRule
    stock: Stock
    timestamp: datetime


def condition_met(rule: AlertRule, stock: Stock) -> bool:
    """Whether `stock` satisfies `rule`'s condition right now."""
    if rule.condition == AlertCondition.ABOVE:
        return stock.price > rule.value
    if rule.condition == AlertCondition.BELOW:
        return stock.price < rule.value
    if rule.condition == AlertCondition.PERCENT_CHANGE:
        return abs(stock.change_percent) > rule.value
    if rule.condition == AlertCondition.VOLUME:
        return stock.volume > rule.value
    return False


class AlertEngine:
    """
    Evaluates alert rules against stock snapshots.

    Usage:
        engine = AlertEngine(on_alert=my_callback)
        triggered = engine.evaluate(stocks, rules)
    """

    def __init__(self, on_alert: Callable[[TriggeredRule], None] | None = None):
        self.on_alert = on_alert

    def evaluate(
        self, stocks: Iterable[Stock], rules: Iterable[AlertRule]
    ) -> list[TriggeredRule]:
        """
        Check every armed rule against its symbol's quote.

        Rules whose symbol has no quote are skipped. A rule that fires is
        flagged `triggered` before this returns.

        Args:
            stocks: Current stock snapshots
            rules: Rules to check

        Returns:
            Rules that fired on this call
        """
        by_symbol = {s.symbol: s for s in stocks}
        now = datetime.now()
        triggered = []

        for rule in rules:
            if rule.triggered:
                continue

            stock = by_symbol.get(rule.symbol)
            if stock is None:
                continue

            if condition_met(rule, stock):
                rule.triggered = True
                hit = TriggeredRule(rule=rule, stock=stock, timestamp=now)
                triggered.append(hit)
                self._send_alert(hit)

        return triggered

    def _send_alert(self, hit: TriggeredRule) -> None:
        """Send the alert via callback."""
        logger.info(
            f"Alert triggered: {hit.rule.symbol} {hit.rule.condition.value} "
            f"{hit.rule.value} (price {hit.stock.price})"
        )

        if self.on_alert:
            try:
                self.on_alert(hit)
            except Exception as e:
                logger.error(f"Alert callback failed: {e}")
