"""Watchlists and the alert rules attached to their symbols."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, field_validator

from marketfeed.constants import AlertCondition, AlertKind
from marketfeed.data.seed import DEFAULT_WATCHLISTS

logger = logging.getLogger(__name__)


class AlertRuleRequest(BaseModel):
    """User input for a new alert rule. Non-numeric thresholds are rejected."""

    condition: AlertCondition
    value: Decimal

    @field_validator("value", mode="before")
    @classmethod
    def convert_to_decimal(cls, v: Any) -> Decimal:
        """Convert numeric input to Decimal, refusing anything non-finite."""
        if isinstance(v, bool):
            raise ValueError("Threshold must be numeric")
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError(f"Threshold must be finite, got: {v}")
        try:
            value = v if isinstance(v, Decimal) else Decimal(str(v).strip())
        except InvalidOperation:
            raise ValueError(f"Threshold must be numeric, got: {v!r}") from None
        if not value.is_finite():
            raise ValueError(f"Threshold must be finite, got: {v!r}")
        return value


@dataclass
class AlertRule:
    """A threshold rule. `triggered` only ever goes False -> True."""

    id: str
    watchlist_id: str
    symbol: str
    condition: AlertCondition
    value: Decimal
    triggered: bool = False
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def kind(self) -> AlertKind:
        return self.condition.kind


@dataclass
class WatchlistItem:
    symbol: str
    name: str
    added_at: datetime = field(default_factory=datetime.now)
    alerts: list[AlertRule] = field(default_factory=list)


@dataclass
class Watchlist:
    id: str
    name: str
    items: list[WatchlistItem] = field(default_factory=list)

    def get_item(self, symbol: str) -> WatchlistItem | None:
        symbol = symbol.upper()
        return next((i for i in self.items if i.symbol == symbol), None)

    @property
    def symbols(self) -> list[str]:
        return [i.symbol for i in self.items]


class WatchlistStore:
    """In-memory watchlists. Unknown ids resolve to None/False, never raise."""

    def __init__(self, seed_defaults: bool = False):
        self._watchlists: dict[str, Watchlist] = {}
        if seed_defaults:
            self._seed()

    def _seed(self) -> None:
        for wl_id, name, items in DEFAULT_WATCHLISTS:
            watchlist = Watchlist(id=wl_id, name=name)
            for symbol, stock_name, rules in items:
                item = WatchlistItem(symbol=symbol, name=stock_name)
                for condition, value in rules:
                    item.alerts.append(
                        AlertRule(
                            id=uuid.uuid4().hex,
                            watchlist_id=wl_id,
                            symbol=symbol,
                            condition=condition,
                            value=Decimal(value),
                        )
                    )
                watchlist.items.append(item)
            self._watchlists[wl_id] = watchlist

    # --- Watchlists ---

    def list_watchlists(self) -> list[Watchlist]:
        return list(self._watchlists.values())

    def get(self, watchlist_id: str) -> Watchlist | None:
        return self._watchlists.get(watchlist_id)

    def create(self, name: str) -> Watchlist:
        if not name or not name.strip():
            raise ValueError("Watchlist name cannot be empty")
        watchlist = Watchlist(id=uuid.uuid4().hex, name=name.strip())
        self._watchlists[watchlist.id] = watchlist
        logger.info(f"Watchlist created: {watchlist.name}")
        return watchlist

    def rename(self, watchlist_id: str, name: str) -> Watchlist | None:
        if not name or not name.strip():
            raise ValueError("Watchlist name cannot be empty")
        watchlist = self._watchlists.get(watchlist_id)
        if watchlist is not None:
            watchlist.name = name.strip()
        return watchlist

    def delete(self, watchlist_id: str) -> bool:
        return self._watchlists.pop(watchlist_id, None) is not None

    # --- Symbols ---

    def add_stock(self, watchlist_id: str, symbol: str, name: str) -> Watchlist | None:
        """Add a symbol; adding one already present is a no-op."""
        symbol = symbol.upper()
        watchlist = self._watchlists.get(watchlist_id)
        if watchlist is None:
            return None
        if watchlist.get_item(symbol) is None:
            watchlist.items.append(WatchlistItem(symbol=symbol, name=name))
        return watchlist

    def remove_stock(self, watchlist_id: str, symbol: str) -> Watchlist | None:
        symbol = symbol.upper()
        watchlist = self._watchlists.get(watchlist_id)
        if watchlist is None:
            return None
        watchlist.items = [i for i in watchlist.items if i.symbol != symbol]
        return watchlist

    # --- Alert rules ---

    def add_alert(
        self, watchlist_id: str, symbol: str, request: AlertRuleRequest | dict[str, Any]
    ) -> AlertRule | None:
        """
        Attach a rule to a watched symbol.

        Raises:
            pydantic.ValidationError: (a ValueError) for an invalid request.
        """
        if not isinstance(request, AlertRuleRequest):
            request = AlertRuleRequest.model_validate(request)
        symbol = symbol.upper()

        watchlist = self._watchlists.get(watchlist_id)
        item = watchlist.get_item(symbol) if watchlist else None
        if item is None:
            logger.warning(f"Cannot add alert: {symbol} not in watchlist {watchlist_id}")
            return None

        rule = AlertRule(
            id=uuid.uuid4().hex,
            watchlist_id=watchlist_id,
            symbol=symbol,
            condition=request.condition,
            value=request.value,
        )
        item.alerts.append(rule)
        logger.info(f"Alert created: {symbol} {rule.condition.value} {rule.value}")
        return rule

    def remove_alert(self, watchlist_id: str, symbol: str, rule_id: str) -> bool:
        symbol = symbol.upper()
        watchlist = self._watchlists.get(watchlist_id)
        item = watchlist.get_item(symbol) if watchlist else None
        if item is None:
            return False
        before = len(item.alerts)
        item.alerts = [r for r in item.alerts if r.id != rule_id]
        return len(item.alerts) < before

    def rules(self) -> list[AlertRule]:
        """Every rule across all watchlists."""
        return [rule for wl in self._watchlists.values() for item in wl.items for rule in item.alerts]
