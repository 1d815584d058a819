"""Notification log for alert and news events."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING

from marketfeed.constants import AlertCondition, AlertKind, NotificationType

if TYPE_CHECKING:
    from marketfeed.data.news import NewsItem
    from marketfeed.scheduler.alert_engine import TriggeredRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationEvent:
    """Something worth telling the user about, before it is logged."""

    type: NotificationType
    title: str
    message: str
    symbol: str | None = None
    is_important: bool = False

    @classmethod
    def from_alert(cls, hit: TriggeredRule) -> NotificationEvent:
        rule, stock = hit.rule, hit.stock
        if rule.kind == AlertKind.PRICE:
            direction = "risen above" if rule.condition == AlertCondition.ABOVE else "fallen below"
            title = f"Price Alert: {stock.symbol}"
            message = f"{stock.name} has {direction} ₹{rule.value}"
        elif rule.kind == AlertKind.CHANGE:
            title = f"Movement Alert: {stock.symbol}"
            message = f"{stock.name} has moved by {rule.value}% in a short time"
        else:
            title = f"Volume Alert: {stock.symbol}"
            message = f"{stock.name} is trading with unusually high volume"
        return cls(
            type=NotificationType.PRICE_ALERT,
            title=title,
            message=message,
            symbol=stock.symbol,
            is_important=True,
        )

    @classmethod
    def from_news(cls, news: NewsItem) -> NotificationEvent:
        return cls(
            type=NotificationType.NEWS_ALERT,
            title=f"News Alert: {', '.join(news.related_symbols)}",
            message=news.headline,
            symbol=news.related_symbols[0] if news.related_symbols else None,
            is_important=news.is_important,
        )


@dataclass(frozen=True)
class Notification:
    """A logged event. Only `read` changes, by replacement."""

    id: str
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    symbol: str | None = None
    read: bool = False
    is_important: bool = False


class NotificationCenter:
    """
    Append-only notification log with read/unread tracking.

    Marking and deleting are idempotent and ignore unknown ids.
    """

    def __init__(self) -> None:
        self._log: dict[str, Notification] = {}

    def record(self, event: NotificationEvent) -> Notification:
        notification = Notification(
            id=uuid.uuid4().hex,
            type=event.type,
            title=event.title,
            message=event.message,
            timestamp=datetime.now(),
            symbol=event.symbol,
            is_important=event.is_important,
        )
        self._log[notification.id] = notification
        logger.info(f"Notification recorded: {notification.title}")
        return notification

    def get(self, notification_id: str) -> Notification | None:
        return self._log.get(notification_id)

    def list_notifications(self) -> list[Notification]:
        """Newest first; ties keep most recently recorded first."""
        ordered = sorted(
            enumerate(self._log.values()), key=lambda p: (p[1].timestamp, p[0]), reverse=True
        )
        return [n for _, n in ordered]

    def mark_read(self, notification_id: str) -> bool:
        notification = self._log.get(notification_id)
        if notification is None:
            return False
        if not notification.read:
            self._log[notification_id] = replace(notification, read=True)
        return True

    def mark_all_read(self) -> int:
        """Returns how many were unread."""
        unread = [n for n in self._log.values() if not n.read]
        for n in unread:
            self._log[n.id] = replace(n, read=True)
        return len(unread)

    def delete(self, notification_id: str) -> bool:
        return self._log.pop(notification_id, None) is not None

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._log.values() if not n.read)

    def __len__(self) -> int:
        return len(self._log)
