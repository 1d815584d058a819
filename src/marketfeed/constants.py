"""Core constants for marketfeed."""

from decimal import Decimal
from enum import Enum


class Category(str, Enum):
    """Data categories, one periodic trigger each."""

    STOCKS = "stocks"
    INDICES = "indices"
    CHART = "chart"
    OPTION_CHAIN = "option_chain"


class Topic(str, Enum):
    """Fan-out topics. Global topics carry no symbol."""

    STOCKS = "stocks"
    INDICES = "indices"
    CHART = "chart"
    OPTION_CHAIN = "option_chain"
    NOTIFICATIONS = "notifications"

    @property
    def is_per_symbol(self) -> bool:
        return self in (Topic.CHART, Topic.OPTION_CHAIN)


class OptionType(str, Enum):
    """Option leg side."""

    CALL = "call"
    PUT = "put"


class AlertKind(str, Enum):
    """Alert rule family."""

    PRICE = "price"
    CHANGE = "change"
    VOLUME = "volume"


class AlertCondition(str, Enum):
    """Alert rule condition."""

    ABOVE = "above"
    BELOW = "below"
    PERCENT_CHANGE = "percent_change"
    VOLUME = "volume"

    @property
    def kind(self) -> AlertKind:
        if self in (AlertCondition.ABOVE, AlertCondition.BELOW):
            return AlertKind.PRICE
        if self == AlertCondition.PERCENT_CHANGE:
            return AlertKind.CHANGE
        return AlertKind.VOLUME


class NotificationType(str, Enum):
    """Notification log entry types."""

    PRICE_ALERT = "price_alert"
    NEWS_ALERT = "news_alert"
    SYSTEM = "system"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ============================================
# Price Arithmetic
# ============================================

PRICE_QUANT = Decimal("0.01")
PERCENT_QUANT = Decimal("0.01")
HUNDRED = Decimal("100")

# ============================================
# Default Values
# ============================================

DEFAULT_STOCKS_INTERVAL_SEC = 5.0
DEFAULT_INDICES_INTERVAL_SEC = 10.0
DEFAULT_OPTION_CHAIN_INTERVAL_SEC = 15.0
DEFAULT_CHART_INTERVAL_SEC = 10.0

DEFAULT_STOCK_MAX_PCT = 0.5
DEFAULT_INDEX_MAX_PCT = 0.3
DEFAULT_OPTION_MAX_PCT = 2.0

DEFAULT_CHART_WINDOW = 100
DEFAULT_CANDLE_MINUTES = 5
DEFAULT_SEED_CANDLES = 78

# ============================================
# Application Constants
# ============================================

APP_NAME = "marketfeed"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
