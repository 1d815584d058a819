"""marketfeed Main Application."""

from __future__ import annotations

import asyncio
import logging
import signal
from pathlib import Path

from marketfeed.config_loader import AppConfig, load_config_with_overrides
from marketfeed.constants import APP_NAME, LOG_FORMAT, Category
from marketfeed.data.market_data import MarketIndex, OptionChain, Stock
from marketfeed.feed.engine import MarketEngine
from marketfeed.feed.registry import Subscription
from marketfeed.notifications.center import Notification

logger = logging.getLogger(__name__)


class MarketFeedApp:
    """Main application orchestrator: wires the engine to log-based consumers."""

    def __init__(
        self,
        config_path: str = "config/config.yaml",
        seed: int | None = None,
        duration_sec: float | None = None,
        watch_symbols: list[str] | None = None,
    ):
        self.config_path = Path(config_path)
        self.config: AppConfig | None = None
        self._seed_override = seed
        self.duration_sec = duration_sec
        self.watch_symbols = watch_symbols or []

        self.engine: MarketEngine | None = None
        self._subscriptions: list[Subscription] = []

        self._running = False
        self._shutdown_event = asyncio.Event()

    def _setup_logging(self) -> None:
        level = self.config.environment.log_level.value if self.config else "INFO"
        logging.basicConfig(level=level, format=LOG_FORMAT)

    async def initialize(self) -> None:
        """Load config and initialize components."""
        self.config = load_config_with_overrides(
            self.config_path.absolute(), seed=self._seed_override
        )
        self._setup_logging()
        logger.info(f"Initializing {APP_NAME}...")

        if self.config.is_deterministic:
            logger.info(f"Random seed: {self.config.environment.random_seed}")

        self.engine = MarketEngine(self.config)

        # Wire consumers: Engine -> App -> log
        self._subscriptions.append(
            self.engine.subscribe_to_category(Category.STOCKS, self._on_stocks, replay=False)
        )
        self._subscriptions.append(
            self.engine.subscribe_to_category(Category.INDICES, self._on_indices, replay=False)
        )
        self._subscriptions.append(self.engine.subscribe_to_notifications(self._on_notifications))
        for symbol in self.watch_symbols:
            self._subscriptions.append(
                self.engine.subscribe_to_option_chain(symbol, self._on_chain, replay=False)
            )

    def _on_stocks(self, stocks: tuple[Stock, ...]) -> None:
        movers = sorted(stocks, key=lambda s: abs(s.change_percent), reverse=True)[:3]
        logger.info(
            "Stocks: " + ", ".join(f"{s.symbol} {s.last} ({s.change_percent:+}%)" for s in movers)
        )

    def _on_indices(self, indices: tuple[MarketIndex, ...]) -> None:
        logger.info("Indices: " + ", ".join(f"{i.symbol} {i.last}" for i in indices))

    def _on_chain(self, chain: OptionChain) -> None:
        pcr = self.engine.get_put_call_ratio(chain.underlying_symbol)
        logger.info(f"Option chain {chain.underlying_symbol}: {len(chain.legs)} legs, PCR {pcr.ratio}")

    def _on_notifications(self, notifications: tuple[Notification, ...]) -> None:
        for n in notifications:
            log = logger.warning if n.is_important else logger.info
            log(f"🔔 {n.title} - {n.message}")

    async def run(self) -> None:
        """Run until a signal arrives or the configured duration elapses."""
        if not self.config:
            await self.initialize()

        logger.info("Starting run loop...")

        loop = asyncio.get_running_loop()
        try:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, lambda: self._handle_signal())
        except NotImplementedError:
            logger.warning(
                "Signal handlers not supported in this environment (likely Windows). Use Ctrl+C to stop."
            )

        stop = self.engine.start()
        self._running = True

        try:
            if self.duration_sec is not None:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=self.duration_sec)
            else:
                await self._shutdown_event.wait()
        except (asyncio.CancelledError, asyncio.TimeoutError):
            pass
        finally:
            logger.info("Shutting down...")
            stop()
            for sub in self._subscriptions:
                sub.unsubscribe()
            self._subscriptions.clear()
            self._running = False
            logger.info(
                f"Shutdown complete. {len(self.engine.notifications)} notifications, "
                f"{self.engine.unread_count} unread."
            )

    def _handle_signal(self) -> None:
        logger.info("Signal received, initiating shutdown...")
        self._shutdown_event.set()
