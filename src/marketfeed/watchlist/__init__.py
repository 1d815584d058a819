from marketfeed.watchlist.store import AlertRule, AlertRuleRequest, Watchlist, WatchlistStore

__all__ = ["AlertRule", "AlertRuleRequest", "Watchlist", "WatchlistStore"]
