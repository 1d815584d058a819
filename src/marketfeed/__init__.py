"""marketfeed - simulated real-time market data with pub/sub fan-out."""

__version__ = "0.1.0"
