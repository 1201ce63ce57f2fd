from .ingest import refresh_orderbook, refresh_orderbooks

__all__ = ["refresh_orderbook", "refresh_orderbooks"]
