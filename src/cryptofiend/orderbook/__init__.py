from .exceptions import (
    OrderbookError,
    PrimaryCurrencyNotFoundError,
    SecondaryCurrencyNotFoundError,
)
from .models import MARGIN, SPOT, OrderbookLevel, OrderbookSnapshot
from .store import OrderbookStore

__all__ = [
    "MARGIN",
    "SPOT",
    "OrderbookError",
    "OrderbookLevel",
    "OrderbookSnapshot",
    "OrderbookStore",
    "PrimaryCurrencyNotFoundError",
    "SecondaryCurrencyNotFoundError",
]
