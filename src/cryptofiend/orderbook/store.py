# src/cryptofiend/orderbook/store.py

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List

from cryptofiend.currency import CurrencyPair, canonical_currency
from cryptofiend.orderbook.exceptions import (
    PrimaryCurrencyNotFoundError,
    SecondaryCurrencyNotFoundError,
)
from cryptofiend.orderbook.models import SPOT, OrderbookSnapshot

logger = logging.getLogger(__name__)

BookTypes = Dict[str, OrderbookSnapshot]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderbookStore:
    """
    In-memory cache of the latest order book per (base, quote, book type).

    Keys are always the canonical form of each currency, so lookups are insensitive
    to the case or delimiter style the caller used. A single lock guards the whole
    nested mapping; every operation holds it only for a few dict accesses and never
    during network I/O.
    """
    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._books: Dict[str, Dict[str, BookTypes]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, base: str, quote: str, book_type: str = SPOT) -> OrderbookSnapshot:
        """
        Returns the stored snapshot. An unknown pair is an error; an unknown book
        type under a known pair yields an empty snapshot instead.
        """
        base_key, quote_key = canonical_currency(base), canonical_currency(quote)
        with self._lock:
            quotes = self._books.get(base_key)
            if quotes is None:
                raise PrimaryCurrencyNotFoundError(base_key)
            book_types = quotes.get(quote_key)
            if book_types is None:
                raise SecondaryCurrencyNotFoundError(base_key, quote_key)
            snapshot = book_types.get(book_type)

        if snapshot is None:
            return OrderbookSnapshot.empty(CurrencyPair(base_key, quote_key))
        return snapshot

    def upsert(self, base: str, quote: str, book_type: str, snapshot: OrderbookSnapshot) -> None:
        """Stores ``snapshot`` under the canonical keys, stamping it with the current time."""
        pair = CurrencyPair(canonical_currency(base), canonical_currency(quote))
        stored = snapshot.restamped(pair, now=self._clock())
        with self._lock:
            quotes = self._books.setdefault(pair.base, {})
            book_types = quotes.setdefault(pair.quote, {})
            book_types[book_type] = stored

        logger.debug(
            "Stored %s order book for %s (%d bids, %d asks)",
            book_type, stored.currency_pair, len(stored.bids), len(stored.asks),
        )

    def has_base(self, base: str) -> bool:
        with self._lock:
            return canonical_currency(base) in self._books

    def has_pair(self, base: str, quote: str) -> bool:
        with self._lock:
            quotes = self._books.get(canonical_currency(base))
            return quotes is not None and canonical_currency(quote) in quotes

    def get_pair(self, pair: CurrencyPair, book_type: str = SPOT) -> OrderbookSnapshot:
        return self.get(pair.base, pair.quote, book_type)

    def upsert_pair(self, pair: CurrencyPair, book_type: str, snapshot: OrderbookSnapshot) -> None:
        self.upsert(pair.base, pair.quote, book_type, snapshot)

    def pairs(self) -> List[CurrencyPair]:
        """Canonical pairs that currently hold at least one book type."""
        with self._lock:
            return sorted(
                (CurrencyPair(base, quote) for base, quotes in self._books.items() for quote in quotes),
                key=str,
            )

    def __len__(self) -> int:
        with self._lock:
            return sum(len(book_types) for quotes in self._books.values() for book_types in quotes.values())
