# src/cryptofiend/currency/symbols.py

import logging
import threading
from typing import Dict, Iterable, List, Tuple

from cryptofiend.currency.pair import CurrencyPair, PairFormat, UnknownSymbolError
from cryptofiend.logging_config import structured_log_extra

logger = logging.getLogger(__name__)


def _symbol_key(symbol: str) -> str:
    return symbol.strip().upper()


class VenueSymbolMap:
    """
    Translates between a venue's wire symbols (e.g. ``BTCUSDT``) and currency pairs.

    Pair -> symbol is a pure formatting step driven by the venue's request format.
    Symbol -> pair only succeeds for symbols the venue advertised in its
    instrument list, because concatenated tickers cannot be split reliably.
    Symbol lookups ignore case and surrounding whitespace.
    """
    def __init__(self, request_format: PairFormat):
        self.request_format = request_format
        self._pairs: Dict[str, CurrencyPair] = {}
        self._lock = threading.Lock()

    def to_symbol(self, pair: CurrencyPair) -> str:
        return pair.display(self.request_format)

    def to_pair(self, symbol: str) -> CurrencyPair:
        with self._lock:
            pair = self._pairs.get(_symbol_key(symbol))
        if pair is None:
            raise UnknownSymbolError(symbol)
        if self.request_format.uppercase:
            return CurrencyPair(pair.base.upper(), pair.quote.upper())
        return CurrencyPair(pair.base.lower(), pair.quote.lower())

    def load(self, entries: Iterable[Tuple[str, CurrencyPair]]) -> int:
        """Replaces the known symbols with ``(symbol, pair)`` entries. Returns the count."""
        pairs = {_symbol_key(symbol): pair for symbol, pair in entries}
        with self._lock:
            self._pairs = pairs
        logger.info("Loaded %d venue symbols", len(pairs), extra=structured_log_extra(event="symbols_loaded"))
        return len(pairs)

    def symbols(self) -> List[str]:
        with self._lock:
            return sorted(self._pairs)

    def __contains__(self, symbol: str) -> bool:
        with self._lock:
            return _symbol_key(symbol) in self._pairs
