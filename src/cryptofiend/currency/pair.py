# src/cryptofiend/currency/pair.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

CANONICAL_DELIMITER = "/"

_KNOWN_DELIMITERS = ("/", "-", "_", ":")


class CurrencyPairError(ValueError):
    """Base exception for currency pair parsing and translation."""
    pass


class UnknownSymbolError(CurrencyPairError):
    """Raised when a venue symbol has not been advertised by the venue."""
    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"No currency pair found for '{symbol}' symbol.")


def canonical_currency(symbol: str) -> str:
    """
    Single normalisation step for a currency symbol, used for every key the
    order book store touches.
    """
    return symbol.strip().lower()


@dataclass(frozen=True)
class PairFormat:
    """Display format of a pair: delimiter between the legs and letter case."""
    delimiter: str = CANONICAL_DELIMITER
    uppercase: bool = False


CANONICAL_FORMAT = PairFormat(delimiter=CANONICAL_DELIMITER, uppercase=False)


@dataclass(frozen=True)
class CurrencyPair:
    base: str
    quote: str

    def __post_init__(self):
        if not self.base or not self.quote:
            raise CurrencyPairError("Currency pair requires both a base and a quote symbol.")

    @classmethod
    def parse(cls, text: str, delimiter: str | None = None) -> "CurrencyPair":
        """
        Parses ``"BTC/USDT"``-style text. When no delimiter is given the
        common ones are tried in turn.
        """
        candidates = (delimiter,) if delimiter else _KNOWN_DELIMITERS
        for candidate in candidates:
            if candidate and candidate in text:
                base, _, quote = text.partition(candidate)
                return cls(base.strip(), quote.strip())
        raise CurrencyPairError(f"Cannot split '{text}' into a base and a quote currency.")

    def canonical(self) -> "CurrencyPair":
        return CurrencyPair(canonical_currency(self.base), canonical_currency(self.quote))

    def display(self, fmt: PairFormat = CANONICAL_FORMAT) -> str:
        text = f"{self.base}{fmt.delimiter}{self.quote}"
        return text.upper() if fmt.uppercase else text.lower()

    def __str__(self) -> str:
        return self.display(CANONICAL_FORMAT)


def split_concatenated(symbol: str, quote_assets: Iterable[str]) -> Optional[CurrencyPair]:
    """
    Best-effort split of a delimiter-less ticker such as ``BTCUSDT`` by matching a
    known quote asset suffix. Returns None when no suffix matches.
    """
    upper = symbol.upper()
    # Longest suffix first so "USDT" wins over "USD".
    for quote in sorted((q.upper() for q in quote_assets), key=len, reverse=True):
        if upper.endswith(quote) and len(upper) > len(quote):
            return CurrencyPair(upper[: -len(quote)], quote)
    return None


def pair_from_text(text: str, quote_assets: Iterable[str] = ()) -> Optional[CurrencyPair]:
    """
    Resolves configured pair text: ``"BTC/USDT"``-style first, then a quote
    suffix split for tickers like ``ETHUSDT``. Returns None when neither works.
    """
    try:
        return CurrencyPair.parse(text)
    except CurrencyPairError:
        return split_concatenated(text.strip(), quote_assets)
