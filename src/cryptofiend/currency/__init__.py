from .pair import (
    CANONICAL_FORMAT,
    CurrencyPair,
    CurrencyPairError,
    PairFormat,
    UnknownSymbolError,
    canonical_currency,
    pair_from_text,
    split_concatenated,
)
from .symbols import VenueSymbolMap

__all__ = [
    "CANONICAL_FORMAT",
    "CurrencyPair",
    "CurrencyPairError",
    "PairFormat",
    "UnknownSymbolError",
    "VenueSymbolMap",
    "canonical_currency",
    "pair_from_text",
    "split_concatenated",
]
