from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from cryptofiend.currency import CurrencyPair

SPOT = "SPOT"
MARGIN = "MARGIN"


@dataclass(frozen=True)
class OrderbookLevel:
    price: Decimal
    amount: Decimal

    def __post_init__(self):
        if self.price <= 0:
            raise ValueError(f"Order book price must be positive, got {self.price}")
        if self.amount <= 0:
            raise ValueError(f"Order book amount must be positive, got {self.amount}")

    @classmethod
    def from_raw(cls, price, amount) -> "OrderbookLevel":
        # Venues send decimals as strings; go through str() so floats don't leak binary noise.
        return cls(price=Decimal(str(price)), amount=Decimal(str(amount)))


def _collate(levels: Iterable[OrderbookLevel]) -> Tuple[Decimal, Decimal]:
    amount_collated = Decimal(0)
    total = Decimal(0)
    for level in levels:
        amount_collated += level.amount
        total += level.amount * level.price
    return amount_collated, total


@dataclass(frozen=True)
class OrderbookSnapshot:
    """
    A full order book as last reported by the venue.

    Levels keep the venue's ordering (bids descending, asks ascending); nothing here re-sorts them.
    """
    pair: CurrencyPair
    bids: Tuple[OrderbookLevel, ...] = ()
    asks: Tuple[OrderbookLevel, ...] = ()
    last_updated: Optional[datetime] = None
    last_update_id: Optional[int] = None
    currency_pair: str = field(default="", compare=False)

    def __post_init__(self):
        # Accept lists from callers but keep the stored value immutable.
        object.__setattr__(self, "bids", tuple(self.bids))
        object.__setattr__(self, "asks", tuple(self.asks))
        if not self.currency_pair:
            object.__setattr__(self, "currency_pair", str(self.pair))

    @classmethod
    def empty(cls, pair: CurrencyPair) -> "OrderbookSnapshot":
        return cls(pair=pair)

    @property
    def is_empty(self) -> bool:
        return not self.bids and not self.asks

    @property
    def best_bid(self) -> Optional[OrderbookLevel]:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[OrderbookLevel]:
        return self.asks[0] if self.asks else None

    def total_bids(self) -> Tuple[Decimal, Decimal]:
        """Returns the total bid amount and the total bid value (amount * price)."""
        return _collate(self.bids)

    def total_asks(self) -> Tuple[Decimal, Decimal]:
        """Returns the total ask amount and the total ask value (amount * price)."""
        return _collate(self.asks)

    def restamped(self, pair: CurrencyPair, now: Optional[datetime] = None) -> "OrderbookSnapshot":
        """Copy keyed to ``pair`` with ``last_updated`` set to ``now`` (UTC by default)."""
        return replace(
            self,
            pair=pair,
            currency_pair=str(pair),
            last_updated=now or datetime.now(timezone.utc),
        )
