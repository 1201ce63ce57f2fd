from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class PairFormatConfig:
    delimiter: str = ""
    uppercase: bool = True


@dataclass
class VenueConfig:
    name: str = "binance"
    base_url: str = "https://www.binance.com/"
    recv_window_ms: int = 5000
    request_timeout: float = 10.0
    rate_limit_window_seconds: float = 90.0
    request_pair_format: PairFormatConfig = field(default_factory=PairFormatConfig)
    quote_assets: List[str] = field(
        default_factory=lambda: ["USDT", "BUSD", "USDC", "TUSD", "BTC", "ETH", "BNB"]
    )


@dataclass
class OrderbookConfig:
    # Canonical "base/quote" strings to poll.
    pairs: List[str] = field(default_factory=list)
    book_type: str = "SPOT"
    # None leaves the depth to the venue default.
    depth_limit: Optional[int] = None
    poll_workers: Optional[int] = None


@dataclass
class AppConfig:
    venue: VenueConfig = field(default_factory=VenueConfig)
    orderbook: OrderbookConfig = field(default_factory=OrderbookConfig)
