"""Convenience bootstrapper wiring config, credentials, a REST client and an order book store."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from cryptofiend.config import AppConfig, load_config
from cryptofiend.connection.rate_limiter import RateLimiter
from cryptofiend.connection.rest_client import VenueRESTClient
from cryptofiend.credentials import CredentialResult, CredentialStatus, load_credentials
from cryptofiend.currency import CurrencyPair, PairFormat, pair_from_text
from cryptofiend.logging_config import structured_log_extra
from cryptofiend.market_data.ingest import refresh_orderbooks
from cryptofiend.orderbook.store import OrderbookStore

logger = logging.getLogger(__name__)


class CredentialBootstrapError(RuntimeError):
    """Raised when credentials are present but unusable."""


@dataclass
class VenueSession:
    """Everything one venue connection owns; nothing here is process-global."""
    config: AppConfig
    client: VenueRESTClient
    store: OrderbookStore
    rate_limiter: RateLimiter

    def configured_pairs(self) -> List[CurrencyPair]:
        """Configured pairs that resolve; the rest are logged and skipped."""
        pairs = []
        for text in self.config.orderbook.pairs:
            pair = pair_from_text(text, self.config.venue.quote_assets)
            if pair is None:
                logger.warning(
                    "Skipping unparseable orderbook pair %r",
                    text,
                    extra=structured_log_extra(event="config_invalid_value", venue=self.client.venue_name),
                )
                continue
            pairs.append(pair)
        return pairs

    def refresh(self) -> Dict[CurrencyPair, Exception]:
        """Polls every configured pair once and returns the failures."""
        orderbook = self.config.orderbook
        return refresh_orderbooks(
            self.client,
            self.store,
            self.configured_pairs(),
            book_type=orderbook.book_type,
            limit=orderbook.depth_limit,
            max_workers=orderbook.poll_workers,
        )


def bootstrap(
    config: Optional[AppConfig] = None,
    credentials: Optional[CredentialResult] = None,
) -> VenueSession:
    """Load configuration and credentials, and return a ready session.

    Missing credentials are allowed: the session can still serve public market
    data, and authenticated calls fail with ``NoCredentialsError``.

    Raises:
        CredentialBootstrapError: If only one of the API key and secret is set.
    """

    config = config or load_config()
    credentials = credentials or load_credentials()
    if credentials.status is CredentialStatus.INCOMPLETE:
        raise CredentialBootstrapError(credentials.error or "Incomplete API credentials.")
    if not credentials.is_loaded:
        logger.warning(
            "No API credentials loaded; only public endpoints are available",
            extra={"event": "credentials_missing", "source": credentials.source},
        )

    venue = config.venue
    rate_limiter = RateLimiter(window_seconds=venue.rate_limit_window_seconds)
    client = VenueRESTClient(
        api_url=venue.base_url,
        api_key=credentials.api_key,
        api_secret=credentials.api_secret,
        recv_window_ms=venue.recv_window_ms,
        request_timeout=venue.request_timeout,
        rate_limiter=rate_limiter,
        request_format=PairFormat(
            delimiter=venue.request_pair_format.delimiter,
            uppercase=venue.request_pair_format.uppercase,
        ),
        quote_assets=venue.quote_assets,
        venue_name=venue.name,
    )
    return VenueSession(config=config, client=client, store=OrderbookStore(), rate_limiter=rate_limiter)


__all__ = [
    "bootstrap",
    "CredentialBootstrapError",
    "VenueSession",
]
