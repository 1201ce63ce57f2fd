# src/cryptofiend/market_data/ingest.py

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Optional

from cryptofiend.connection.rest_client import VenueRESTClient
from cryptofiend.currency import CurrencyPair
from cryptofiend.logging_config import structured_log_extra
from cryptofiend.orderbook.models import SPOT, OrderbookSnapshot
from cryptofiend.orderbook.store import OrderbookStore

logger = logging.getLogger(__name__)


def refresh_orderbook(
    client: VenueRESTClient,
    store: OrderbookStore,
    pair: CurrencyPair,
    book_type: str = SPOT,
    limit: Optional[int] = None,
) -> OrderbookSnapshot:
    """
    Fetches the venue's book for ``pair`` and stores it.

    The network call completes before the store is touched, so the store lock is
    never held while waiting on I/O. Errors propagate; retrying is up to the caller.
    """
    snapshot = client.fetch_market_data(client.to_venue_symbol(pair), limit, pair=pair)
    store.upsert_pair(pair, book_type, snapshot)
    return store.get_pair(pair, book_type)


def refresh_orderbooks(
    client: VenueRESTClient,
    store: OrderbookStore,
    pairs: Iterable[CurrencyPair],
    book_type: str = SPOT,
    limit: Optional[int] = None,
    max_workers: Optional[int] = None,
) -> Dict[CurrencyPair, Exception]:
    """
    Refreshes several books in parallel, one worker per pair.

    Returns the pairs that failed mapped to their exception; an empty dict means
    every book was updated.
    """
    pairs = list(pairs)
    if not pairs:
        return {}

    failures: Dict[CurrencyPair, Exception] = {}
    with ThreadPoolExecutor(max_workers=max_workers or len(pairs)) as executor:
        futures = {
            pair: executor.submit(refresh_orderbook, client, store, pair, book_type, limit)
            for pair in pairs
        }
        for pair, future in futures.items():
            try:
                future.result()
            except Exception as e:  # noqa: BLE001
                failures[pair] = e
                logger.warning(
                    "Failed to refresh %s order book for %s: %s", book_type, pair, e,
                    extra=structured_log_extra(
                        event="orderbook_refresh_failed", venue=client.venue_name, pair=str(pair),
                    ),
                )

    logger.info(
        "Refreshed %d/%d order books", len(pairs) - len(failures), len(pairs),
        extra=structured_log_extra(event="orderbooks_refreshed", venue=client.venue_name),
    )
    return failures
