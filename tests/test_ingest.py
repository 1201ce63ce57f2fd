from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from cryptofiend.connection.exceptions import TransportError, VenueError
from cryptofiend.connection.rest_client import VenueRESTClient
from cryptofiend.currency import CurrencyPair
from cryptofiend.market_data.ingest import refresh_orderbook, refresh_orderbooks
from cryptofiend.orderbook import MARGIN, SPOT, OrderbookLevel, OrderbookSnapshot, OrderbookStore


def _book(pair: CurrencyPair, price: str = "10") -> OrderbookSnapshot:
    return OrderbookSnapshot(pair=pair, bids=[OrderbookLevel(Decimal(price), Decimal("1"))])


@pytest.fixture
def client():
    client = VenueRESTClient()
    client.fetch_market_data = MagicMock(side_effect=lambda symbol, limit, pair: _book(pair))
    return client


def test_refresh_orderbook_fetches_then_upserts(client):
    store = OrderbookStore()
    pair = CurrencyPair("btc", "usdt")

    snapshot = refresh_orderbook(client, store, pair, book_type=MARGIN, limit=20)

    client.fetch_market_data.assert_called_once_with("BTCUSDT", 20, pair=pair)
    assert store.has_pair("BTC", "USDT")
    assert store.get("BTC", "USDT", MARGIN) == snapshot
    assert snapshot.last_updated is not None


def test_refresh_orderbook_does_not_hold_store_lock_during_fetch():
    store = OrderbookStore()
    pair = CurrencyPair("ETH", "BTC")
    client = VenueRESTClient()

    def fetch(symbol, limit, pair):
        # Fails with a deadlock if the store lock were held around the network call.
        assert not store.has_base("ETH")
        return _book(pair)

    client.fetch_market_data = MagicMock(side_effect=fetch)

    refresh_orderbook(client, store, pair)
    assert store.has_base("ETH")


def test_refresh_orderbook_propagates_errors():
    store = OrderbookStore()
    client = VenueRESTClient()
    client.fetch_market_data = MagicMock(side_effect=TransportError("Network Error: down"))

    with pytest.raises(TransportError):
        refresh_orderbook(client, store, CurrencyPair("BTC", "USDT"))
    assert not store.has_base("BTC")


def test_refresh_orderbooks_collects_failures(client):
    store = OrderbookStore()
    good = [CurrencyPair("BTC", "USDT"), CurrencyPair("ETH", "USDT")]
    bad = CurrencyPair("LTC", "BTC")

    def fetch(symbol, limit, pair):
        if pair == bad:
            raise VenueError(-1121, "Invalid symbol.", status_code=400)
        return _book(pair)

    client.fetch_market_data = MagicMock(side_effect=fetch)

    failures = refresh_orderbooks(client, store, good + [bad], max_workers=2)

    assert list(failures) == [bad]
    assert failures[bad].code == -1121
    for pair in good:
        assert store.get_pair(pair, SPOT).best_bid.price == Decimal("10")
    assert not store.has_base("LTC")


def test_refresh_orderbooks_with_no_pairs(client):
    assert refresh_orderbooks(client, OrderbookStore(), []) == {}
    client.fetch_market_data.assert_not_called()
