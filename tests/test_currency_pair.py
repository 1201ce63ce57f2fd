import pytest

from cryptofiend.currency import (
    CurrencyPair,
    CurrencyPairError,
    PairFormat,
    UnknownSymbolError,
    VenueSymbolMap,
    canonical_currency,
    pair_from_text,
    split_concatenated,
)


def test_canonical_currency_folds_case_and_whitespace():
    assert canonical_currency(" BTC ") == "btc"
    assert canonical_currency("uSdT") == "usdt"


def test_display_formats():
    pair = CurrencyPair("btc", "Usdt")

    assert pair.display(PairFormat(delimiter="", uppercase=True)) == "BTCUSDT"
    assert pair.display(PairFormat(delimiter="-", uppercase=False)) == "btc-usdt"
    assert str(pair) == "btc/usdt"


@pytest.mark.parametrize("text", ["BTC/USDT", "btc-usdt", "BTC_USDT", "btc:usdt"])
def test_parse_accepts_common_delimiters(text):
    assert CurrencyPair.parse(text).canonical() == CurrencyPair("btc", "usdt")


def test_parse_rejects_concatenated_text():
    with pytest.raises(CurrencyPairError):
        CurrencyPair.parse("BTCUSDT")


def test_pair_requires_both_legs():
    with pytest.raises(CurrencyPairError):
        CurrencyPair("BTC", "")


def test_split_concatenated_prefers_longest_quote():
    assert split_concatenated("BTCUSDT", ["USD", "USDT"]) == CurrencyPair("BTC", "USDT")
    assert split_concatenated("ethbtc", ["BTC"]) == CurrencyPair("ETH", "BTC")
    assert split_concatenated("USDT", ["USDT"]) is None
    assert split_concatenated("FOOBAR", ["USDT"]) is None


def test_symbol_map_translation():
    symbols = VenueSymbolMap(PairFormat(delimiter="", uppercase=True))
    symbols.load([("BTCUSDT", CurrencyPair("BTC", "USDT"))])

    assert symbols.to_symbol(CurrencyPair("btc", "usdt")) == "BTCUSDT"
    assert symbols.to_pair("BTCUSDT") == CurrencyPair("BTC", "USDT")
    assert "BTCUSDT" in symbols
    assert symbols.symbols() == ["BTCUSDT"]


def test_symbol_map_unknown_symbol():
    symbols = VenueSymbolMap(PairFormat(delimiter="", uppercase=True))

    with pytest.raises(UnknownSymbolError, match="ETHUSDT"):
        symbols.to_pair("ETHUSDT")


def test_symbol_map_to_symbol_is_total_without_loading():
    symbols = VenueSymbolMap(PairFormat(delimiter="-", uppercase=False))
    assert symbols.to_symbol(CurrencyPair("DOGE", "EUR")) == "doge-eur"


def test_symbol_map_lookup_ignores_case():
    symbols = VenueSymbolMap(PairFormat(delimiter="", uppercase=True))
    symbols.load([("BTCUSDT", CurrencyPair("BTC", "USDT"))])

    assert symbols.to_pair("btcusdt") == CurrencyPair("BTC", "USDT")
    assert symbols.to_pair(" BtcUsdt ") == CurrencyPair("BTC", "USDT")
    assert "btcusdt" in symbols


def test_pair_from_text_falls_back_to_quote_suffix():
    assert pair_from_text("btc-usdt") == CurrencyPair("btc", "usdt")
    assert pair_from_text("ETHUSDT", ["USDT"]) == CurrencyPair("ETH", "USDT")
    assert pair_from_text("ETHUSDT") is None
    assert pair_from_text("BTC/") is None
