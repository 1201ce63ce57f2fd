# src/cryptofiend/connection/rest_client.py

import copy
import hashlib
import hmac
import logging
import urllib.parse
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

import requests

from cryptofiend.currency import (
    CurrencyPair,
    PairFormat,
    UnknownSymbolError,
    VenueSymbolMap,
    split_concatenated,
)
from cryptofiend.logging_config import structured_log_extra
from cryptofiend.orderbook.models import OrderbookSnapshot
from .exceptions import (
    MalformedErrorResponseError,
    MalformedResponseError,
    NoCredentialsError,
    TransportError,
    VenueError,
)
from .models import ErrorInfo, ExchangeInfo, OrderRequest, parse_depth
from .rate_limiter import RateLimiter
from .timestamps import TimestampGenerator

logger = logging.getLogger(__name__)

BINANCE_API_URL = "https://www.binance.com/"
EXCHANGE_INFO_PATH = "api/v1/exchangeInfo"
SERVER_TIME_PATH = "api/v1/time"
DEPTH_PATH = "api/v1/depth"
ACCOUNT_PATH = "api/v3/account"
OPEN_ORDERS_PATH = "api/v3/openOrders"
ORDER_PATH = "api/v3/order"
ORDER_TEST_PATH = "api/v3/order/test"

API_KEY_HEADER = "X-MBX-APIKEY"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
DEFAULT_RECV_WINDOW_MS = 5000
DEFAULT_REQUEST_FORMAT = PairFormat(delimiter="", uppercase=True)
DEFAULT_QUOTE_ASSETS = ("USDT", "BUSD", "USDC", "TUSD", "BTC", "ETH", "BNB")

Params = Union[Dict[str, Any], Sequence[Tuple[str, Any]], None]
T = TypeVar("T")


def sign_payload(secret: str, payload: str) -> str:
    """Hex-encoded HMAC-SHA256 of ``payload`` keyed with the API secret."""
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


class VenueRESTClient:
    """
    Signed, rate-limited REST client for one venue.

    Public calls go straight out; signed calls get ``timestamp``/``recvWindow``
    appended, an HMAC-SHA256 ``signature`` over the whole query string, and the
    API key in the ``X-MBX-APIKEY`` header. Venue error codes are raised as
    :class:`VenueError` with the venue's code and message untouched.
    """
    def __init__(
        self,
        api_url: str = BINANCE_API_URL,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        recv_window_ms: int = DEFAULT_RECV_WINDOW_MS,
        request_timeout: float = 10.0,
        rate_limiter: Optional[RateLimiter] = None,
        request_format: PairFormat = DEFAULT_REQUEST_FORMAT,
        symbol_map: Optional[VenueSymbolMap] = None,
        timestamps: Optional[TimestampGenerator] = None,
        quote_assets: Iterable[str] = DEFAULT_QUOTE_ASSETS,
        venue_name: str = "binance",
    ):
        self.api_url = api_url if api_url.endswith("/") else api_url + "/"
        self.api_key = api_key
        self.api_secret = api_secret
        self.recv_window_ms = recv_window_ms
        self.request_timeout = request_timeout
        self.venue_name = venue_name
        # Each client owns its limiter unless one is shared deliberately.
        self.rate_limiter = rate_limiter or RateLimiter()
        self.symbol_map = symbol_map or VenueSymbolMap(request_format)
        self.timestamps = timestamps or TimestampGenerator()
        self.quote_assets = tuple(quote_assets)

        self.session = requests.Session()
        self.session.headers.update(
            {"User-Agent": "cryptofiend/0.1.0", "Accept": "application/json"}
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_secret)

    def _generate_signature(self, payload: str) -> str:
        if not self.api_secret:
            raise NoCredentialsError("API secret is required for signing requests.")
        return sign_payload(self.api_secret, payload)

    def _encode_payload(self, params: Params, signed: bool) -> str:
        payload = urllib.parse.urlencode(params or {}, doseq=True)
        if not signed:
            return payload

        time_window = urllib.parse.urlencode(
            [("timestamp", self.timestamps.generate()), ("recvWindow", self.recv_window_ms)]
        )
        payload = f"{payload}&{time_window}" if payload else time_window
        return f"{payload}&signature={self._generate_signature(payload)}"

    def send_request(
        self,
        method: str,
        path: str,
        params: Params = None,
        signed: bool = False,
        parse: Optional[Callable[[Any], Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Sends one request and returns the decoded JSON body, passed through ``parse``
        when given.

        Raises NoCredentialsError before any I/O when ``signed`` and no key/secret is
        configured, TransportError when the HTTP call fails, MalformedResponseError /
        MalformedErrorResponseError when a body cannot be decoded, and VenueError for
        any non-2xx response with a readable error envelope.
        """
        method = method.upper()
        if signed and not self.has_credentials:
            raise NoCredentialsError(
                f"API key and secret are required for authenticated {self.venue_name} requests."
            )

        headers: Dict[str, str] = {}
        payload = self._encode_payload(params, signed)
        if signed:
            headers[API_KEY_HEADER] = self.api_key

        url = self.api_url + path
        timeout = self.request_timeout if timeout is None else timeout
        endpoint = method + path
        logger.debug(
            "Sending %s %s (signed=%s)", method, path, signed,
            extra=structured_log_extra(event="request_sent", venue=self.venue_name, endpoint=endpoint),
        )

        try:
            if method == "GET":
                target = f"{url}?{payload}" if payload else url
                response = self.session.get(target, headers=headers, timeout=timeout)
            else:
                headers["Content-Type"] = FORM_CONTENT_TYPE
                response = self.session.request(method, url, data=payload, headers=headers, timeout=timeout)
        except requests.exceptions.RequestException as e:
            logger.warning(
                "Transport failure for %s: %s", endpoint, e,
                extra=structured_log_extra(event="transport_error", venue=self.venue_name, endpoint=endpoint),
            )
            raise TransportError(f"Network Error: {e}") from e

        status_code = response.status_code
        if 200 <= status_code <= 299:
            return self._decode_success(response, parse, endpoint)

        try:
            error_info = ErrorInfo.from_payload(response.json())
        except ValueError as e:
            logger.warning(
                "Undecodable error response for %s (HTTP %s)", endpoint, status_code,
                extra=structured_log_extra(event="malformed_error_response", venue=self.venue_name, endpoint=endpoint),
            )
            raise MalformedErrorResponseError(
                f"failed to unmarshal error info (HTTP {status_code})",
                status_code=status_code,
                body=response.text,
            ) from e

        logger.warning(
            "Venue rejected %s: [%s] %s", endpoint, error_info.code, error_info.message,
            extra=structured_log_extra(
                event="venue_error", venue=self.venue_name, endpoint=endpoint,
                venue_code=error_info.code, status_code=status_code,
            ),
        )
        raise VenueError(error_info.code, error_info.message, status_code=status_code)

    def _decode_success(self, response, parse, endpoint: str) -> Any:
        try:
            result = response.json()
            return parse(result) if parse is not None else result
        except (ValueError, KeyError, TypeError, IndexError, ArithmeticError) as e:
            logger.warning(
                "Undecodable response for %s: %s", endpoint, e,
                extra=structured_log_extra(event="malformed_response", venue=self.venue_name, endpoint=endpoint),
            )
            raise MalformedResponseError(
                "failed to unmarshal response",
                status_code=response.status_code,
                body=response.text,
            ) from e

    def send_rate_limited(
        self,
        budget: int,
        method: str,
        path: str,
        params: Params,
        default: T,
        parse: Optional[Callable[[Any], T]] = None,
        timeout: Optional[float] = None,
    ) -> T:
        """
        Signed request throttled per ``method + path``.

        While the endpoint's budget for the current window lasts the call goes to
        the network; once exhausted a copy of ``default`` is returned instead, with
        no request and no error. The slot is consumed on admission, whatever the
        outcome of the request.
        """
        key = method.upper() + path
        if not self.rate_limiter.try_acquire(key, budget):
            logger.info(
                "Rate limit budget of %d exhausted for %s; returning default", budget, key,
                extra=structured_log_extra(event="rate_limit_degraded", venue=self.venue_name, endpoint=key),
            )
            return copy.deepcopy(default)
        return self.send_request(method, path, params, signed=True, parse=parse, timeout=timeout)

    # Symbol translation

    def to_venue_symbol(self, pair: CurrencyPair) -> str:
        return self.symbol_map.to_symbol(pair)

    def from_venue_symbol(self, symbol: str) -> CurrencyPair:
        return self.symbol_map.to_pair(symbol)

    def _resolve_pair(self, symbol: str) -> CurrencyPair:
        try:
            return self.from_venue_symbol(symbol)
        except UnknownSymbolError:
            pair = split_concatenated(symbol, self.quote_assets)
            if pair is None:
                raise
            return pair

    def load_symbols(self, info: Optional[ExchangeInfo] = None) -> int:
        """Populates the symbol map from the venue's instrument list. Returns the count."""
        if info is None:
            info = self.fetch_exchange_info()
        return self.symbol_map.load(info.symbol_entries())

    # Public endpoints

    def fetch_exchange_info(self) -> ExchangeInfo:
        """Current trading rules and symbol information."""
        return self.send_request("GET", EXCHANGE_INFO_PATH, parse=ExchangeInfo.from_payload)

    def fetch_server_time(self) -> int:
        return self.send_request("GET", SERVER_TIME_PATH, parse=lambda payload: int(payload["serverTime"]))

    def sync_clock(self) -> int:
        """
        Aligns request timestamps with the venue clock, the usual remedy for an
        invalid-timestamp rejection. Returns the applied offset in milliseconds.
        """
        offset = self.timestamps.adjust(self.fetch_server_time())
        logger.info(
            "Request clock offset set to %d ms", offset,
            extra=structured_log_extra(event="clock_synced", venue=self.venue_name, offset_ms=offset),
        )
        return offset

    def fetch_market_data(
        self,
        symbol: str,
        limit: Optional[int] = None,
        pair: Optional[CurrencyPair] = None,
    ) -> OrderbookSnapshot:
        """
        Fetches the order book for ``symbol``.

        ``limit=None`` leaves the depth to the venue default (the parameter is not
        sent at all); ``limit=0`` explicitly asks for the uncapped book, which can
        be very large.
        """
        if limit is not None and limit < 0:
            raise ValueError(f"Depth limit must be None or >= 0, got {limit}")
        if pair is None:
            pair = self._resolve_pair(symbol)

        params: List[Tuple[str, Any]] = [("symbol", symbol)]
        if limit is not None:
            params.append(("limit", limit))
        return self.send_request("GET", DEPTH_PATH, params, parse=lambda payload: parse_depth(payload, pair))

    # Authenticated endpoints

    def fetch_account_info(self) -> Dict[str, Any]:
        return self.send_request("GET", ACCOUNT_PATH, signed=True)

    def fetch_open_orders(self, symbol: Optional[str] = None, budget: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Currently open orders, optionally for one symbol only (cheaper in request weight).
        With ``budget`` the call is throttled and degrades to an empty list.
        """
        params = {"symbol": symbol} if symbol else None
        if budget is not None:
            return self.send_rate_limited(budget, "GET", OPEN_ORDERS_PATH, params, default=[])
        return self.send_request("GET", OPEN_ORDERS_PATH, params, signed=True)

    def post_order_ack(self, order: OrderRequest) -> Dict[str, Any]:
        path = ORDER_TEST_PATH if order.validate_only else ORDER_PATH
        return self.send_request("POST", path, order.to_params(), signed=True)

    def _order_lookup_params(
        self, symbol: str, order_id: Optional[int], client_order_id: Optional[str]
    ) -> Dict[str, Any]:
        if order_id is None and client_order_id is None:
            raise ValueError("Either order_id or client_order_id must be provided.")
        params: Dict[str, Any] = {"symbol": symbol}
        if order_id is not None:
            params["orderId"] = order_id
        if client_order_id is not None:
            params["origClientOrderId"] = client_order_id
        return params

    def fetch_order(
        self, symbol: str, order_id: Optional[int] = None, client_order_id: Optional[str] = None
    ) -> Dict[str, Any]:
        params = self._order_lookup_params(symbol, order_id, client_order_id)
        return self.send_request("GET", ORDER_PATH, params, signed=True)

    def delete_order(
        self, symbol: str, order_id: Optional[int] = None, client_order_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Cancels an active order."""
        params = self._order_lookup_params(symbol, order_id, client_order_id)
        return self.send_request("DELETE", ORDER_PATH, params, signed=True)
