from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from cryptofiend.currency import CurrencyPair
from cryptofiend.orderbook.models import OrderbookLevel, OrderbookSnapshot


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderType(str, Enum):
    LIMIT = "LIMIT"
    MARKET = "MARKET"
    STOP_LOSS = "STOP_LOSS"
    STOP_LOSS_LIMIT = "STOP_LOSS_LIMIT"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_LIMIT = "TAKE_PROFIT_LIMIT"
    LIMIT_MAKER = "LIMIT_MAKER"


class TimeInForce(str, Enum):
    GTC = "GTC"
    IOC = "IOC"
    FOK = "FOK"


def format_decimal(value: Any) -> str:
    """Plain (non-scientific) decimal text as the venue expects it."""
    return format(Decimal(str(value)), "f")


@dataclass
class ErrorInfo:
    code: int
    message: str

    @classmethod
    def from_payload(cls, payload: Any) -> "ErrorInfo":
        """
        Reads the venue's ``{"code": ..., "msg": ...}`` envelope. Raises ValueError
        when the payload does not have that shape.
        """
        if not isinstance(payload, dict) or "code" not in payload:
            raise ValueError("error envelope must be an object with a 'code' field")
        message = payload.get("msg", payload.get("message"))
        if not isinstance(message, str):
            raise ValueError("error envelope must carry a string message")
        code = payload["code"]
        if isinstance(code, bool) or not isinstance(code, int):
            raise ValueError("error envelope code must be an integer")
        return cls(code=code, message=message)


@dataclass
class SymbolInfo:
    symbol: str
    base_asset: str
    quote_asset: str
    status: str

    @property
    def pair(self) -> CurrencyPair:
        return CurrencyPair(self.base_asset, self.quote_asset)


@dataclass
class ExchangeInfo:
    timezone: str
    server_time: Optional[int]
    symbols: List[SymbolInfo]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ExchangeInfo":
        symbols = [
            SymbolInfo(
                symbol=item["symbol"],
                base_asset=item["baseAsset"],
                quote_asset=item["quoteAsset"],
                status=str(item.get("status") or "unknown"),
            )
            for item in payload.get("symbols") or []
        ]
        return cls(
            timezone=str(payload.get("timezone") or "UTC"),
            server_time=payload.get("serverTime"),
            symbols=symbols,
        )

    def symbol_entries(self) -> List[Tuple[str, CurrencyPair]]:
        return [(info.symbol, info.pair) for info in self.symbols]


def _parse_levels(rows: Any) -> Tuple[OrderbookLevel, ...]:
    # Each row is [price, quantity] as strings; extra trailing fields are ignored.
    return tuple(OrderbookLevel.from_raw(row[0], row[1]) for row in rows or [])


def parse_depth(payload: Dict[str, Any], pair: CurrencyPair) -> OrderbookSnapshot:
    """Builds a snapshot from a depth response, keeping the venue's level order."""
    last_update_id = payload.get("lastUpdateId")
    return OrderbookSnapshot(
        pair=pair,
        bids=_parse_levels(payload.get("bids")),
        asks=_parse_levels(payload.get("asks")),
        last_update_id=int(last_update_id) if last_update_id is not None else None,
    )


@dataclass
class OrderRequest:
    symbol: str
    side: OrderSide
    type: OrderType
    quantity: Decimal
    price: Optional[Decimal] = None
    time_in_force: Optional[TimeInForce] = TimeInForce.GTC
    new_client_order_id: Optional[str] = None
    stop_price: Optional[Decimal] = None
    iceberg_qty: Optional[Decimal] = None
    # Send to the test endpoint: validated by the venue but never matched.
    validate_only: bool = False

    def to_params(self) -> Dict[str, str]:
        params = {
            "symbol": self.symbol,
            "side": OrderSide(self.side).value,
            "type": OrderType(self.type).value,
        }
        if self.time_in_force is not None:
            params["timeInForce"] = TimeInForce(self.time_in_force).value
        params["quantity"] = format_decimal(self.quantity)
        if self.price is not None:
            params["price"] = format_decimal(self.price)
        if self.new_client_order_id:
            params["newClientOrderId"] = self.new_client_order_id
        if self.stop_price:
            params["stopPrice"] = format_decimal(self.stop_price)
        if self.iceberg_qty:
            params["icebergQty"] = format_decimal(self.iceberg_qty)
        params["newOrderRespType"] = "ACK"
        return params
