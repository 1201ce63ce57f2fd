# src/cryptofiend/orderbook/exceptions.py

class OrderbookError(Exception):
    """Base exception for the orderbook module."""
    pass

class PrimaryCurrencyNotFoundError(OrderbookError):
    """Raised when no order book has been stored for the base currency."""
    def __init__(self, base: str):
        self.base = base
        message = f"Primary currency '{base}' for orderbook not found."
        super().__init__(message)

class SecondaryCurrencyNotFoundError(OrderbookError):
    """Raised when the base currency is known but the quote currency is not."""
    def __init__(self, base: str, quote: str):
        self.base = base
        self.quote = quote
        message = f"Secondary currency for orderbook not found: {base}-{quote}."
        super().__init__(message)
