"""Domain errors raised by services and storage, mapped to HTTP responses in main."""
from __future__ import annotations

from decimal import Decimal


class ShopError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ShopError):
    status_code = 400


class NotFoundError(ShopError):
    status_code = 404


class InsufficientStockError(ShopError):
    status_code = 400

    def __init__(self, product_name: str, requested: int, available: int | Decimal | None):
        self.product_name = product_name
        self.requested = int(requested)
        self.available = int(available or 0)
        super().__init__(
            f"Insufficient stock for {product_name}: requested {self.requested}, available {self.available}"
        )


class PersistenceError(ShopError):
    status_code = 500

    def __init__(self, message: str = "Storage failure. Please try again later."):
        super().__init__(message)


class AuthorizationError(ShopError):
    status_code = 401

    def __init__(self, message: str = "Incorrect password"):
        super().__init__(message)
