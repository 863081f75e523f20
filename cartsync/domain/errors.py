# cartsync/domain/errors.py


class CartError(Exception):
    """Base error of cart operations."""

    reason = "cart_error"


class CartApiError(CartError):
    """Remote cart service call failed (transport or HTTP status)."""

    reason = "remote_error"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidQuantityError(CartError):
    reason = "invalid_quantity"


class CartStorageError(CartError):
    reason = "storage_error"


class CartRefreshError(CartApiError):
    """Command reached the remote service but the cart could not be fetched afterwards."""

    reason = "refresh_failed"
