"""
Error taxonomy for the shop API.

Core operations raise these; main.py maps every ShopError to a JSON body
with the status code carried by the class.
"""


class ShopError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgument(ShopError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(ShopError):
    status_code = 404
    default_message = "Not found"


class InsufficientStock(ShopError):
    status_code = 400
    default_message = "Insufficient stock available"


class EmptyCart(ShopError):
    status_code = 400
    default_message = "Cart is empty"


class ProductGone(ShopError):
    status_code = 400
    default_message = "One or more products no longer exist"


class PaymentFailed(ShopError):
    status_code = 400
    default_message = "Payment failed. Please try again."


class Internal(ShopError):
    status_code = 500
