"""Domain errors surfaced to API callers"""


class OrderError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500
    detail = "Internal error"

    def __init__(self, detail: str = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationFailed(OrderError):
    """Bad input, never partially applied"""
    status_code = 422
    detail = "Invalid order request"


class ItemNotFound(ValidationFailed):
    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found")


class InvalidQuantity(ValidationFailed):
    def __init__(self, item_id, quantity: int):
        self.item_id = item_id
        self.quantity = quantity
        super().__init__(f"Quantity for item {item_id} must be positive, got {quantity}")


class EmptyOrder(ValidationFailed):
    detail = "Order must contain at least one item"


class RestaurantNotFound(OrderError):
    status_code = 404
    detail = "Restaurant not found"


class OrderNotFound(OrderError):
    """Missing order, or an order owned by another actor"""
    status_code = 404
    detail = "Order not found"


class NotificationNotFound(OrderError):
    """Missing notification, or one the caller may not delete"""
    status_code = 404
    detail = "Notification not found"


class PaymentNotInitiated(OrderError):
    status_code = 409
    detail = "Payment session has not been created for this order"


class PaymentProviderError(OrderError):
    """Provider unreachable or returned something unusable; safe to retry"""
    status_code = 502
    detail = "Payment provider error"

    def __init__(self, detail: str = None, provider: str = None):
        self.provider = provider
        super().__init__(detail)


class UnknownPaymentStatus(PaymentProviderError):
    def __init__(self, code: str, provider: str = None):
        self.code = code
        super().__init__(f"Unrecognized payment status: {code}", provider=provider)
