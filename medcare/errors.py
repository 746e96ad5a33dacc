"""Exceptions raised by handlers and services, rendered as JSON by main.py."""


class ApiError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request data"


class InsufficientStock(ValidationError):
    """Raised when a product cannot cover the requested quantity."""

    def __init__(self, product_name, message=None):
        super().__init__(message or f"Insufficient quantity available for {product_name}")
        self.product_name = product_name


class InvalidTransition(ValidationError):
    def __init__(self, current, target):
        super().__init__(f"Cannot change order status from {current} to {target}")
        self.current = current
        self.target = target


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Not authorized, no token"


class Forbidden(ApiError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found"
