"""Custom exceptions for the point-of-sale application."""


class PosError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def kind(self):
        return type(self).__name__

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        rv['error'] = self.kind
        return rv


class ValidationError(PosError):
    """Request rejected before it reaches the durable store."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class NotFoundError(PosError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class StockConflictError(PosError):
    """Raised when a line asks for more units than are currently in stock."""
    def __init__(self, product_name, requested, available, product_id=None):
        message = f"Insufficient stock for {product_name}: requested {requested}, available {available}"
        payload = {
            'product_id': product_id,
            'requested': requested,
            'available': available,
        }
        super().__init__(message, 409, payload)
        self.product_id = product_id
        self.requested = requested
        self.available = available


class PersistenceError(PosError):
    """The atomic commit itself failed; the caller may retry."""
    def __init__(self, message="The sale could not be saved, please try again"):
        super().__init__(message, 503)


class UnauthorizedError(PosError):
    """Raised when a user is not logged in or lacks permission for an action."""
    def __init__(self, message="Unauthorized access", status_code=403):
        super().__init__(message, status_code)
