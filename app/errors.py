"""Domain errors surfaced at the request boundary."""


class RestaurantError(Exception):
    """Base error carrying the status code it is rendered with."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RestaurantError):
    """Missing, malformed, unexpected or out-of-policy request data."""

    status_code = 400


class NotFoundError(RestaurantError):
    """A reservation or table id that does not resolve."""

    status_code = 404


class ConflictError(RestaurantError):
    """Request conflicts with the current state of a reservation or table."""

    status_code = 400


class MethodNotAllowedError(RestaurantError):
    """Unsupported verb on a known route."""

    status_code = 405

    def __init__(self, method: str, path: str):
        super().__init__(f"{method} not allowed for {path}")
        self.method = method
        self.path = path
