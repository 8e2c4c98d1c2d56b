class UnauthorizedError(Exception):
    """Raised when user is not authorized (HTTP 401)."""
    def __init__(self, message="Unauthorized"):
        super().__init__(message)


class BadRequestError(Exception):
    """Raised on bad request (HTTP 400)."""
    def __init__(self, message="Bad Request"):
        super().__init__(message)


class InternalServerError(Exception):
    """Raised for internal errors (HTTP 500)."""
    def __init__(self, message="Internal Server Error"):
        super().__init__(message)


class ChartError(Exception):
    """Base class for chart rendering failures. Never fatal to the page."""
    def __init__(self, message="Chart error"):
        super().__init__(message)


class MountError(ChartError):
    """Raised when a pane cannot allocate its surface (e.g. zero-width container)."""
    def __init__(self, message="Pane could not be mounted"):
        super().__init__(message)


class PaneStateError(ChartError):
    """Raised when a pane operation is called in the wrong lifecycle state."""
    def __init__(self, message="Invalid pane state"):
        super().__init__(message)
