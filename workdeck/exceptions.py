"""
Workdeck exceptions
"""


class WorkdeckError(Exception):
    """Base exception for all workdeck errors"""

    pass


class APIError(WorkdeckError):
    """Raised when a backend request fails (network or HTTP error)"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


# The transport failure class of the error taxonomy.
TransportError = APIError


class NotFoundError(APIError):
    """Raised when a consumer or work record is not found (404)"""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class AuthenticationError(APIError):
    """Raised when authentication fails (401/403)"""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message, status_code=status_code)


class WaitTimeoutError(WorkdeckError):
    """Raised when a wait deadline passes before the condition is met"""

    def __init__(self, message: str, polls: int = 0):
        super().__init__(message)
        self.polls = polls


class ValidationError(WorkdeckError):
    """Raised for empty or invalid user input"""

    pass


class ClipboardError(WorkdeckError):
    """Raised when the system clipboard is unavailable"""

    pass
