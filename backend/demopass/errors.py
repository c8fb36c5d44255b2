"""
Error taxonomy shared by the services and the API layer.

Services raise these; exception handlers registered in main.py turn them
into the JSON envelope with the matching HTTP status.
"""


class DemoPassError(Exception):
    """Base class for client-facing errors."""

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DemoPassError):
    """Malformed or missing input."""

    status_code = 400


class NotFoundError(DemoPassError):
    """A referenced entity does not exist."""

    status_code = 404


class ConflictError(DemoPassError):
    """A uniqueness rule would be violated."""

    status_code = 409
