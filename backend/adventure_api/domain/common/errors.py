"""Domain error types.

Expected conditions (missing adventure, caller not a participant) are
returned as None/False by the store and service. Exceptions are kept for
the cases a caller cannot recover from in-band.
"""


class DomainError(Exception):
    """Base domain error."""
    pass


class ConflictError(DomainError):
    """Resource conflict error."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
