"""Exception types raised by the evidence engine."""


class TruthTrollersError(Exception):
    """Base class for evidence engine errors."""


class InvalidClaimsError(TruthTrollersError, ValueError):
    """Raised when a request contains no usable claims."""

    def __init__(self, message: str = "Missing claims[]") -> None:
        super().__init__(message)
