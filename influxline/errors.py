"""Exception types shared by the line-protocol modules."""

POINT_MUST_HAVE_A_FIELD = "point without fields is unsupported"
INVALID_NUMBER = "invalid number"
INVALID_POINT = "point is invalid"


class PointError(ValueError):
    """Raised when a point cannot be built, parsed or decoded."""


class ShortBufferError(PointError):
    """Raised when a binary point encoding ends too early."""

    def __init__(self, message: str = "short buffer") -> None:
        super().__init__(message)