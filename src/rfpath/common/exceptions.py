"""
Error types raised by the rfpath engine.

Every failure is surfaced to the immediate caller; nothing is recovered
internally.
"""


class RFPathError(Exception):
    """Base class for all rfpath errors"""


class InvalidInputError(RFPathError, ValueError):
    """
    Malformed input: bad grid locator, non-finite or out-of-range
    coordinates, non-positive frequency, mismatched parallel arrays.
    """


class DegenerateGeometryError(RFPathError, ValueError):
    """
    Zero-length geometry where a calculation has no finite answer
    (FSPL at zero distance, Fresnel radius with d1 + d2 = 0).
    """


class ProviderFailure(RFPathError):
    """
    Elevation lookup failed (network error, bad status, malformed response).

    The underlying exception, when there is one, is chained as __cause__.
    """

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code
