"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Attempted mutation was rejected; caller must not apply it"""

    pass


class MinimumSegmentError(ValidationError):
    """A plan must keep at least one payment segment"""

    pass


class SegmentIndexError(ValidationError):
    """Segment index is outside the current list"""

    pass


class InvalidSegmentFieldError(ValidationError):
    """Unknown segment field or a value that cannot be coerced for it"""

    pass


class DataFetchError(DomainException):
    """Plan store returned an error or is unavailable"""

    pass
