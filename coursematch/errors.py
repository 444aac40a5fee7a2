class MatchingError(Exception):
    """Base class for every error raised by coursematch."""

    pass


class UnknownEntityError(MatchingError):
    """Raised when an operation references an entity that is not part of the problem."""

    pass


class InvalidCapacityError(MatchingError):
    """Raised when an entity is created with a capacity it can never use."""

    pass


class DuplicatePreferenceError(MatchingError):
    """Raised when the same target is added twice to one preference list."""

    pass


class InvalidOrientationError(MatchingError):
    """Raised when a solve is requested for an unknown proposing side."""

    pass


class ProblemFormatError(MatchingError):
    """Raised when an input table or request body cannot be turned into a problem."""

    pass


# Mapping of custom exceptions to HTTP status codes
CUSTOM_ERRORS = {
    UnknownEntityError: 422,
    InvalidCapacityError: 400,
    DuplicatePreferenceError: 400,
    InvalidOrientationError: 400,
    ProblemFormatError: 400,
}
