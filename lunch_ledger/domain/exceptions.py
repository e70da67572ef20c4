"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class SourceUnavailableError(DomainException):
    """Transaction or Preference Source cannot be reached or returned unusable data"""

    pass


class NoActiveUserError(DomainException):
    """No user is signed in; callers treat this as an empty window, not a failure"""

    pass


class InvalidPreferencesError(DomainException):
    """Preference values are outside their valid range (e.g. negative capacity)"""

    pass
