"""Domain-level exceptions.

Cart mutations never raise: invalid entries are repaired, not rejected.
The one domain failure is a remote cart that cannot be read
(``RemoteCartError``), which reconciliation turns into a failed result.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class RemoteCartError(DomainException):
    """The remote cart could not be fetched or understood."""
