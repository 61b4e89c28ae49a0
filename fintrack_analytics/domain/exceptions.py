"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class DataAccessError(DomainException):
    """Ledger store is unreachable or a query failed"""

    pass


class InputError(DomainException):
    """Unsupported analytics input, e.g. an unknown period"""

    pass


class OrchestrationError(DomainException):
    """Joining the analytics sections failed unexpectedly"""

    pass
