"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException, ValueError):
    """Input is missing, malformed or outside its allowed range.

    Also raised when a ratio would divide by zero (zero income, zero vehicle value).
    """

    pass


class InvalidCreditAmountError(InvalidInputError):
    """Money amount is missing, non-positive or otherwise unusable"""

    pass


class InvalidApplicationStateError(DomainException):
    """Requested status transition is not allowed from the current status"""

    pass


class CreditBureauError(DomainException):
    """Credit bureau returned an error or is unavailable"""

    pass
