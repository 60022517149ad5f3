"""
Custom exceptions for the quote engine

This module defines a hierarchy of exceptions used throughout the quote engine
to report invalid input and unquotable orders in a structured way.
"""


class BaseQuoteEngineException(Exception):
    """Base exception class for all quote engine exceptions."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationException(BaseQuoteEngineException):
    """Raised when an entity is missing a required field or its fields are inconsistent."""

    @property
    def field(self):
        """Name of the offending field, if known."""
        return self.details.get("field")


class InsufficientLiquidityException(BaseQuoteEngineException):
    """Raised when the book cannot satisfy an order within its price limit."""
    pass


class PriceOutOfBoundsException(BaseQuoteEngineException):
    """Raised when a price is outside acceptable bounds."""
    pass


class InvalidQuantityException(BaseQuoteEngineException):
    """Raised when quantity or value is invalid (negative, zero, or exceeds limits)."""
    pass


class PairNotFoundException(BaseQuoteEngineException):
    """Raised when a trading pair is not known to the snapshot source."""
    pass
