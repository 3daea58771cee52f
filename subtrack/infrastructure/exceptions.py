"""
Custom Exceptions for SubTrack

Hierarchical exception classes for proper error handling across layers.
"""

from typing import Optional, Dict, Any


class SubTrackError(Exception):
    """Base exception for all SubTrack errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


# =============================================================================
# Domain validation
# =============================================================================

class ValidationError(SubTrackError):
    """Raised when input validation fails."""
    pass


class InvalidMoneyError(ValidationError):
    """Raised when a money amount or multiplier is invalid."""
    pass


class CurrencyMismatchError(ValidationError):
    """Raised when operating on money values with different currencies."""

    def __init__(self, left: str, right: str):
        super().__init__(
            "Cannot operate with different currencies",
            details={"left": left, "right": right},
        )


class InvalidBillingCycleError(ValidationError):
    """Raised when a billing cycle literal is not recognised."""

    def __init__(self, value: Any):
        super().__init__(
            f"Invalid billing cycle: {value!r}",
            details={"value": str(value)},
        )


class InvalidCurrencyError(ValidationError):
    """Raised when a currency code is not supported."""

    def __init__(self, value: Any):
        super().__init__(
            f"Unsupported currency: {value!r}",
            details={"value": str(value)},
        )


class InvalidSubscriptionStatusError(ValidationError):
    """Raised when a subscription status literal is not recognised."""

    def __init__(self, value: Any):
        super().__init__(
            f"Invalid subscription status: {value!r}",
            details={"value": str(value)},
        )


class InvalidSubscriptionNameError(ValidationError):
    """Raised when a subscription name is empty."""

    def __init__(self):
        super().__init__("Subscription name is invalid")


class InvalidTrialPeriodError(ValidationError):
    """Raised when a trial period is missing or ends before the start date."""

    def __init__(self, message: str = "Trial end date must be after start date"):
        super().__init__(message)


# =============================================================================
# Persistence
# =============================================================================

class DatabaseError(SubTrackError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class BatchUpdateError(DatabaseError):
    """Raised when a batch write fails; no member of the batch is persisted."""

    def __init__(
        self,
        message: str,
        subscription_id: Optional[Any] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message,
            operation="update_many",
            table="subscriptions",
            original_error=original_error,
        )
        if subscription_id is not None:
            self.details["subscription_id"] = str(subscription_id)


# =============================================================================
# Notifications / configuration
# =============================================================================

class NotificationError(SubTrackError):
    """Raised when a notification transport fails outright."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details, original_error)


class ConfigurationError(SubTrackError):
    """Raised when configuration is missing or invalid."""

    def __init__(
        self,
        message: str,
        missing_keys: Optional[list] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if missing_keys:
            details["missing_keys"] = missing_keys
        super().__init__(message, details, original_error)
