"""
Custom Exceptions - Application-specific error types
"""


class HabitHelperException(Exception):
    """Base exception for all habit helper errors"""
    pass


class HabitNotFoundError(HabitHelperException):
    """Raised when a habit cannot be found"""
    pass


class RecordNotFoundError(HabitHelperException):
    """Raised when a habit record cannot be found in today's records"""
    pass


class RecordPendingError(HabitHelperException):
    """Raised when undoing a record whose create is still in flight"""
    pass


class InvalidHabitDataError(HabitHelperException):
    """Raised when habit data validation fails"""
    pass


class DatabaseError(HabitHelperException):
    """Raised when store operations fail"""
    pass


class StoreTimeoutError(DatabaseError):
    """Raised when a store call exceeds the configured timeout"""
    pass


class ExternalServiceError(HabitHelperException):
    """Raised when external services (OpenAI, etc.) fail"""
    pass


class PushSubscriptionError(HabitHelperException):
    """Raised when push subscription changes fail"""
    pass


class PushPermissionError(PushSubscriptionError):
    """Raised when the user denied notification permission"""
    pass


class PushUnsupportedError(PushSubscriptionError):
    """Raised when the browser cannot provide a push subscription"""
    pass


class PushConfigurationError(PushSubscriptionError):
    """Raised when the server is missing push configuration (VAPID key)"""
    pass
