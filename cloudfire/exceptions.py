"""Custom exception classes for the storage engine."""


class CloudFireException(Exception):
    """
    Base exception class for all engine errors.
    """
    pass


class DuplicateIdentityError(CloudFireException):
    """
    Raised when attempting to register a username that already exists.
    """
    pass


class AccountDisabledError(CloudFireException):
    """
    Raised when the credentials are valid but the account was deactivated.
    """
    pass


class InvalidCredentialsError(CloudFireException):
    """
    Raised by the login flow when username or password do not match.
    """
    pass


class InvalidAPIKeyError(CloudFireException):
    """
    Raised when an API Key is missing or unknown.
    """
    pass


class NotFoundError(CloudFireException):
    """
    Raised by strict operations that reference a missing user, file or folder.
    """
    pass


class UnauthorizedAccessError(CloudFireException):
    """
    Raised when a user touches an entity they don't own or an admin-only operation.
    """
    pass


class ValidationError(CloudFireException):
    """
    Raised when an operation receives arguments that break a record invariant.
    """
    pass


class StoreUnavailableError(CloudFireException):
    """
    Raised when the persistent store cannot be opened or a collection operation
    fails for infrastructure reasons.
    """
    pass
