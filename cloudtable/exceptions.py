"""
Client-side exceptions for cloudtable.

All errors are raised synchronously at the call that detects them.
"""

from typing import Optional


class StorageClientError(Exception):
    """Base exception for storage client errors."""

    def __init__(self, message: str, error_code: str = "StorageClientError"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class InvalidOperationError(StorageClientError):
    """Raised when an operation is not supported by the current credentials."""

    def __init__(
        self,
        message: str = "Cannot create Shared Access Signature unless Account Key credentials are used.",
    ):
        super().__init__(message, "CannotCreateSASWithoutAccountKey")


class MultipleCredentialsProvidedError(StorageClientError, ValueError):
    """Raised when credentials embedded in a URI disagree with explicit ones."""

    def __init__(
        self,
        message: str = "Cannot provide credentials as part of the address and as constructor parameter. "
                       "Either pass in the address or use a different constructor.",
    ):
        super().__init__(message, "MultipleCredentialsProvided")


class MissingArgumentError(StorageClientError, ValueError):
    """Raised when a required argument is None."""

    def __init__(self, argument_name: str, message: Optional[str] = None):
        self.argument_name = argument_name
        super().__init__(
            message or f"Value for argument '{argument_name}' cannot be None",
            "ArgumentNull",
        )


class MissingCredentialsError(MissingArgumentError):
    """Raised when a table address carries no SAS and no credentials were given."""

    def __init__(self, message: str = "No credentials provided and the address carries no Shared Access Signature"):
        super().__init__("credentials", message)
        self.error_code = "MissingCredentials"


class InvalidUriError(StorageClientError, ValueError):
    """Raised when a resource address cannot be parsed."""

    def __init__(self, message: str = "Invalid resource address"):
        super().__init__(message, "InvalidUri")
