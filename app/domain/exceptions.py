from __future__ import annotations


class FormFillError(Exception):
    """Base error for the form-fill pipeline. Never caught or retried inside it."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(FormFillError):
    """Raised when a record lookup returns no match."""


class NetworkError(FormFillError):
    """Raised on LLM transport failure, timeout or non-success HTTP status."""


class DeserializationError(FormFillError):
    """Raised when the LLM response body is not the expected JSON shape."""


class StorageError(FormFillError):
    """Raised when the artifact store rejects a file write or link creation."""
