# Overview: Exception types shared by the service layer and the HTTP routes.

from __future__ import annotations


class StallError(Exception):
    """Base error; `details` is echoed back to API clients."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details}


class ValidationError(StallError, ValueError):
    """400-level input problem (empty cart, bad cost entry, missing customer)."""
    status_code = 400


class NotFoundError(StallError, LookupError):
    """Sale, order line, item, employee or cost entry does not exist."""
    status_code = 404


class StorageError(StallError):
    """Database failure that survived the retry policy."""
    status_code = 503
