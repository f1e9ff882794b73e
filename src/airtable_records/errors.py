"""Exception classes raised by the Airtable records client."""

from __future__ import annotations


class AirtableError(Exception):
    """Base exception for Airtable record operations."""


class ValidationError(AirtableError):
    """Raised for local precondition failures, before any request is sent."""


class RemoteApiError(AirtableError):
    """Raised when Airtable answers with a non-2xx status."""

    def __init__(self, action: str, status: int, body: str):
        super().__init__(f"Failed to {action}: {status} - {body}")
        self.action = action
        self.status = status
        self.body = body


class TransportError(AirtableError):
    """Raised when the request never got an HTTP answer (connection, TLS, timeout)."""


class DecodeError(AirtableError):
    """Raised when a successful response body is not the JSON we expect."""
