"""Typed client for the Airtable records REST API."""

from .client import MAX_RECORDS_PER_BATCH, AirtableClient
from .errors import AirtableError, DecodeError, RemoteApiError, TransportError, ValidationError
from .models import FetchType, Page, Record

__all__ = [
    "AirtableClient",
    "MAX_RECORDS_PER_BATCH",
    "Record",
    "Page",
    "FetchType",
    "AirtableError",
    "ValidationError",
    "RemoteApiError",
    "TransportError",
    "DecodeError",
]
