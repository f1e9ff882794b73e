"""HTTP client for the Airtable records REST API."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode

import requests

from .errors import DecodeError, RemoteApiError, TransportError, ValidationError
from .models import Page, Record

logger = logging.getLogger(__name__)

BASE_URL = "https://api.airtable.com/v0"
MAX_RECORDS_PER_BATCH = 10
DEFAULT_TIMEOUT_SECONDS = 30.0


def _has_text(value: Optional[str]) -> bool:
    return value is not None and bool(str(value).strip())


def _field_params(fields: Optional[Sequence[str]]) -> List[Tuple[str, str]]:
    return [("fields[]", str(name)) for name in (fields or [])]


def _write_body(key: str, value: Any, typecast: bool) -> Dict[str, Any]:
    body: Dict[str, Any] = {key: value}
    # Airtable treats a missing flag as false, so it is only ever sent as true.
    if typecast:
        body["typecast"] = True
    return body


class AirtableClient:
    """Builds authenticated requests and parses Airtable record responses.

    The client keeps no per-call state, so one instance can be shared across
    threads for independent operations. Use it as a context manager (or call
    ``close``) to release the HTTP session it created; an injected session is
    left open for its owner.
    """

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if not _has_text(api_key):
            raise ValidationError("api_key must be a non-empty string")
        self._api_key = api_key.strip()
        self._owns_session = session is None
        self._session = requests.Session() if session is None else session
        self.endpoint = (endpoint or os.getenv("AIRTABLE_API_URL", BASE_URL)).rstrip("/")
        if timeout is None:
            timeout = float(os.getenv("AIRTABLE_REQUEST_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
        self.timeout = timeout

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "AirtableClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _url(self, base_id: str, table_id: str, record_id: Optional[str] = None) -> str:
        url = f"{self.endpoint}/{base_id}/{quote(str(table_id), safe='')}"
        if record_id is not None:
            url += f"/{quote(str(record_id), safe='')}"
        return url

    def _request(
        self,
        action: str,
        method: str,
        url: str,
        params: Optional[List[Tuple[str, str]]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if params:
            url = f"{url}?{urlencode(params)}"
        headers = {"Authorization": f"Bearer {self._api_key}"}

        logger.debug("Making %s request to: %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"Failed to {action}: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise RemoteApiError(action, response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Failed to {action}: response is not valid JSON") from exc

    def list_records(
        self,
        base_id: str,
        table_id: str,
        filter_by_formula: Optional[str] = None,
        fields: Optional[Sequence[str]] = None,
        max_records: Optional[int] = None,
        view: Optional[str] = None,
        offset: Optional[str] = None,
    ) -> Page:
        """List one page of records.

        Only the options that are set end up in the query string, in the order
        ``filterByFormula``, ``fields[]``, ``maxRecords``, ``view``, ``offset``.
        """
        params: List[Tuple[str, str]] = []
        if _has_text(filter_by_formula):
            params.append(("filterByFormula", str(filter_by_formula)))
        params.extend(_field_params(fields))
        if max_records is not None:
            params.append(("maxRecords", str(int(max_records))))
        if _has_text(view):
            params.append(("view", str(view)))
        if _has_text(offset):
            params.append(("offset", str(offset)))

        payload = self._request("list records", "GET", self._url(base_id, table_id), params=params)
        return Page.from_json(payload)

    def get_record(
        self,
        base_id: str,
        table_id: str,
        record_id: str,
        fields: Optional[Sequence[str]] = None,
    ) -> Record:
        payload = self._request(
            "get record",
            "GET",
            self._url(base_id, table_id, record_id),
            params=_field_params(fields),
        )
        return Record.from_json(payload)

    def create_record(
        self,
        base_id: str,
        table_id: str,
        fields: Dict[str, Any],
        typecast: bool = False,
    ) -> Record:
        payload = self._request(
            "create record",
            "POST",
            self._url(base_id, table_id),
            body=_write_body("fields", fields, typecast),
        )
        return Record.from_json(payload)

    def create_records(
        self,
        base_id: str,
        table_id: str,
        records: Sequence[Dict[str, Any]],
        typecast: bool = False,
    ) -> List[Record]:
        """Create up to ``MAX_RECORDS_PER_BATCH`` records in a single request.

        Over-limit batches are rejected locally and never sent. Airtable applies
        a batch all-or-nothing, and so does this method.
        """
        if len(records) > MAX_RECORDS_PER_BATCH:
            raise ValidationError(
                f"Cannot create more than {MAX_RECORDS_PER_BATCH} records at once (got {len(records)})"
            )

        payload = self._request(
            "create records",
            "POST",
            self._url(base_id, table_id),
            body=_write_body("records", [{"fields": f} for f in records], typecast),
        )
        return Page.from_json(payload).records

    def update_record(
        self,
        base_id: str,
        table_id: str,
        record_id: str,
        fields: Dict[str, Any],
        typecast: bool = False,
    ) -> Record:
        # PATCH leaves fields that are not mentioned untouched.
        payload = self._request(
            "update record",
            "PATCH",
            self._url(base_id, table_id, record_id),
            body=_write_body("fields", fields, typecast),
        )
        return Record.from_json(payload)

    def delete_record(self, base_id: str, table_id: str, record_id: str) -> Record:
        payload = self._request("delete record", "DELETE", self._url(base_id, table_id, record_id))
        # The API answers {"id": ..., "deleted": true}; only the id is kept.
        return Record.from_json({"id": payload.get("id") if isinstance(payload, dict) else None})
