"""Task call-sites for the five Airtable record operations.

Each ``*_task`` function takes a client plus the raw task inputs and returns
the task output dict. Task runners under ``library/`` are thin wrappers around
these functions.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .client import MAX_RECORDS_PER_BATCH, AirtableClient
from .errors import ValidationError
from .models import FetchType, Record
from .pagination import collect_records

logger = logging.getLogger(__name__)


def default_storage_dir() -> Path:
    configured = os.getenv("AIRTABLE_AUTOMATION_STORAGE_DIR", "").strip()
    if configured:
        return Path(configured)
    return Path(tempfile.gettempdir()) / "airtable-automation"


def _require(inputs: Mapping[str, Any], key: str) -> str:
    value = inputs.get(key)
    if value is None or not str(value).strip():
        raise ValidationError(f"'{key}' is required")
    return str(value).strip()


def _optional_text(inputs: Mapping[str, Any], key: str) -> Optional[str]:
    value = inputs.get(key)
    if value is None or not str(value).strip():
        return None
    return str(value)


def _field_names(inputs: Mapping[str, Any]) -> Optional[List[str]]:
    names = inputs.get("fields")
    if not names:
        return None
    return [str(n) for n in names]


def _fetch_type(inputs: Mapping[str, Any]) -> FetchType:
    raw = str(inputs.get("fetch_type") or FetchType.FETCH.value).strip().upper()
    try:
        return FetchType(raw)
    except ValueError:
        allowed = ", ".join(t.value for t in FetchType)
        raise ValidationError(f"Unknown fetch_type '{raw}' (expected one of: {allowed})") from None


def client_from_context(context: Mapping[str, Any], inputs: Mapping[str, Any]) -> AirtableClient:
    """Build a client from an inline ``api_key`` or a resolved credential ref."""
    credentials = context.get("credentials") or {}
    api_key = inputs.get("api_key") or credentials.get("api_key")
    if not api_key:
        unresolved = (context.get("unresolved_credential_refs") or {}).get("api_key")
        hint = f" (credential ref '{unresolved}' could not be resolved)" if unresolved else ""
        raise ValidationError("An Airtable api_key is required" + hint)
    return AirtableClient(str(api_key))


def store_records(records: List[Record], storage_dir: Path) -> str:
    """Write records as JSON lines and return the file URI."""
    storage_dir.mkdir(parents=True, exist_ok=True)
    path = storage_dir / f"airtable_records_{uuid.uuid4().hex}.jsonl"
    with path.open("w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record.as_dict(), sort_keys=True))
            f.write("\n")
    return path.resolve().as_uri()


def list_records_task(
    client: AirtableClient,
    inputs: Mapping[str, Any],
    storage_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    base_id = _require(inputs, "base_id")
    table_id = _require(inputs, "table_id")
    filter_by_formula = _optional_text(inputs, "filter_by_formula")
    fields = _field_names(inputs)
    max_records = inputs.get("max_records")
    view = _optional_text(inputs, "view")
    auto_paginate = bool(inputs.get("enable_auto_pagination", False))
    max_pages = inputs.get("max_pages")
    fetch_type = _fetch_type(inputs)

    logger.info("Listing records from Airtable base: %s table: %s", base_id, table_id)

    def fetch_page(cursor: Optional[str]):
        return client.list_records(
            base_id,
            table_id,
            filter_by_formula=filter_by_formula,
            fields=fields,
            max_records=max_records,
            view=view,
            offset=cursor,
        )

    result = collect_records(fetch_page, auto_paginate=auto_paginate, max_pages=max_pages)
    records = result.records
    logger.info("Retrieved %d records from Airtable in %d page(s)", len(records), result.pages)

    output: Dict[str, Any] = {"size": len(records)}
    if fetch_type is FetchType.FETCH_ONE:
        if records:
            output["row"] = records[0].as_dict()
    elif fetch_type is FetchType.FETCH:
        output["rows"] = [r.as_dict() for r in records]
    elif fetch_type is FetchType.STORE:
        output["uri"] = store_records(records, storage_dir or default_storage_dir())
    return output


def get_record_task(client: AirtableClient, inputs: Mapping[str, Any]) -> Dict[str, Any]:
    base_id = _require(inputs, "base_id")
    table_id = _require(inputs, "table_id")
    record_id = _require(inputs, "record_id")

    logger.info("Getting record %s from Airtable base: %s table: %s", record_id, base_id, table_id)
    record = client.get_record(base_id, table_id, record_id, fields=_field_names(inputs))
    logger.info("Retrieved record: %s", record.id)
    return {"record": record.as_dict()}


def create_records_task(client: AirtableClient, inputs: Mapping[str, Any]) -> Dict[str, Any]:
    base_id = _require(inputs, "base_id")
    table_id = _require(inputs, "table_id")
    fields = inputs.get("fields") or {}
    batch = inputs.get("records") or []
    typecast = bool(inputs.get("typecast", False))

    if not fields and not batch:
        raise ValidationError(
            "Either 'fields' for a single record or 'records' for multiple records must be provided"
        )
    if fields and batch:
        raise ValidationError("Cannot specify both 'fields' and 'records'. Use one or the other.")

    if fields:
        logger.info("Creating single record in Airtable base: %s table: %s", base_id, table_id)
        created = [client.create_record(base_id, table_id, dict(fields), typecast=typecast)]
    else:
        if len(batch) > MAX_RECORDS_PER_BATCH:
            raise ValidationError(f"Cannot create more than {MAX_RECORDS_PER_BATCH} records at once")
        logger.info("Creating %d records in Airtable base: %s table: %s", len(batch), base_id, table_id)
        created = client.create_records(base_id, table_id, [dict(r) for r in batch], typecast=typecast)

    logger.info("Created %d record(s)", len(created))
    rows = [r.as_dict() for r in created]
    output: Dict[str, Any] = {"records": rows, "record_ids": [r.id for r in created]}
    if rows:
        output["record"] = rows[0]
    return output


def update_record_task(client: AirtableClient, inputs: Mapping[str, Any]) -> Dict[str, Any]:
    base_id = _require(inputs, "base_id")
    table_id = _require(inputs, "table_id")
    record_id = _require(inputs, "record_id")
    fields = inputs.get("fields") or {}
    if not fields:
        raise ValidationError("Fields to update must be provided and cannot be empty")

    logger.info(
        "Updating record %s in Airtable base: %s table: %s with %d fields",
        record_id,
        base_id,
        table_id,
        len(fields),
    )
    record = client.update_record(
        base_id, table_id, record_id, dict(fields), typecast=bool(inputs.get("typecast", False))
    )
    logger.info("Updated record: %s", record.id)
    return {"record": record.as_dict(), "record_id": record.id}


def delete_record_task(client: AirtableClient, inputs: Mapping[str, Any]) -> Dict[str, Any]:
    base_id = _require(inputs, "base_id")
    table_id = _require(inputs, "table_id")
    record_id = _require(inputs, "record_id")

    logger.info("Deleting record %s from Airtable base: %s table: %s", record_id, base_id, table_id)
    record = client.delete_record(base_id, table_id, record_id)
    logger.info("Deleted record: %s", record.id)
    return {"record_id": record.id, "deleted": record.is_deleted}
