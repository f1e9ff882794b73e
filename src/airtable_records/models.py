from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import DecodeError


class FetchType(str, Enum):
    FETCH_ONE = "FETCH_ONE"
    FETCH = "FETCH"
    STORE = "STORE"
    NONE = "NONE"


@dataclass(frozen=True)
class Record:
    id: str
    created_time: Optional[str] = None
    fields: Optional[Dict[str, Any]] = None

    @property
    def is_deleted(self) -> bool:
        # Delete acknowledgments only carry the record id.
        return self.fields is None and self.created_time is None

    @staticmethod
    def from_json(payload: Any) -> "Record":
        if not isinstance(payload, dict):
            raise DecodeError(f"record must be a JSON object, got {type(payload).__name__}")
        record_id = payload.get("id")
        if not isinstance(record_id, str) or not record_id:
            raise DecodeError("record is missing a non-empty 'id'")

        created_time = payload.get("createdTime")
        fields = payload.get("fields")
        if fields is not None and not isinstance(fields, dict):
            raise DecodeError(f"record {record_id} has non-object 'fields'")
        return Record(
            id=record_id,
            created_time=str(created_time) if created_time is not None else None,
            fields=fields,
        )

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        if self.created_time is not None:
            data["createdTime"] = self.created_time
        if self.fields is not None:
            data["fields"] = self.fields
        return data


@dataclass(frozen=True)
class Page:
    records: List[Record] = field(default_factory=list)
    cursor: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return self.cursor is not None

    @staticmethod
    def from_json(payload: Any) -> "Page":
        if not isinstance(payload, dict):
            raise DecodeError(f"list response must be a JSON object, got {type(payload).__name__}")
        raw_records = payload.get("records")
        if raw_records is None:
            raw_records = []
        if not isinstance(raw_records, list):
            raise DecodeError("'records' must be a JSON array")

        offset = payload.get("offset")
        cursor = str(offset) if offset is not None and str(offset).strip() else None
        return Page(records=[Record.from_json(r) for r in raw_records], cursor=cursor)
