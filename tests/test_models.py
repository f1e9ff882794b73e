from __future__ import annotations

import pytest

from airtable_records.errors import DecodeError
from airtable_records.models import FetchType, Page, Record


def test_record_as_dict_omits_absent_keys() -> None:
    record = Record.from_json({"id": "rec1", "fields": {"Name": "Alpha"}})
    assert record.created_time is None
    assert record.as_dict() == {"id": "rec1", "fields": {"Name": "Alpha"}}


def test_record_with_only_id_is_deleted() -> None:
    assert Record.from_json({"id": "rec1", "deleted": True}).is_deleted is True
    assert Record.from_json({"id": "rec1", "fields": {}}).is_deleted is False


def test_record_without_id_is_a_decode_error() -> None:
    with pytest.raises(DecodeError):
        Record.from_json({"fields": {"Name": "Alpha"}})
    with pytest.raises(DecodeError):
        Record.from_json(["rec1"])


def test_record_fields_must_be_an_object() -> None:
    with pytest.raises(DecodeError):
        Record.from_json({"id": "rec1", "fields": ["Alpha"]})


@pytest.mark.parametrize("offset", [None, "", "   "])
def test_blank_or_null_offset_means_no_cursor(offset) -> None:
    page = Page.from_json({"records": [{"id": "rec1"}], "offset": offset})
    assert page.cursor is None
    assert page.has_more is False


def test_page_keeps_cursor_and_order() -> None:
    page = Page.from_json({"records": [{"id": "rec2"}, {"id": "rec1"}], "offset": "itr1/rec1"})
    assert [r.id for r in page.records] == ["rec2", "rec1"]
    assert page.cursor == "itr1/rec1"
    assert page.has_more is True


def test_page_without_records_key_is_empty() -> None:
    assert Page.from_json({}).records == []


def test_fetch_type_values() -> None:
    assert FetchType("STORE") is FetchType.STORE
    assert [t.value for t in FetchType] == ["FETCH_ONE", "FETCH", "STORE", "NONE"]
