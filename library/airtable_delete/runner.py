from __future__ import annotations

from typing import Any, Dict

from airtable_records.tasks import client_from_context, delete_record_task


def run(context: Dict[str, Any], inputs: Dict[str, Any]) -> Dict[str, Any]:
    with client_from_context(context, inputs) as client:
        return delete_record_task(client, inputs)
