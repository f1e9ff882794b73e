from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from airtable_records.tasks import client_from_context, list_records_task


def run(context: Dict[str, Any], inputs: Dict[str, Any]) -> Dict[str, Any]:
    storage_dir = context.get("storage_dir")
    with client_from_context(context, inputs) as client:
        return list_records_task(client, inputs, storage_dir=Path(storage_dir) if storage_dir else None)
