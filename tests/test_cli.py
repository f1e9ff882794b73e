from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from airtable_automation import cli
from conftest import json_response

ROOT = Path(__file__).resolve().parents[1]


def _run_cli(monkeypatch, capsys, *argv: str):
    monkeypatch.chdir(ROOT)
    monkeypatch.setattr(sys, "argv", ["airtable-automation", *argv])
    code = 0
    try:
        cli.main()
    except SystemExit as exc:
        code = exc.code
    return code, json.loads(capsys.readouterr().out)


def test_list_tasks(monkeypatch, capsys) -> None:
    code, out = _run_cli(monkeypatch, capsys, "list-tasks")
    assert code == 0
    assert len(out["tasks"]) == 5


def test_run_by_task_name(monkeypatch, capsys, patch_requests_session) -> None:
    patch_requests_session.queue(json_response({"id": "rec1", "deleted": True}))
    code, out = _run_cli(
        monkeypatch,
        capsys,
        "run",
        "--task",
        "airtable_delete",
        "--input",
        json.dumps({"base_id": "appBase", "table_id": "Tasks", "record_id": "rec1", "api_key": "pat"}),
    )
    assert code == 0
    assert out["result"] == {"record_id": "rec1", "deleted": True}


def test_run_with_invalid_input_exits_2(monkeypatch, capsys) -> None:
    code, out = _run_cli(
        monkeypatch, capsys, "run", "--task", "airtable_get", "--input", json.dumps({"base_id": "appBase"})
    )
    assert code == 2
    assert out["ok"] is False


def test_input_must_be_an_object() -> None:
    with pytest.raises(ValueError):
        cli._load_input("[1, 2]")


def test_doctor_json(monkeypatch, capsys) -> None:
    code, out = _run_cli(monkeypatch, capsys, "doctor", "--json")
    assert code == 0
    assert out["ok"] is True
    assert out["checks"]["repo_schema"]["ok"] is True
