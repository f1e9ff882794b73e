from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

import jsonschema

from .engine import AutomationEngine, pretty_json


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Airtable records automation CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="Validate a task directory")
    p_validate.add_argument("--task-dir", required=True)

    p_run = sub.add_parser("run", help="Validate and run a task")
    target = p_run.add_mutually_exclusive_group(required=True)
    target.add_argument("--task-dir", help="Path to a task directory")
    target.add_argument("--task", help="Task name under library/, e.g. airtable_list")
    p_run.add_argument("--input", required=True, help="JSON object string")
    cred_group = p_run.add_mutually_exclusive_group()
    cred_group.add_argument(
        "--credential-refs",
        default="{}",
        help='Optional JSON object of credential refs, e.g. {"api_key": "airtable/pat"}',
    )
    cred_group.add_argument(
        "--credential-refs-file",
        help="Path to JSON file containing credential refs",
    )
    cred_group.add_argument(
        "--credential-refs-env",
        help="Environment variable name holding JSON credential refs",
    )

    sub.add_parser("list-tasks", help="List the tasks available under library/")

    p_doctor = sub.add_parser("doctor", help="Run local environment preflight checks")
    p_doctor.add_argument("--json", action="store_true", help="Emit machine-readable JSON output")

    return parser.parse_args()


def _load_input(raw: str, flag: str = "--input") -> Dict[str, Any]:
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"{flag} must be a JSON object")
    return data


def _load_credential_refs(args: argparse.Namespace) -> Dict[str, Any]:
    if getattr(args, "credential_refs_file", None):
        return _load_input(Path(args.credential_refs_file).read_text(), "--credential-refs-file")
    if getattr(args, "credential_refs_env", None):
        return _load_input(os.getenv(args.credential_refs_env, "{}"), "--credential-refs-env")
    return _load_input(getattr(args, "credential_refs", "{}"), "--credential-refs")


def _doctor(root: Path) -> Dict[str, Any]:
    schema = root / "schemas" / "manifest.schema.json"
    checks: Dict[str, Dict[str, Any]] = {
        "repo_schema": {"ok": schema.exists(), "details": str(schema)},
        "library_dir": {"ok": (root / "library").is_dir(), "details": str(root / "library")},
        "airtable_api_url": {
            "ok": True,
            "details": os.getenv("AIRTABLE_API_URL", "https://api.airtable.com/v0"),
        },
        "storage_dir": {
            "ok": True,
            "details": os.getenv("AIRTABLE_AUTOMATION_STORAGE_DIR", "<system temp>/airtable-automation"),
        },
    }
    overall_ok = all(checks[key]["ok"] for key in ("repo_schema", "library_dir"))
    return {"ok": overall_ok, "root": str(root), "checks": checks}


def _detect_repo_root(start: Path) -> Path:
    env_root = os.getenv("AIRTABLE_AUTOMATION_ROOT", "").strip()
    candidates = [Path(env_root)] if env_root else []
    candidates += [Path.cwd(), start.resolve(), *start.resolve().parents]
    for candidate in candidates:
        if (candidate / "schemas" / "manifest.schema.json").exists():
            return candidate
    raise FileNotFoundError("Could not locate repository root with schemas/manifest.schema.json")


def _configure_logging() -> None:
    level = os.getenv("AIRTABLE_AUTOMATION_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def main() -> None:
    args = _parse_args()
    _configure_logging()

    try:
        task_dir = None
        if getattr(args, "task_dir", None):
            task_dir = Path(args.task_dir).resolve()
            root = _detect_repo_root(task_dir)
        else:
            root = _detect_repo_root(Path.cwd())
        engine = AutomationEngine(root)

        if args.command == "validate":
            manifest = engine.validate_script(task_dir)
            print(pretty_json({"ok": True, "manifest": manifest}))
            return

        if args.command == "run":
            if task_dir is None:
                task_dir = engine.resolve_task_dir(args.task)
            inputs = _load_input(args.input)
            credential_refs = _load_credential_refs(args)
            if credential_refs:
                inputs["credential_refs"] = credential_refs
            result = engine.run(task_dir, inputs)
            print(pretty_json(result))
            if not result.get("ok"):
                raise SystemExit(1)
            return

        if args.command == "list-tasks":
            print(pretty_json({"ok": True, "tasks": engine.list_tasks()}))
            return

        if args.command == "doctor":
            result = _doctor(root)
            if args.json:
                print(pretty_json(result))
                return
            for name, check in result["checks"].items():
                print(f"[{'ok' if check['ok'] else 'FAIL'}] {name}: {check['details']}")
            return
    except (FileNotFoundError, ValueError, jsonschema.ValidationError) as exc:
        message = exc.message if isinstance(exc, jsonschema.ValidationError) else str(exc)
        print(pretty_json({"ok": False, "error": message}))
        raise SystemExit(2)


if __name__ == "__main__":
    main()
