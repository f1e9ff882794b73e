from __future__ import annotations

import importlib.util
import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Dict, List

from airtable_records.tasks import default_storage_dir

from .contract import validate_inputs, validate_manifest, validate_output
from .credentials import resolve_credential_refs

logger = logging.getLogger(__name__)

REDACTED_INPUT_KEYS = {"api_key"}
REDACTED = "***"


def _redact(inputs: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (REDACTED if k in REDACTED_INPUT_KEYS and v else v) for k, v in inputs.items()}


class AutomationEngine:
    def __init__(self, root_dir: Path) -> None:
        self.root_dir = root_dir
        self.manifest_schema = root_dir / "schemas" / "manifest.schema.json"
        self.library_dir = root_dir / "library"

    def _load_runner_module(self, runner_path: Path):
        module_name = f"task_runner_{runner_path.parent.name}"
        spec = importlib.util.spec_from_file_location(module_name, runner_path)
        if spec is None or spec.loader is None:
            raise RuntimeError(f"failed loading runner: {runner_path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def validate_script(self, task_dir: Path) -> Dict[str, Any]:
        manifest = validate_manifest(task_dir, self.manifest_schema)

        for rel in (manifest["inputs_schema"], manifest["outputs_schema"], manifest["entrypoint"]):
            path = task_dir / rel
            if not path.exists():
                raise FileNotFoundError(f"required file missing: {path}")

        return manifest

    def list_tasks(self) -> List[Dict[str, Any]]:
        tasks: List[Dict[str, Any]] = []
        if not self.library_dir.is_dir():
            return tasks
        for task_dir in sorted(p for p in self.library_dir.iterdir() if (p / "manifest.json").exists()):
            manifest = self.validate_script(task_dir)
            tasks.append(
                {
                    "name": task_dir.name,
                    "id": manifest["id"],
                    "version": manifest["version"],
                    "description": manifest.get("description", ""),
                    "state_changing": bool(manifest.get("state_changing", False)),
                }
            )
        return tasks

    def resolve_task_dir(self, name: str) -> Path:
        task_dir = self.library_dir / name
        if not (task_dir / "manifest.json").exists():
            raise FileNotFoundError(f"unknown task: {name}")
        return task_dir

    def _failure(self, manifest: Dict[str, Any], error: str, **extra: Any) -> Dict[str, Any]:
        return {
            "ok": False,
            "task_id": manifest["id"],
            "task_version": manifest["version"],
            "error": error,
            **extra,
        }

    def run(self, task_dir: Path, inputs: Dict[str, Any]) -> Dict[str, Any]:
        manifest = self.validate_script(task_dir)
        validate_inputs(inputs, task_dir / manifest["inputs_schema"])

        runner_path = task_dir / manifest["entrypoint"]
        module = self._load_runner_module(runner_path)
        if not hasattr(module, "run"):
            raise AttributeError(f"runner has no run(context, inputs): {runner_path}")

        credential_refs = inputs.get("credential_refs") if isinstance(inputs.get("credential_refs"), dict) else {}
        resolution = resolve_credential_refs(credential_refs)

        context = {
            "task_id": manifest["id"],
            "task_version": manifest["version"],
            "task_dir": str(task_dir),
            "credentials": resolution.resolved,
            "unresolved_credential_refs": resolution.unresolved,
            "storage_dir": str(default_storage_dir()),
        }

        logger.info("Running task %s (%s)", manifest["id"], manifest["version"])
        timeout_seconds = int(os.getenv("AIRTABLE_AUTOMATION_TIMEOUT_SECONDS", "600"))
        # A timed-out runner keeps its worker thread; run() must not wait for it.
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(module.run, context, inputs)
            result = future.result(timeout=timeout_seconds)
        except FutureTimeoutError:
            logger.warning("Task %s exceeded timeout (%ss)", manifest["id"], timeout_seconds)
            return self._failure(manifest, f"Task exceeded timeout ({timeout_seconds}s)", error_type="Timeout")
        except Exception as exc:  # noqa: BLE001
            logger.warning("Task %s failed: %s", manifest["id"], exc)
            extra: Dict[str, Any] = {"error_type": type(exc).__name__}
            if getattr(exc, "status", None) is not None:
                extra["status"] = exc.status
            return self._failure(manifest, str(exc), **extra)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        if not isinstance(result, dict):
            return self._failure(manifest, f"runner result must be a dict, got {type(result).__name__}")

        try:
            validate_output(result, task_dir / manifest["outputs_schema"])
        except Exception as exc:  # noqa: BLE001
            return self._failure(manifest, f"output schema validation failed: {exc}")

        return {
            "ok": True,
            "task_id": manifest["id"],
            "task_version": manifest["version"],
            "state_changing": bool(manifest.get("state_changing", False)),
            "inputs": _redact(inputs),
            "credential_status": {
                "requested_refs": dict(credential_refs),
                "resolved_keys": sorted(resolution.resolved.keys()),
                "unresolved_refs": resolution.unresolved,
            },
            "result": result,
        }


def pretty_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, indent=2, sort_keys=True)
