from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from typing import Dict

SECRET_ENV_PREFIX = "AIRTABLE_SECRET_"


@dataclass(frozen=True)
class CredentialResolution:
    resolved: Dict[str, str]
    unresolved: Dict[str, str]


def env_name_for_ref(ref: str) -> str:
    sanitized = "".join(ch if ch.isalnum() else "_" for ch in ref.strip().upper())
    return f"{SECRET_ENV_PREFIX}{sanitized}"


def _from_env(ref: str) -> str | None:
    value = os.getenv(env_name_for_ref(ref), "").strip()
    return value or None


def _from_keychain(ref: str) -> str | None:
    if sys.platform != "darwin":
        return None
    try:
        result = subprocess.run(
            ["security", "find-generic-password", "-a", os.getenv("USER", ""), "-s", ref, "-w"],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return result.stdout.strip() or None


def resolve_credential_refs(credential_refs: Dict[str, str]) -> CredentialResolution:
    """Look up each ``{logical_name: ref}`` pair, environment first, then keychain."""
    resolved: Dict[str, str] = {}
    unresolved: Dict[str, str] = {}

    for logical_name, ref in credential_refs.items():
        value = _from_env(str(ref)) or _from_keychain(str(ref))
        if value is None:
            unresolved[logical_name] = ref
        else:
            resolved[logical_name] = value

    return CredentialResolution(resolved=resolved, unresolved=unresolved)
