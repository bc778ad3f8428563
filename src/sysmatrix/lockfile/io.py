"""Lockfile parser and serializer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sysmatrix.errors import LockfileError
from sysmatrix.lockfile.model import LockedInput, Lockfile


def serialize_lockfile(lockfile: Lockfile) -> str:
    payload = {
        "version": lockfile.version,
        "config_digest": lockfile.config_digest,
        "config": lockfile.config,
        "systems": lockfile.systems,
        "inputs": [
            {
                "system": item.system,
                "name": item.name,
                "version": item.version,
                "store_path": item.store_path,
            }
            for item in lockfile.inputs
        ],
    }
    return json.dumps(payload, indent=2, sort_keys=True) + "\n"


def parse_lockfile(raw: str) -> Lockfile:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LockfileError("Invalid lockfile JSON.", hint=str(exc)) from exc

    if not isinstance(payload, dict):
        raise LockfileError("Invalid lockfile payload type.")

    inputs_raw = payload.get("inputs", [])
    if not isinstance(inputs_raw, list):
        raise LockfileError("Invalid lockfile `inputs` value.")
    return Lockfile(
        version=_required_int(payload, "version"),
        config_digest=_required_str(payload, "config_digest"),
        config=_required_dict(payload, "config"),
        systems=_required_str_list(payload, "systems"),
        inputs=[_parse_locked_input(item) for item in inputs_raw],
    )


def read_lockfile(path: str | Path) -> Lockfile:
    lock_path = Path(path)
    try:
        raw = lock_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise LockfileError(
            "Lockfile does not exist.",
            hint="Run lock() before using frozen mode.",
            context={"path": str(lock_path)},
        ) from exc
    return parse_lockfile(raw)


def write_lockfile(lockfile: Lockfile, path: str | Path) -> Path:
    lock_path = Path(path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock_path.write_text(serialize_lockfile(lockfile), encoding="utf-8")
    return lock_path


def _parse_locked_input(item: Any) -> LockedInput:
    if not isinstance(item, dict):
        raise LockfileError("Invalid input entry in lockfile.")
    return LockedInput(
        system=_required_str(item, "system"),
        name=_required_str(item, "name"),
        version=_required_str(item, "version"),
        store_path=_required_str(item, "store_path"),
    )


def _required_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise LockfileError(f"Invalid lockfile `{key}` value.")
    return value


def _required_int(payload: dict[str, Any], key: str) -> int:
    value = payload.get(key)
    if not isinstance(value, int):
        raise LockfileError(f"Invalid lockfile `{key}` value.")
    return value


def _required_dict(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    if not isinstance(value, dict):
        raise LockfileError(f"Invalid lockfile `{key}` value.")
    return value


def _required_str_list(payload: dict[str, Any], key: str) -> list[str]:
    value = payload.get(key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise LockfileError(f"Invalid lockfile `{key}` value.")
    return list(value)
