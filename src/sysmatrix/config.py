"""Declarative matrix configuration: parser, model and digest."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sysmatrix.builders.flake import INPUT_SHARING_MODES, InputSharing
from sysmatrix.deps import DependencyRef, DependencySet
from sysmatrix.errors import ConfigurationError
from sysmatrix.models import REQUIRED_OUTPUTS
from sysmatrix.policy import DEFAULT_LOCK_PATH, Policy
from sysmatrix.systems import DEFAULT_SYSTEMS, SystemId, normalize_systems

CONFIG_VERSION = 1


@dataclass(frozen=True, slots=True)
class MatrixConfig:
    name: str
    version: str = "0.1.0"
    systems: tuple[SystemId, ...] = DEFAULT_SYSTEMS
    dependencies: DependencySet = field(default_factory=DependencySet)
    dev_tools: DependencySet = field(default_factory=DependencySet)
    outputs: tuple[str, ...] = REQUIRED_OUTPUTS
    input_sharing: InputSharing = "shared"
    env: Mapping[str, str] = field(default_factory=dict)
    policy: Policy = field(default_factory=Policy)

    def payload(self) -> dict[str, Any]:
        return {
            "version": CONFIG_VERSION,
            "name": self.name,
            "package_version": self.version,
            "systems": list(self.systems),
            "dependencies": self.dependencies.to_list(),
            "dev_tools": self.dev_tools.to_list(),
            "outputs": list(self.outputs),
            "input_sharing": self.input_sharing,
            "env": dict(sorted(self.env.items())),
        }

    def digest(self) -> str:
        return config_digest(self.payload())


def config_digest(payload: Mapping[str, Any]) -> str:
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_config(raw: str) -> MatrixConfig:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError("Invalid configuration JSON.", hint=str(exc)) from exc
    return config_from_payload(payload)


def load_config(path: str | Path) -> MatrixConfig:
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigurationError(
            "Configuration file does not exist.",
            context={"path": str(config_path)},
        ) from exc
    return parse_config(raw)


def config_from_payload(payload: object) -> MatrixConfig:
    if not isinstance(payload, dict):
        raise ConfigurationError("Invalid configuration payload type.")

    version = payload.get("version", CONFIG_VERSION)
    if version != CONFIG_VERSION:
        raise ConfigurationError(
            "Unsupported configuration version.",
            context={"expected": str(CONFIG_VERSION), "actual": repr(version)},
        )

    systems_raw = payload.get("systems", list(DEFAULT_SYSTEMS))
    if not isinstance(systems_raw, list):
        raise ConfigurationError("Invalid configuration `systems` value.")

    input_sharing = payload.get("input_sharing", "shared")
    if input_sharing not in INPUT_SHARING_MODES:
        raise ConfigurationError(
            "Invalid configuration `input_sharing` value.",
            hint="Use 'shared' or 'separate'.",
            context={"input_sharing": repr(input_sharing)},
        )

    return MatrixConfig(
        name=_required_str(payload, "name"),
        version=_optional_str(payload, "package_version", "0.1.0"),
        systems=normalize_systems(systems_raw),
        dependencies=_dependency_set(payload, "dependencies"),
        dev_tools=_dependency_set(payload, "dev_tools"),
        outputs=_outputs(payload),
        input_sharing=input_sharing,
        env=_string_mapping(payload, "env"),
        policy=_policy(payload.get("policy", {})),
    )


def _required_str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"Invalid configuration `{key}` value.")
    return value


def _optional_str(payload: dict[str, Any], key: str, default: str) -> str:
    if key not in payload:
        return default
    return _required_str(payload, key)


def _dependency_set(payload: dict[str, Any], key: str) -> DependencySet:
    value = payload.get(key, [])
    if not isinstance(value, list):
        raise ConfigurationError(f"Invalid configuration `{key}` value.")
    refs: list[DependencyRef | str] = []
    for item in value:
        if isinstance(item, str):
            refs.append(item)
        elif isinstance(item, dict):
            name = item.get("name")
            constraint = item.get("version")
            if not isinstance(name, str) or not name:
                raise ConfigurationError(f"Invalid dependency name in `{key}`.")
            if constraint is not None and (not isinstance(constraint, str) or not constraint):
                raise ConfigurationError(
                    f"Invalid dependency version in `{key}`.",
                    context={"dependency": name},
                )
            refs.append(DependencyRef(name=name, version=constraint))
        else:
            raise ConfigurationError(f"Invalid dependency entry in `{key}`.")
    return DependencySet.build(refs)


def _outputs(payload: dict[str, Any]) -> tuple[str, ...]:
    value = payload.get("outputs", list(REQUIRED_OUTPUTS))
    if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
        raise ConfigurationError("Invalid configuration `outputs` value.")
    missing = [name for name in REQUIRED_OUTPUTS if name not in value]
    if missing:
        raise ConfigurationError(
            "Configuration must declare the package and devShell outputs.",
            context={"missing": ",".join(missing)},
        )
    return tuple(dict.fromkeys(value))


def _string_mapping(payload: dict[str, Any], key: str) -> dict[str, str]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ConfigurationError(f"Invalid configuration `{key}` value.")
    for name, item in value.items():
        if not isinstance(name, str) or not isinstance(item, str):
            raise ConfigurationError(f"Invalid configuration `{key}` entry.")
    return dict(sorted(value.items()))


def _policy(value: object) -> Policy:
    if not isinstance(value, dict):
        raise ConfigurationError("Invalid configuration `policy` value.")
    parallel = value.get("parallel", False)
    require_frozen_lock = value.get("require_frozen_lock", False)
    if not isinstance(parallel, bool) or not isinstance(require_frozen_lock, bool):
        raise ConfigurationError("Invalid configuration `policy` flags.")
    lock_path = value.get("lock_path", str(DEFAULT_LOCK_PATH))
    if not isinstance(lock_path, str) or not lock_path:
        raise ConfigurationError("Invalid configuration `policy.lock_path` value.")
    return Policy(
        parallel=parallel,
        max_workers=value.get("max_workers", 4),
        require_frozen_lock=require_frozen_lock,
        lock_path=Path(lock_path),
    )


__all__ = [
    "CONFIG_VERSION",
    "MatrixConfig",
    "config_digest",
    "config_from_payload",
    "load_config",
    "parse_config",
]
