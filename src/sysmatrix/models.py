"""Core typed dataclasses for resolved artifacts and per-system outputs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from sysmatrix.deps import DependencySet
from sysmatrix.systems import SystemId

OutputKind = Literal["package", "devShell"]

PACKAGE_OUTPUT = "package"
DEV_SHELL_OUTPUT = "devShell"
REQUIRED_OUTPUTS: tuple[str, ...] = (PACKAGE_OUTPUT, DEV_SHELL_OUTPUT)


@dataclass(frozen=True, slots=True)
class ArtifactSpec:
    """A dependency resolved to something fetchable/buildable for one system."""

    name: str
    version: str
    system: SystemId
    attr: str
    store_path: str
    outputs: tuple[str, ...] = ("out",)


@dataclass(frozen=True, slots=True)
class PackageSpec:
    pname: str
    version: str
    system: SystemId
    target: str
    command: tuple[str, ...]
    build_inputs: tuple[ArtifactSpec, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ShellSpec:
    system: SystemId
    inputs: tuple[ArtifactSpec, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    path: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class OutputDescriptor:
    """One named output for one system, tagged with the set it was composed with.

    ``deps`` is the caller's DependencySet object itself, not a copy.
    """

    name: str
    kind: OutputKind
    system: SystemId
    deps: DependencySet
    payload: PackageSpec | ShellSpec

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "kind": self.kind,
            "system": self.system,
            "dependencies": self.deps.to_list(),
            "payload": _payload_dict(self.payload),
        }


OutputMap = Mapping[str, OutputDescriptor]


def _artifact_dict(artifact: ArtifactSpec) -> dict[str, object]:
    return {
        "name": artifact.name,
        "version": artifact.version,
        "attr": artifact.attr,
        "store_path": artifact.store_path,
        "outputs": list(artifact.outputs),
    }


def _payload_dict(payload: PackageSpec | ShellSpec) -> dict[str, object]:
    if isinstance(payload, PackageSpec):
        return {
            "pname": payload.pname,
            "version": payload.version,
            "target": payload.target,
            "command": list(payload.command),
            "build_inputs": [_artifact_dict(item) for item in payload.build_inputs],
            "env": dict(sorted(payload.env.items())),
        }
    return {
        "inputs": [_artifact_dict(item) for item in payload.inputs],
        "env": dict(sorted(payload.env.items())),
        "path": list(payload.path),
    }


__all__ = [
    "ArtifactSpec",
    "DEV_SHELL_OUTPUT",
    "OutputDescriptor",
    "OutputKind",
    "OutputMap",
    "PACKAGE_OUTPUT",
    "PackageSpec",
    "REQUIRED_OUTPUTS",
    "ShellSpec",
]
