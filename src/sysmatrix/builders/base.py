"""Typed interfaces for output builders and their collaborators."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from sysmatrix.deps import DependencyRef, DependencySet
from sysmatrix.errors import InvalidOutputError
from sysmatrix.models import REQUIRED_OUTPUTS, ArtifactSpec, OutputDescriptor, ShellSpec
from sysmatrix.systems import SystemId


@runtime_checkable
class OutputBuilder(Protocol):
    def build(self, system: SystemId, deps: DependencySet) -> Mapping[str, OutputDescriptor]:
        """Return the named outputs for one system.

        Must be pure with respect to ``system`` and ``deps``. May raise
        ``UnsupportedSystemError`` or ``ResolutionError``.
        """


class PackageResolver(Protocol):
    def resolve(self, ref: DependencyRef, system: SystemId) -> ArtifactSpec:
        """Turn a dependency into a concrete artifact or raise ``ResolutionError``."""


class ShellComposer(Protocol):
    def compose(self, deps: DependencySet, system: SystemId) -> ShellSpec:
        """Turn a dependency set into an environment descriptor."""


@dataclass(frozen=True, slots=True)
class CallableOutputBuilder:
    """Adapts a plain ``(system, deps) -> mapping`` function to the builder protocol."""

    func: Callable[[SystemId, DependencySet], Mapping[str, OutputDescriptor]]

    def build(self, system: SystemId, deps: DependencySet) -> Mapping[str, OutputDescriptor]:
        return self.func(system, deps)


def validate_output_map(
    outputs: object,
    *,
    system: SystemId,
    deps: DependencySet,
    required: Sequence[str] = REQUIRED_OUTPUTS,
) -> Mapping[str, OutputDescriptor]:
    """Check a builder result against the output contract and freeze it.

    Every descriptor must belong to ``system`` and carry a dependency set
    that starts with the shared ``deps`` entries in the same order.
    """
    if not isinstance(outputs, Mapping):
        raise InvalidOutputError(
            "Output builder must return a mapping of output names to descriptors.",
            system=system,
            context={"returned": type(outputs).__name__},
        )

    validated: dict[str, OutputDescriptor] = {}
    for name, descriptor in outputs.items():
        if not isinstance(name, str) or not name:
            raise InvalidOutputError(
                "Output names must be non-empty strings.",
                system=system,
                context={"output": repr(name)},
            )
        if not isinstance(descriptor, OutputDescriptor):
            raise InvalidOutputError(
                "Output values must be OutputDescriptor instances.",
                system=system,
                context={"output": name, "returned": type(descriptor).__name__},
            )
        if descriptor.name != name:
            raise InvalidOutputError(
                "Output descriptor name does not match its key.",
                system=system,
                context={"output": name, "descriptor_name": descriptor.name},
            )
        if descriptor.system != system:
            raise InvalidOutputError(
                "Output descriptor was built for a different system.",
                system=system,
                context={"output": name, "descriptor_system": descriptor.system},
            )
        if not _carries_shared_deps(descriptor.deps, deps):
            raise InvalidOutputError(
                "Output descriptor is not composed with the shared dependency set.",
                system=system,
                hint="Pass the shared set through, or merge extra inputs after it.",
                context={"output": name, "dependencies": ",".join(descriptor.deps.names())},
            )
        validated[name] = descriptor

    missing = [name for name in required if name not in validated]
    if missing:
        raise InvalidOutputError(
            "Output builder did not produce every required output.",
            system=system,
            context={"missing": ",".join(missing)},
        )
    return MappingProxyType(validated)


def _carries_shared_deps(candidate: object, shared: DependencySet) -> bool:
    if candidate is shared:
        return True
    if not isinstance(candidate, DependencySet):
        return False
    return candidate.entries[: len(shared)] == shared.entries
