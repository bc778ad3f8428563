"""Target system identifiers and the closed set evaluated per run."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NewType

from sysmatrix.errors import ConfigurationError, NoSystemsConfiguredError

SystemId = NewType("SystemId", str)

# Same set flake-utils iterates for eachDefaultSystem.
DEFAULT_SYSTEMS: tuple[SystemId, ...] = (
    SystemId("aarch64-darwin"),
    SystemId("aarch64-linux"),
    SystemId("x86_64-darwin"),
    SystemId("x86_64-linux"),
)


@dataclass(frozen=True, slots=True)
class SystemEnumerator:
    """Deterministic, finite, non-empty sequence of systems."""

    systems: tuple[SystemId, ...] = field(default=DEFAULT_SYSTEMS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "systems", normalize_systems(self.systems))

    @classmethod
    def default(cls) -> SystemEnumerator:
        return cls(DEFAULT_SYSTEMS)

    @classmethod
    def of(cls, *systems: str) -> SystemEnumerator:
        return cls(tuple(SystemId(system) for system in systems))

    def list(self) -> tuple[SystemId, ...]:
        return self.systems

    def __len__(self) -> int:
        return len(self.systems)


def normalize_systems(systems: Iterable[str]) -> tuple[SystemId, ...]:
    if isinstance(systems, str):
        raise ConfigurationError(
            "Systems must be a sequence of identifiers, not a single string.",
            context={"systems": systems},
        )
    normalized: list[SystemId] = []
    for system in systems:
        if not isinstance(system, str) or not system:
            raise ConfigurationError(
                "System identifiers must be non-empty strings.",
                context={"system": repr(system)},
            )
        if system not in normalized:
            normalized.append(SystemId(system))
    if not normalized:
        raise NoSystemsConfiguredError()
    return tuple(normalized)


__all__ = [
    "DEFAULT_SYSTEMS",
    "SystemEnumerator",
    "SystemId",
    "normalize_systems",
]
