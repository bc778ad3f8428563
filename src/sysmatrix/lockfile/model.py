"""Lockfile typed model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class LockedInput:
    system: str
    name: str
    version: str
    store_path: str


@dataclass(frozen=True, slots=True)
class Lockfile:
    version: int
    config_digest: str
    config: dict[str, Any]
    systems: list[str]
    inputs: list[LockedInput] = field(default_factory=list)

    def inputs_for(self, system: str) -> list[LockedInput]:
        return [item for item in self.inputs if item.system == system]
