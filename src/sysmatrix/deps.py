"""Immutable, ordered dependency sets shared across outputs.

A :class:`DependencySet` never changes after construction. ``merge`` and
``with_refs`` return new sets, so anything holding an earlier set keeps
seeing the original entries.

Merge order is "left entries first, then right entries not already present",
both in their own insertion order. This order is observable downstream, e.g.
in ``buildInputs`` lists and search paths handed to a compiler.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from sysmatrix.errors import ConfigurationError, DuplicateDependencyError


@dataclass(frozen=True, slots=True)
class DependencyRef:
    name: str
    version: str | None = None

    @classmethod
    def parse(cls, raw: str) -> DependencyRef:
        """Parse ``name`` or ``name@constraint``."""
        name, sep, version = raw.strip().partition("@")
        name = name.strip()
        version = version.strip()
        if not name:
            raise ConfigurationError(
                "Dependency names must be non-empty.",
                context={"dependency": raw},
            )
        if sep and not version:
            raise ConfigurationError(
                "Dependency version constraint is empty.",
                hint="Use 'name' or 'name@constraint'.",
                context={"dependency": raw},
            )
        return cls(name=name, version=version or None)

    def __str__(self) -> str:
        if self.version is None:
            return self.name
        return f"{self.name}@{self.version}"


@dataclass(frozen=True, slots=True)
class DependencySet:
    entries: tuple[DependencyRef, ...] = ()

    @classmethod
    def build(cls, refs: Iterable[DependencyRef | str]) -> DependencySet:
        return cls(entries=_dedupe((), _coerce_refs(refs)))

    @classmethod
    def empty(cls) -> DependencySet:
        return cls()

    def merge(self, other: DependencySet) -> DependencySet:
        if other is self or not other.entries:
            return self
        return DependencySet(entries=_dedupe(self.entries, other.entries))

    def with_refs(self, *refs: DependencyRef | str) -> DependencySet:
        return self.merge(DependencySet.build(refs))

    def names(self) -> tuple[str, ...]:
        return tuple(ref.name for ref in self.entries)

    def get(self, name: str) -> DependencyRef | None:
        for ref in self.entries:
            if ref.name == name:
                return ref
        return None

    def to_list(self) -> list[str]:
        return [str(ref) for ref in self.entries]

    def __or__(self, other: DependencySet) -> DependencySet:
        return self.merge(other)

    def __iter__(self) -> Iterator[DependencyRef]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return item in self.names()
        return item in self.entries


def build_dependency_set(refs: Iterable[DependencyRef | str]) -> DependencySet:
    return DependencySet.build(refs)


def merge(a: DependencySet, b: DependencySet) -> DependencySet:
    return a.merge(b)


def _coerce_refs(refs: Iterable[DependencyRef | str]) -> list[DependencyRef]:
    coerced: list[DependencyRef] = []
    for ref in refs:
        if isinstance(ref, str):
            coerced.append(DependencyRef.parse(ref))
        elif isinstance(ref, DependencyRef):
            if not ref.name:
                raise ConfigurationError("Dependency names must be non-empty.")
            coerced.append(ref)
        else:
            raise ConfigurationError(
                "Dependencies must be DependencyRef values or strings.",
                context={"value": repr(ref)},
            )
    return coerced


def _dedupe(
    head: tuple[DependencyRef, ...],
    tail: Iterable[DependencyRef],
) -> tuple[DependencyRef, ...]:
    by_name = {ref.name: ref for ref in head}
    ordered = list(head)
    for ref in tail:
        existing = by_name.get(ref.name)
        if existing is None:
            by_name[ref.name] = ref
            ordered.append(ref)
            continue
        if existing.version != ref.version:
            raise DuplicateDependencyError(
                ref.name,
                existing=existing.version,
                conflicting=ref.version,
            )
    return tuple(ordered)


__all__ = ["DependencyRef", "DependencySet", "build_dependency_set", "merge"]
