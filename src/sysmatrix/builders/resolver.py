"""Catalog-backed package resolver."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from fnmatch import fnmatchcase

from sysmatrix.deps import DependencyRef
from sysmatrix.errors import ResolutionError
from sysmatrix.models import ArtifactSpec
from sysmatrix.systems import SystemId

STORE_DIR = "/nix/store"


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    name: str
    version: str
    attr: str
    platforms: tuple[str, ...] = ("*",)
    outputs: tuple[str, ...] = ("out",)

    def supports(self, system: str) -> bool:
        return any(fnmatchcase(system, pattern) for pattern in self.platforms)


DEFAULT_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(name="cargo", version="1.79.0", attr="cargo"),
    CatalogEntry(name="rustc", version="1.79.0", attr="rustc"),
    CatalogEntry(name="rustfmt", version="1.79.0", attr="rustfmt"),
    CatalogEntry(name="pre-commit", version="3.7.1", attr="pre-commit"),
    CatalogEntry(name="clippy", version="1.79.0", attr="rustPackages.clippy"),
    CatalogEntry(
        name="glib",
        version="2.80.2",
        attr="glib",
        outputs=("out", "dev", "bin"),
    ),
    CatalogEntry(
        name="polkit",
        version="124",
        attr="polkit",
        platforms=("*-linux",),
        outputs=("out", "dev"),
    ),
    CatalogEntry(name="pkg-config", version="0.29.2", attr="pkg-config"),
)


@dataclass(slots=True)
class CatalogResolver:
    """Resolves dependency names against a fixed catalog of packages."""

    entries: Mapping[str, CatalogEntry] = field(default_factory=dict)
    channel: str = "nixpkgs"

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[CatalogEntry] = DEFAULT_CATALOG,
        *,
        channel: str = "nixpkgs",
    ) -> CatalogResolver:
        return cls(entries={entry.name: entry for entry in entries}, channel=channel)

    def entry(self, name: str) -> CatalogEntry | None:
        return self.entries.get(name)

    def resolve(self, ref: DependencyRef, system: SystemId) -> ArtifactSpec:
        entry = self.entries.get(ref.name)
        if entry is None:
            raise ResolutionError(
                f"Dependency {ref.name!r} is not in the package catalog.",
                system=system,
                dependency=ref.name,
                hint="Add a catalog entry or remove the dependency.",
            )
        if not entry.supports(system):
            raise ResolutionError(
                f"Dependency {ref.name!r} is not available on {system}.",
                system=system,
                dependency=ref.name,
                hint="Drop the system from the matrix or the dependency from the set.",
                context={"platforms": ",".join(entry.platforms)},
            )
        if not version_satisfies(entry.version, ref.version):
            raise ResolutionError(
                f"Dependency {ref.name!r} does not satisfy the requested version.",
                system=system,
                dependency=ref.name,
                context={"requested": ref.version or "", "available": entry.version},
            )
        return ArtifactSpec(
            name=entry.name,
            version=entry.version,
            system=system,
            attr=f"{self.channel}.legacyPackages.{system}.{entry.attr}",
            store_path=store_path(entry.name, entry.version, system),
            outputs=entry.outputs,
        )


def version_satisfies(version: str, constraint: str | None) -> bool:
    """A constraint matches the exact version or any version it is a dotted prefix of."""
    if constraint is None:
        return True
    constraint = constraint.removeprefix("==")
    return version == constraint or version.startswith(f"{constraint}.")


def store_path(name: str, version: str, system: str) -> str:
    digest = hashlib.sha256(f"{system}:{name}:{version}".encode()).hexdigest()[:32]
    return f"{STORE_DIR}/{digest}-{name}-{version}"


def output_path(artifact: ArtifactSpec, output: str) -> str:
    if output == "out":
        return artifact.store_path
    return f"{artifact.store_path}-{output}"


__all__ = [
    "CatalogEntry",
    "CatalogResolver",
    "DEFAULT_CATALOG",
    "output_path",
    "store_path",
    "version_satisfies",
]
