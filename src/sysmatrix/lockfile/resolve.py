"""Lockfile construction from configuration and evaluation results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sysmatrix.lockfile.model import LockedInput, Lockfile
from sysmatrix.models import ArtifactSpec, PackageSpec

if TYPE_CHECKING:
    from sysmatrix.config import MatrixConfig
    from sysmatrix.matrix import MatrixResult

LOCKFILE_VERSION = 1


def build_lockfile(config: MatrixConfig, result: MatrixResult | None = None) -> Lockfile:
    """Pin the configuration digest and, when given, every resolved input."""
    inputs: list[LockedInput] = []
    if result is not None:
        for system, outputs in result.items():
            seen: set[str] = set()
            for _, descriptor in sorted(outputs.items()):
                for artifact in _artifacts(descriptor.payload):
                    if artifact.store_path in seen:
                        continue
                    seen.add(artifact.store_path)
                    inputs.append(
                        LockedInput(
                            system=system,
                            name=artifact.name,
                            version=artifact.version,
                            store_path=artifact.store_path,
                        )
                    )
    return Lockfile(
        version=LOCKFILE_VERSION,
        config_digest=config.digest(),
        config=config.payload(),
        systems=list(config.systems),
        inputs=inputs,
    )


def _artifacts(payload: object) -> tuple[ArtifactSpec, ...]:
    if isinstance(payload, PackageSpec):
        return payload.build_inputs
    return getattr(payload, "inputs", ())
