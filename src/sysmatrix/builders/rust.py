"""Rust package builder."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from sysmatrix.errors import UnsupportedSystemError
from sysmatrix.models import ArtifactSpec, PackageSpec
from sysmatrix.systems import SystemId

RUST_TARGETS: dict[str, str] = {
    "aarch64-darwin": "aarch64-apple-darwin",
    "aarch64-linux": "aarch64-unknown-linux-gnu",
    "x86_64-darwin": "x86_64-apple-darwin",
    "x86_64-linux": "x86_64-unknown-linux-gnu",
}


@dataclass(slots=True)
class RustPackageBuilder:
    pname: str
    version: str = "0.1.0"
    tool: str = "cargo"
    reproducible: bool = True
    flags: tuple[str, ...] = ()
    targets: Mapping[str, str] = field(default_factory=lambda: dict(RUST_TARGETS))

    def target_for(self, system: SystemId) -> str:
        target = self.targets.get(system)
        if target is None:
            raise UnsupportedSystemError(
                f"The {self.tool} toolchain has no target for {system}.",
                system=system,
                hint="Add a target triple for this system or drop it from the matrix.",
                context={"supported": ",".join(sorted(self.targets))},
            )
        return target

    def build(self, system: SystemId, inputs: tuple[ArtifactSpec, ...]) -> PackageSpec:
        target = self.target_for(system)
        flags = list(self.flags)
        if self.reproducible and "--locked" not in flags:
            flags.append("--locked")
        command = (self.tool, "build", "--release", *flags, "--target", target)
        return PackageSpec(
            pname=self.pname,
            version=self.version,
            system=system,
            target=target,
            command=command,
            build_inputs=inputs,
            env={"CARGO_BUILD_TARGET": target},
        )


__all__ = ["RUST_TARGETS", "RustPackageBuilder"]
