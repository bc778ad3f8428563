"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Mapping

import pytest

from sysmatrix.builders import CatalogResolver, EnvShellComposer, FlakeOutputBuilder, RustPackageBuilder
from sysmatrix.config import MatrixConfig
from sysmatrix.deps import DependencySet
from sysmatrix.models import ArtifactSpec, OutputDescriptor, PackageSpec, ShellSpec
from sysmatrix.systems import SystemId

LINUX_SYSTEMS = (SystemId("x86_64-linux"), SystemId("aarch64-linux"))


@pytest.fixture
def resolver() -> CatalogResolver:
    return CatalogResolver.from_entries()


@pytest.fixture
def shared_deps() -> DependencySet:
    return DependencySet.build(["glib", "polkit", "pkg-config", "cargo", "rustc"])


@pytest.fixture
def flake_builder(resolver: CatalogResolver) -> FlakeOutputBuilder:
    return FlakeOutputBuilder(
        package_builder=RustPackageBuilder(pname="mypolkit"),
        resolver=resolver,
        composer=EnvShellComposer(resolver=resolver),
    )


@pytest.fixture
def linux_config(shared_deps: DependencySet) -> MatrixConfig:
    return MatrixConfig(
        name="mypolkit",
        systems=LINUX_SYSTEMS,
        dependencies=shared_deps,
        dev_tools=DependencySet.build(["rustfmt", "pre-commit", "clippy"]),
        env={"RUST_SRC_PATH": "{rustc}/lib/rustlib/src/rust/library"},
    )


class StubBuilder:
    """Output builder with canned per-system failures and a call log."""

    def __init__(self, failures: Mapping[str, Exception] | None = None) -> None:
        self.failures = dict(failures or {})
        self.calls: list[str] = []

    def build(self, system: SystemId, deps: DependencySet) -> dict[str, OutputDescriptor]:
        self.calls.append(system)
        failure = self.failures.get(system)
        if failure is not None:
            raise failure
        return stub_outputs(system, deps)


def stub_outputs(system: SystemId, deps: DependencySet) -> dict[str, OutputDescriptor]:
    inputs = tuple(
        ArtifactSpec(
            name=ref.name,
            version="1",
            system=system,
            attr=ref.name,
            store_path=f"/nix/store/{ref.name}-{system}",
        )
        for ref in deps
    )
    return {
        "package": OutputDescriptor(
            name="package",
            kind="package",
            system=system,
            deps=deps,
            payload=PackageSpec(
                pname="demo",
                version="0.1.0",
                system=system,
                target=system,
                command=("make",),
                build_inputs=inputs,
            ),
        ),
        "devShell": OutputDescriptor(
            name="devShell",
            kind="devShell",
            system=system,
            deps=deps,
            payload=ShellSpec(system=system, inputs=inputs),
        ),
    }
