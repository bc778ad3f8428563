"""Default output builder producing ``package`` and ``devShell`` outputs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from sysmatrix.builders.base import PackageResolver, ShellComposer
from sysmatrix.builders.rust import RustPackageBuilder
from sysmatrix.deps import DependencySet
from sysmatrix.errors import ConfigurationError
from sysmatrix.models import DEV_SHELL_OUTPUT, PACKAGE_OUTPUT, OutputDescriptor
from sysmatrix.systems import SystemId

InputSharing = Literal["shared", "separate"]
INPUT_SHARING_MODES: tuple[InputSharing, ...] = ("shared", "separate")


@dataclass(slots=True)
class FlakeOutputBuilder:
    """Per-system ``package`` + ``devShell`` pair.

    With ``input_sharing="shared"`` both outputs carry the shared set object.
    With ``"separate"`` the dev shell carries the shared set followed by
    ``dev_tools``; ``dev_tools`` is ignored in shared mode.
    """

    package_builder: RustPackageBuilder
    resolver: PackageResolver
    composer: ShellComposer
    input_sharing: InputSharing = "shared"
    dev_tools: DependencySet = field(default_factory=DependencySet)

    def __post_init__(self) -> None:
        if self.input_sharing not in INPUT_SHARING_MODES:
            raise ConfigurationError(
                "Unknown input sharing mode.",
                hint="Use 'shared' or 'separate'.",
                context={"input_sharing": str(self.input_sharing)},
            )

    def shell_deps(self, deps: DependencySet) -> DependencySet:
        if self.input_sharing == "shared":
            return deps
        return deps.merge(self.dev_tools)

    def build(self, system: SystemId, deps: DependencySet) -> Mapping[str, OutputDescriptor]:
        build_inputs = tuple(self.resolver.resolve(ref, system) for ref in deps)
        package = self.package_builder.build(system, build_inputs)

        shell_deps = self.shell_deps(deps)
        shell = self.composer.compose(shell_deps, system)
        return {
            PACKAGE_OUTPUT: OutputDescriptor(
                name=PACKAGE_OUTPUT,
                kind="package",
                system=system,
                deps=deps,
                payload=package,
            ),
            DEV_SHELL_OUTPUT: OutputDescriptor(
                name=DEV_SHELL_OUTPUT,
                kind="devShell",
                system=system,
                deps=shell_deps,
                payload=shell,
            ),
        }


__all__ = ["FlakeOutputBuilder", "INPUT_SHARING_MODES", "InputSharing"]
