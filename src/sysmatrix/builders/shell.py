"""Shell environment composition from a dependency set."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from sysmatrix.builders.base import PackageResolver
from sysmatrix.builders.resolver import output_path
from sysmatrix.deps import DependencySet
from sysmatrix.errors import ResolutionError
from sysmatrix.models import ArtifactSpec, ShellSpec
from sysmatrix.systems import SystemId


@dataclass(slots=True)
class EnvShellComposer:
    """Builds search paths and environment variables in dependency order.

    ``env`` values may reference a dependency's store path as ``{name}``,
    e.g. ``{"RUST_SRC_PATH": "{rustc}/lib/rustlib/src/rust/library"}``.
    """

    resolver: PackageResolver
    env: Mapping[str, str] = field(default_factory=dict)

    def compose(self, deps: DependencySet, system: SystemId) -> ShellSpec:
        inputs = tuple(self.resolver.resolve(ref, system) for ref in deps)

        path: list[str] = []
        pkg_config: list[str] = []
        library: list[str] = []
        for artifact in inputs:
            path.append(f"{output_path(artifact, _bin_output(artifact))}/bin")
            if "dev" in artifact.outputs:
                pkg_config.append(f"{output_path(artifact, 'dev')}/lib/pkgconfig")
                library.append(f"{artifact.store_path}/lib")

        variables: dict[str, str] = {}
        if pkg_config:
            variables["PKG_CONFIG_PATH"] = ":".join(pkg_config)
        if library:
            variables["LIBRARY_PATH"] = ":".join(library)
        variables.update(self._expand_env(inputs, system))
        return ShellSpec(
            system=system,
            inputs=inputs,
            env=dict(sorted(variables.items())),
            path=tuple(path),
        )

    def _expand_env(self, inputs: tuple[ArtifactSpec, ...], system: SystemId) -> dict[str, str]:
        paths = {artifact.name: artifact.store_path for artifact in inputs}
        expanded: dict[str, str] = {}
        for key, template in sorted(self.env.items()):
            try:
                expanded[key] = template.format_map(paths)
            except KeyError as exc:
                raise ResolutionError(
                    f"Environment variable {key!r} references a dependency outside the set.",
                    system=system,
                    dependency=str(exc.args[0]),
                    hint="Add the dependency to the set or drop the placeholder.",
                    context={"variable": key},
                ) from exc
        return expanded


def _bin_output(artifact: ArtifactSpec) -> str:
    return "bin" if "bin" in artifact.outputs else "out"


__all__ = ["EnvShellComposer"]
