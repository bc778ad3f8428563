"""Render a ``flake.nix`` equivalent of a matrix configuration."""

from __future__ import annotations

import json
import textwrap
from collections.abc import Mapping
from pathlib import Path

from sysmatrix.builders.resolver import DEFAULT_CATALOG, CatalogEntry
from sysmatrix.config import MatrixConfig
from sysmatrix.deps import DependencySet
from sysmatrix.errors import ConfigurationError

FLAKE_INPUTS: tuple[tuple[str, str], ...] = (
    ("naersk", "github:nix-community/naersk/master"),
    ("nixpkgs", "github:NixOS/nixpkgs/nixpkgs-unstable"),
    ("utils", "github:numtide/flake-utils"),
)

FLAKE_TEMPLATE = textwrap.dedent("""\
    {{
      inputs = {{
    {inputs}
      }};

      outputs = {{ self, nixpkgs, utils, naersk }}:
        utils.lib.eachSystem [ {systems} ] (system:
          let
            pkgs = import nixpkgs {{ inherit system; }};
            naersk-lib = pkgs.callPackage naersk {{ }};
            sharedInputs = with pkgs; [
    {shared}
            ];
          in
          {{
            packages.default = naersk-lib.buildPackage {{
              src = ./.;
              nativeBuildInputs = sharedInputs;
            }};
            devShells.default = pkgs.mkShell {{
              buildInputs = {shell_inputs};{env}
            }};
          }});
    }}
""")


def emit_flake(
    config: MatrixConfig,
    *,
    catalog: Mapping[str, CatalogEntry] | None = None,
) -> str:
    """Return flake source listing dependencies in DependencySet order."""
    attrs = catalog if catalog is not None else {entry.name: entry for entry in DEFAULT_CATALOG}
    inputs = "\n".join(f"    {name}.url = {json.dumps(url)};" for name, url in FLAKE_INPUTS)
    systems = " ".join(json.dumps(system) for system in config.systems)
    shared = _attr_lines(config.dependencies, attrs)

    shell_inputs = "sharedInputs"
    if config.input_sharing == "separate" and config.dev_tools:
        dev = " ".join(_attr(ref.name, attrs) for ref in config.dev_tools)
        shell_inputs = f"sharedInputs ++ (with pkgs; [ {dev} ])"

    env = "".join(
        f"\n          {key} = {json.dumps(value)};"
        for key, value in _nix_env(config, attrs).items()
    )
    return FLAKE_TEMPLATE.format(
        inputs=inputs,
        systems=systems,
        shared=shared,
        shell_inputs=shell_inputs,
        env=env,
    )


def write_flake(
    config: MatrixConfig,
    target_dir: str | Path,
    *,
    catalog: Mapping[str, CatalogEntry] | None = None,
) -> Path:
    """Write the rendered flake to *target_dir* and return its path."""
    directory = Path(target_dir)
    directory.mkdir(parents=True, exist_ok=True)
    flake_path = directory / "flake.nix"
    flake_path.write_text(emit_flake(config, catalog=catalog), encoding="utf-8")
    return flake_path


def _attr(name: str, attrs: Mapping[str, CatalogEntry]) -> str:
    entry = attrs.get(name)
    return entry.attr if entry is not None else name


def _attr_lines(deps: DependencySet, attrs: Mapping[str, CatalogEntry]) -> str:
    return "\n".join(f"          {_attr(ref.name, attrs)}" for ref in deps)


def _nix_env(config: MatrixConfig, attrs: Mapping[str, CatalogEntry]) -> dict[str, str]:
    names = [*config.dependencies.names(), *config.dev_tools.names()]
    interpolations = {name: f"${{pkgs.{_attr(name, attrs)}}}" for name in names}
    rendered: dict[str, str] = {}
    for key, template in sorted(config.env.items()):
        try:
            rendered[key] = template.format_map(interpolations)
        except KeyError as exc:
            raise ConfigurationError(
                "Environment variable references a dependency outside the configuration.",
                hint="Add the dependency or drop the placeholder.",
                context={"variable": key, "dependency": str(exc.args[0])},
            ) from exc
    return rendered
