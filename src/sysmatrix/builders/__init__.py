"""Output builders and the collaborators they consume."""

from .base import (
    CallableOutputBuilder,
    OutputBuilder,
    PackageResolver,
    ShellComposer,
    validate_output_map,
)
from .flake import INPUT_SHARING_MODES, FlakeOutputBuilder, InputSharing
from .resolver import DEFAULT_CATALOG, CatalogEntry, CatalogResolver
from .rust import RUST_TARGETS, RustPackageBuilder
from .shell import EnvShellComposer

__all__ = [
    "CallableOutputBuilder",
    "CatalogEntry",
    "CatalogResolver",
    "DEFAULT_CATALOG",
    "EnvShellComposer",
    "FlakeOutputBuilder",
    "INPUT_SHARING_MODES",
    "InputSharing",
    "OutputBuilder",
    "PackageResolver",
    "RUST_TARGETS",
    "RustPackageBuilder",
    "ShellComposer",
    "validate_output_map",
]
