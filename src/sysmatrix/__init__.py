"""Public package entrypoint for the system-matrix evaluator."""

from .config import MatrixConfig, load_config, parse_config
from .deps import DependencyRef, DependencySet, build_dependency_set, merge
from .errors import (
    AggregateEvaluationError,
    ConfigurationError,
    DuplicateDependencyError,
    InvalidOutputError,
    LockfileError,
    NoSystemsConfiguredError,
    PerSystemError,
    PolicyError,
    QueryError,
    ResolutionError,
    SysmatrixError,
    UnknownOutputError,
    UnknownSystemError,
    UnsupportedSystemError,
)
from .matrix import MatrixEvaluator, MatrixResult, evaluate_matrix
from .models import ArtifactSpec, OutputDescriptor, PackageSpec, ShellSpec
from .policy import Policy
from .registry import OutputRegistry
from .systems import DEFAULT_SYSTEMS, SystemEnumerator, SystemId

__all__ = [
    "AggregateEvaluationError",
    "ArtifactSpec",
    "ConfigurationError",
    "DEFAULT_SYSTEMS",
    "DependencyRef",
    "DependencySet",
    "DuplicateDependencyError",
    "InvalidOutputError",
    "LockfileError",
    "MatrixConfig",
    "MatrixEvaluator",
    "MatrixResult",
    "NoSystemsConfiguredError",
    "OutputDescriptor",
    "OutputRegistry",
    "PackageSpec",
    "PerSystemError",
    "Policy",
    "PolicyError",
    "QueryError",
    "ResolutionError",
    "ShellSpec",
    "SysmatrixError",
    "SystemEnumerator",
    "SystemId",
    "UnknownOutputError",
    "UnknownSystemError",
    "UnsupportedSystemError",
    "build_dependency_set",
    "evaluate_matrix",
    "load_config",
    "merge",
    "parse_config",
]
