"""System-matrix evaluation: one output-builder call per system, all-or-nothing.

Every configured system is attempted, sequentially or on a thread pool, and
only then are per-system failures reported together as one
:class:`AggregateEvaluationError`. A successful run yields a read-only
:class:`MatrixResult` whose keys are exactly the enumerated systems.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import cbor2

from sysmatrix.builders import (
    CatalogResolver,
    EnvShellComposer,
    FlakeOutputBuilder,
    OutputBuilder,
    PackageResolver,
    RustPackageBuilder,
    validate_output_map,
)
from sysmatrix.config import MatrixConfig
from sysmatrix.deps import DependencySet
from sysmatrix.errors import AggregateEvaluationError, LockfileError, PerSystemError, PolicyError
from sysmatrix.lockfile import build_lockfile, read_lockfile, write_lockfile
from sysmatrix.models import REQUIRED_OUTPUTS, OutputDescriptor, OutputMap
from sysmatrix.observability import StructuredLogger
from sysmatrix.policy import Policy, ensure_evaluate_policy
from sysmatrix.systems import SystemEnumerator, SystemId

SCHEMA_VERSION = 1


class MatrixResult(Mapping[SystemId, OutputMap]):
    """Read-only ``system -> output name -> descriptor`` map."""

    __slots__ = ("_outputs",)

    def __init__(self, outputs: Mapping[SystemId, OutputMap]) -> None:
        self._outputs: Mapping[SystemId, OutputMap] = MappingProxyType(
            {system: MappingProxyType(dict(items)) for system, items in outputs.items()}
        )

    def __getitem__(self, system: SystemId) -> OutputMap:
        return self._outputs[system]

    def __iter__(self) -> Iterator[SystemId]:
        return iter(self._outputs)

    def __len__(self) -> int:
        return len(self._outputs)

    def __repr__(self) -> str:
        return f"MatrixResult(systems={list(self._outputs)!r})"

    @property
    def systems(self) -> tuple[SystemId, ...]:
        return tuple(self._outputs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": SCHEMA_VERSION,
            "systems": {
                system: {name: outputs[name].to_dict() for name in sorted(outputs)}
                for system, outputs in self._outputs.items()
            },
        }

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self.to_dict(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self.to_dict(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def digest(self) -> str:
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class MatrixEvaluator:
    enumerator: SystemEnumerator
    builder: OutputBuilder
    deps: DependencySet
    policy: Policy = field(default_factory=Policy)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    required_outputs: tuple[str, ...] = REQUIRED_OUTPUTS
    config: MatrixConfig | None = None

    @classmethod
    def from_config(
        cls,
        config: MatrixConfig,
        builder: OutputBuilder | None = None,
        *,
        resolver: PackageResolver | None = None,
        logger: StructuredLogger | None = None,
    ) -> MatrixEvaluator:
        return cls(
            enumerator=SystemEnumerator(config.systems),
            builder=builder or default_output_builder(config, resolver=resolver),
            deps=config.dependencies,
            policy=config.policy,
            logger=logger or StructuredLogger(),
            required_outputs=config.outputs,
            config=config,
        )

    def evaluate(self, *, frozen: bool = False) -> MatrixResult:
        ensure_evaluate_policy(policy=self.policy, frozen=frozen)
        if frozen:
            self._assert_frozen_lock()

        systems = self.enumerator.list()
        parallel = self.policy.parallel and len(systems) > 1
        self.logger.log(
            operation="evaluate_start",
            system=None,
            message="Starting matrix evaluation.",
            extra={
                "systems": list(systems),
                "dependencies": list(self.deps.names()),
                "parallel": parallel,
            },
        )

        if parallel:
            outcomes = self._evaluate_parallel(systems)
        else:
            outcomes = [self._evaluate_system(system) for system in systems]

        failures: list[tuple[str, PerSystemError]] = []
        outputs: dict[SystemId, OutputMap] = {}
        for system, outcome in zip(systems, outcomes, strict=True):
            if isinstance(outcome, PerSystemError):
                failures.append((system, outcome))
            else:
                outputs[system] = outcome

        if failures:
            self.logger.log(
                operation="evaluate_failed",
                system=None,
                message="Matrix evaluation failed.",
                level="error",
                extra={"failed_systems": [system for system, _ in failures]},
            )
            raise AggregateEvaluationError(failures)

        self.logger.log(
            operation="evaluate_complete",
            system=None,
            message="Completed matrix evaluation.",
            extra={"systems": list(systems)},
        )
        return MatrixResult(outputs)

    def lock(self, path: str | Path | None = None, *, result: MatrixResult | None = None) -> Path:
        config = self._require_config(operation="lock")
        lock_path = Path(path) if path is not None else self.policy.lock_path
        return write_lockfile(build_lockfile(config, result), lock_path)

    def _evaluate_parallel(
        self,
        systems: tuple[SystemId, ...],
    ) -> list[OutputMap | PerSystemError]:
        workers = min(self.policy.max_workers, len(systems))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sysmatrix") as executor:
            futures = [executor.submit(self._evaluate_system, system) for system in systems]
            wait(futures)
        return [future.result() for future in futures]

    def _evaluate_system(self, system: SystemId) -> OutputMap | PerSystemError:
        self.logger.log(
            operation="build_system_start",
            system=system,
            message="Building outputs.",
        )
        try:
            raw = self.builder.build(system, self.deps)
            outputs = validate_output_map(
                raw,
                system=system,
                deps=self.deps,
                required=self.required_outputs,
            )
        except PerSystemError as exc:
            self.logger.log(
                operation="build_system_failed",
                system=system,
                message=exc.message,
                level="error",
                extra={"error": type(exc).__name__, "code": exc.code},
            )
            return exc

        for name, descriptor in outputs.items():
            self._log_output(system, name, descriptor)
        self.logger.log(
            operation="build_system_complete",
            system=system,
            message="Built outputs.",
            extra={"outputs": sorted(outputs)},
        )
        return outputs

    def _log_output(self, system: SystemId, name: str, descriptor: OutputDescriptor) -> None:
        self.logger.log(
            operation="build_output",
            system=system,
            output=name,
            message="Composed output.",
            extra={"kind": descriptor.kind, "dependencies": list(descriptor.deps.names())},
        )

    def _require_config(self, *, operation: str) -> MatrixConfig:
        if self.config is None:
            raise PolicyError(
                "Operation requires the evaluator to be built from a configuration.",
                hint="Construct the evaluator with MatrixEvaluator.from_config().",
                context={"operation": operation},
            )
        return self.config

    def _assert_frozen_lock(self) -> None:
        config = self._require_config(operation="evaluate")
        lock_path = self.policy.lock_path
        lock = read_lockfile(lock_path)
        current_digest = config.digest()
        if lock.config_digest != current_digest:
            raise LockfileError(
                "Frozen evaluation lockfile is stale for current configuration.",
                hint="Re-run lock() and commit the updated lockfile.",
                context={
                    "operation": "evaluate",
                    "mode": "frozen",
                    "expected": current_digest,
                    "actual": lock.config_digest,
                    "path": str(lock_path),
                },
            )


def default_output_builder(
    config: MatrixConfig,
    *,
    resolver: PackageResolver | None = None,
) -> FlakeOutputBuilder:
    resolver = resolver or CatalogResolver.from_entries()
    return FlakeOutputBuilder(
        package_builder=RustPackageBuilder(pname=config.name, version=config.version),
        resolver=resolver,
        composer=EnvShellComposer(resolver=resolver, env=dict(config.env)),
        input_sharing=config.input_sharing,
        dev_tools=config.dev_tools,
    )


def evaluate_matrix(
    config: MatrixConfig,
    builder: OutputBuilder | None = None,
    *,
    resolver: PackageResolver | None = None,
    logger: StructuredLogger | None = None,
    frozen: bool = False,
) -> MatrixResult:
    evaluator = MatrixEvaluator.from_config(config, builder, resolver=resolver, logger=logger)
    return evaluator.evaluate(frozen=frozen)


__all__ = [
    "MatrixEvaluator",
    "MatrixResult",
    "SCHEMA_VERSION",
    "default_output_builder",
    "evaluate_matrix",
]
