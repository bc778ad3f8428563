"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across API surfaces."""

    CONFIGURATION = "E_CONFIGURATION"
    PER_SYSTEM = "E_PER_SYSTEM"
    EVALUATION = "E_EVALUATION"
    QUERY = "E_QUERY"
    LOCKFILE = "E_LOCKFILE"
    POLICY = "E_POLICY"


class SysmatrixError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    @property
    def message(self) -> str:
        return super().__str__()

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


# ── Configuration ───────────────────────────────────────────────────


class ConfigurationError(SysmatrixError):
    """Fatal configuration problem; evaluation never starts."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.CONFIGURATION, hint=hint, context=context)


class NoSystemsConfiguredError(ConfigurationError):
    def __init__(self, message: str = "No target systems are configured.") -> None:
        super().__init__(
            message,
            hint="List at least one system identifier such as 'x86_64-linux'.",
            context={"operation": "list_systems"},
        )


class DuplicateDependencyError(ConfigurationError):
    def __init__(self, name: str, *, existing: str | None, conflicting: str | None) -> None:
        super().__init__(
            f"Dependency {name!r} is declared with conflicting version constraints.",
            hint="Declare each dependency once or use identical constraints.",
            context={
                "dependency": name,
                "existing": existing or "<any>",
                "conflicting": conflicting or "<any>",
            },
        )
        self.name = name
        self.existing = existing
        self.conflicting = conflicting


# ── Per-system evaluation ───────────────────────────────────────────


class PerSystemError(SysmatrixError):
    """Failure confined to one system; collected by the matrix evaluator."""

    system: str

    def __init__(
        self,
        message: str,
        *,
        system: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        merged = {"system": system, **dict(context or {})}
        super().__init__(message, code=ErrorCode.PER_SYSTEM, hint=hint, context=merged)
        self.system = system


class UnsupportedSystemError(PerSystemError):
    pass


class ResolutionError(PerSystemError):
    def __init__(
        self,
        message: str,
        *,
        system: str,
        dependency: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            system=system,
            hint=hint,
            context={"dependency": dependency, **dict(context or {})},
        )
        self.dependency = dependency


class InvalidOutputError(PerSystemError):
    """The output builder returned something that breaks its contract."""


class AggregateEvaluationError(SysmatrixError):
    """Every per-system failure of one evaluation, in enumeration order."""

    def __init__(self, failures: Sequence[tuple[str, PerSystemError]]) -> None:
        self.failures: tuple[tuple[str, PerSystemError], ...] = tuple(failures)
        systems = ", ".join(system for system, _ in self.failures)
        super().__init__(
            f"Evaluation failed for {len(self.failures)} system(s): {systems}.",
            code=ErrorCode.EVALUATION,
            hint="Fix every listed system; no partial result was produced.",
            context={"operation": "evaluate"},
        )

    @property
    def failed_systems(self) -> tuple[str, ...]:
        return tuple(system for system, _ in self.failures)

    def __str__(self) -> str:
        lines = [super().__str__()]
        for system, error in self.failures:
            lines.append(f"- {system}: {type(error).__name__}: {error.message}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["failures"] = [
            {"system": system, **error.to_dict()} for system, error in self.failures
        ]
        return payload


# ── Registry queries ────────────────────────────────────────────────


class QueryError(SysmatrixError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.QUERY, hint=hint, context=context)


class UnknownSystemError(QueryError):
    def __init__(self, system: str, *, available: Sequence[str] = ()) -> None:
        super().__init__(
            f"System {system!r} is not part of the evaluated matrix.",
            hint="Query one of the evaluated systems.",
            context={"system": system, "available": ",".join(available)},
        )
        self.system = system


class UnknownOutputError(QueryError):
    def __init__(self, system: str, output: str, *, available: Sequence[str] = ()) -> None:
        super().__init__(
            f"Output {output!r} does not exist for system {system!r}.",
            hint="Call list_outputs(system) to see the available names.",
            context={"system": system, "output": output, "available": ",".join(available)},
        )
        self.system = system
        self.output = output


# ── Lockfile and policy ─────────────────────────────────────────────


class LockfileError(SysmatrixError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.LOCKFILE, hint=hint, context=context)


class PolicyError(SysmatrixError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.POLICY, hint=hint, context=context)


__all__ = [
    "AggregateEvaluationError",
    "ConfigurationError",
    "DuplicateDependencyError",
    "ErrorCode",
    "InvalidOutputError",
    "LockfileError",
    "NoSystemsConfiguredError",
    "PerSystemError",
    "PolicyError",
    "QueryError",
    "ResolutionError",
    "SysmatrixError",
    "UnknownOutputError",
    "UnknownSystemError",
    "UnsupportedSystemError",
]
