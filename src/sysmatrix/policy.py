"""Evaluation policy configuration and enforcement helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from sysmatrix.errors import ConfigurationError, PolicyError

DEFAULT_LOCK_PATH = Path("sysmatrix.lock")


@dataclass(frozen=True, slots=True)
class Policy:
    parallel: bool = False
    max_workers: int = 4
    require_frozen_lock: bool = False
    lock_path: Path = DEFAULT_LOCK_PATH

    def __post_init__(self) -> None:
        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int):
            raise ConfigurationError(
                "Policy max_workers must be an integer.",
                context={"max_workers": repr(self.max_workers)},
            )
        if self.max_workers < 1:
            raise ConfigurationError(
                "Policy max_workers must be at least 1.",
                context={"max_workers": str(self.max_workers)},
            )
        object.__setattr__(self, "lock_path", Path(self.lock_path))


def ensure_evaluate_policy(*, policy: Policy, frozen: bool) -> None:
    if policy.require_frozen_lock and not frozen:
        raise PolicyError(
            "Frozen lock mode is required by policy.",
            hint="Call evaluate(frozen=True) or relax policy.require_frozen_lock.",
            context={"operation": "evaluate"},
        )
