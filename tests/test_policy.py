from pathlib import Path

import pytest

from sysmatrix.errors import ConfigurationError, PolicyError
from sysmatrix.policy import DEFAULT_LOCK_PATH, Policy, ensure_evaluate_policy


def test_policy_defaults() -> None:
    policy = Policy()

    assert policy.parallel is False
    assert policy.max_workers == 4
    assert policy.lock_path == DEFAULT_LOCK_PATH


def test_policy_normalizes_lock_path() -> None:
    assert Policy(lock_path="build/x.lock").lock_path == Path("build/x.lock")  # type: ignore[arg-type]


@pytest.mark.parametrize("workers", [0, -1, True, "4"])
def test_policy_rejects_invalid_worker_counts(workers: object) -> None:
    with pytest.raises(ConfigurationError):
        Policy(max_workers=workers)  # type: ignore[arg-type]


def test_frozen_requirement_is_enforced() -> None:
    policy = Policy(require_frozen_lock=True)

    with pytest.raises(PolicyError):
        ensure_evaluate_policy(policy=policy, frozen=False)
    ensure_evaluate_policy(policy=policy, frozen=True)
