from dataclasses import replace
from pathlib import Path

import pytest

from conftest import StubBuilder
from sysmatrix.config import MatrixConfig
from sysmatrix.deps import DependencySet
from sysmatrix.errors import LockfileError, PolicyError
from sysmatrix.lockfile import (
    LockedInput,
    build_lockfile,
    parse_lockfile,
    read_lockfile,
    serialize_lockfile,
)
from sysmatrix.matrix import MatrixEvaluator
from sysmatrix.policy import Policy
from sysmatrix.systems import SystemEnumerator


def _with_lock_path(config: MatrixConfig, path: Path, **policy: bool) -> MatrixConfig:
    return replace(config, policy=Policy(lock_path=path, **policy))


def test_lockfile_parser_reads_serialized_form(linux_config: MatrixConfig) -> None:
    lock = build_lockfile(linux_config)
    lock = replace(
        lock,
        inputs=[LockedInput(system="x86_64-linux", name="glib", version="2.80.2", store_path="/s")],
    )

    assert parse_lockfile(serialize_lockfile(lock)) == lock


def test_lock_pins_resolved_inputs_per_system(tmp_path: Path, linux_config: MatrixConfig) -> None:
    config = _with_lock_path(linux_config, tmp_path / "sysmatrix.lock")
    evaluator = MatrixEvaluator.from_config(config)
    result = evaluator.evaluate()

    lock = read_lockfile(evaluator.lock(result=result))

    assert lock.version == 1
    assert lock.config_digest == config.digest()
    assert lock.systems == ["x86_64-linux", "aarch64-linux"]
    assert [item.name for item in lock.inputs_for("x86_64-linux")] == [
        "glib",
        "polkit",
        "pkg-config",
        "cargo",
        "rustc",
    ]
    assert all(item.store_path.startswith("/nix/store/") for item in lock.inputs)


def test_evaluate_frozen_fails_when_lock_missing(
    tmp_path: Path,
    linux_config: MatrixConfig,
) -> None:
    config = _with_lock_path(linux_config, tmp_path / "sysmatrix.lock")

    with pytest.raises(LockfileError):
        MatrixEvaluator.from_config(config).evaluate(frozen=True)


def test_evaluate_frozen_fails_when_lock_is_stale(
    tmp_path: Path,
    linux_config: MatrixConfig,
) -> None:
    config = _with_lock_path(linux_config, tmp_path / "sysmatrix.lock")
    MatrixEvaluator.from_config(config).lock()
    changed = replace(config, dependencies=config.dependencies.with_refs("rustfmt"))

    with pytest.raises(LockfileError) as excinfo:
        MatrixEvaluator.from_config(changed).evaluate(frozen=True)

    assert "stale" in str(excinfo.value).lower()


def test_evaluate_frozen_succeeds_with_current_lock(
    tmp_path: Path,
    linux_config: MatrixConfig,
) -> None:
    config = _with_lock_path(linux_config, tmp_path / "sysmatrix.lock")
    evaluator = MatrixEvaluator.from_config(config)
    evaluator.lock()

    result = evaluator.evaluate(frozen=True)

    assert result.systems == config.systems


def test_policy_requires_frozen_lock(tmp_path: Path, linux_config: MatrixConfig) -> None:
    config = _with_lock_path(linux_config, tmp_path / "sysmatrix.lock", require_frozen_lock=True)
    evaluator = MatrixEvaluator.from_config(config)

    with pytest.raises(PolicyError):
        evaluator.evaluate()

    evaluator.lock()
    assert evaluator.evaluate(frozen=True).systems == config.systems


def test_lock_requires_configuration(shared_deps: DependencySet, tmp_path: Path) -> None:
    evaluator = MatrixEvaluator(
        enumerator=SystemEnumerator.of("x86_64-linux"),
        builder=StubBuilder(),
        deps=shared_deps,
    )

    with pytest.raises(PolicyError):
        evaluator.lock(tmp_path / "sysmatrix.lock")


@pytest.mark.parametrize(
    "raw",
    [
        "{",
        "[]",
        '{"version": "1"}',
        '{"version": 1, "config_digest": "abc", "config": {}, "systems": [1]}',
        '{"version": 1, "config_digest": "abc", "config": {}, "systems": [], "inputs": [{}]}',
    ],
)
def test_malformed_lockfiles_are_rejected(raw: str) -> None:
    with pytest.raises(LockfileError):
        parse_lockfile(raw)
