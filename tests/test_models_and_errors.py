from sysmatrix.deps import DependencySet
from sysmatrix.errors import (
    AggregateEvaluationError,
    ConfigurationError,
    DuplicateDependencyError,
    ErrorCode,
    InvalidOutputError,
    LockfileError,
    NoSystemsConfiguredError,
    PerSystemError,
    PolicyError,
    ResolutionError,
    UnknownOutputError,
    UnknownSystemError,
    UnsupportedSystemError,
)
from sysmatrix.models import OutputDescriptor, ShellSpec
from sysmatrix.systems import SystemId


def test_error_codes_are_stable_and_machine_readable() -> None:
    errors = [
        ConfigurationError("bad input"),
        NoSystemsConfiguredError(),
        DuplicateDependencyError("glib", existing="2.80", conflicting=None),
        UnsupportedSystemError("no toolchain", system="riscv64-linux"),
        ResolutionError("missing", system="x86_64-linux", dependency="glib"),
        InvalidOutputError("bad output", system="x86_64-linux"),
        UnknownSystemError("riscv64-linux"),
        UnknownOutputError("x86_64-linux", "docs"),
        LockfileError("lock mismatch"),
        PolicyError("policy"),
    ]
    assert [error.code for error in errors] == [
        ErrorCode.CONFIGURATION.value,
        ErrorCode.CONFIGURATION.value,
        ErrorCode.CONFIGURATION.value,
        ErrorCode.PER_SYSTEM.value,
        ErrorCode.PER_SYSTEM.value,
        ErrorCode.PER_SYSTEM.value,
        ErrorCode.QUERY.value,
        ErrorCode.QUERY.value,
        ErrorCode.LOCKFILE.value,
        ErrorCode.POLICY.value,
    ]


def test_per_system_errors_carry_their_system() -> None:
    error = ResolutionError(
        "Dependency 'polkit' is not available.",
        system="aarch64-darwin",
        dependency="polkit",
        hint="Drop the system.",
    )

    assert isinstance(error, PerSystemError)
    assert error.system == "aarch64-darwin"
    assert error.context == {"system": "aarch64-darwin", "dependency": "polkit"}
    assert error.message == "Dependency 'polkit' is not available."
    assert str(error).splitlines() == [
        "Dependency 'polkit' is not available.",
        "Hint: Drop the system.",
        "  system: aarch64-darwin",
        "  dependency: polkit",
    ]


def test_aggregate_error_lists_every_failure() -> None:
    first = UnsupportedSystemError("no toolchain", system="riscv64-linux")
    second = ResolutionError("missing polkit", system="x86_64-darwin", dependency="polkit")

    error = AggregateEvaluationError([("riscv64-linux", first), ("x86_64-darwin", second)])

    assert error.code == ErrorCode.EVALUATION.value
    assert error.failed_systems == ("riscv64-linux", "x86_64-darwin")
    text = str(error)
    assert "2 system(s): riscv64-linux, x86_64-darwin" in text
    assert "- riscv64-linux: UnsupportedSystemError: no toolchain" in text
    assert "- x86_64-darwin: ResolutionError: missing polkit" in text
    payload = error.to_dict()
    assert payload["code"] == "E_EVALUATION"
    assert [item["code"] for item in payload["failures"]] == ["E_PER_SYSTEM", "E_PER_SYSTEM"]


def test_descriptor_serializes_dependencies_in_set_order() -> None:
    deps = DependencySet.build(["glib", "polkit@124"])
    system = SystemId("x86_64-linux")
    descriptor = OutputDescriptor(
        name="devShell",
        kind="devShell",
        system=system,
        deps=deps,
        payload=ShellSpec(system=system, env={"B": "2", "A": "1"}, path=("/bin",)),
    )

    payload = descriptor.to_dict()

    assert payload["dependencies"] == ["glib", "polkit@124"]
    assert payload["payload"] == {"inputs": [], "env": {"A": "1", "B": "2"}, "path": ["/bin"]}
    assert descriptor.deps is deps
