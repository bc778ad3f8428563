import pytest

from conftest import StubBuilder
from sysmatrix.deps import DependencySet
from sysmatrix.errors import QueryError, UnknownOutputError, UnknownSystemError
from sysmatrix.matrix import MatrixEvaluator, MatrixResult
from sysmatrix.registry import OutputRegistry
from sysmatrix.systems import SystemEnumerator


@pytest.fixture
def result(shared_deps: DependencySet) -> MatrixResult:
    evaluator = MatrixEvaluator(
        enumerator=SystemEnumerator.of("x86_64-linux", "aarch64-darwin"),
        builder=StubBuilder(),
        deps=shared_deps,
    )
    return evaluator.evaluate()


def test_get_returns_descriptor_built_for_that_system(result: MatrixResult) -> None:
    registry = OutputRegistry(result)

    descriptor = registry.get("x86_64-linux", "package")

    assert descriptor is result["x86_64-linux"]["package"]
    assert descriptor.system == "x86_64-linux"
    assert descriptor.kind == "package"


def test_get_unknown_output_fails(result: MatrixResult) -> None:
    registry = OutputRegistry(result)

    with pytest.raises(UnknownOutputError) as excinfo:
        registry.get("x86_64-linux", "nonexistent")

    assert isinstance(excinfo.value, QueryError)
    assert excinfo.value.code == "E_QUERY"
    assert excinfo.value.context["available"] == "devShell,package"


def test_get_unknown_system_fails(result: MatrixResult) -> None:
    registry = OutputRegistry(result)

    with pytest.raises(UnknownSystemError):
        registry.get("riscv64-linux", "package")
    with pytest.raises(UnknownSystemError):
        registry.list_outputs("riscv64-linux")


def test_list_outputs_enumerates_names(result: MatrixResult) -> None:
    registry = OutputRegistry(result)

    assert registry.list_outputs("aarch64-darwin") == {"package", "devShell"}
    assert registry.systems() == ("x86_64-linux", "aarch64-darwin")


def test_failed_queries_leave_result_untouched(result: MatrixResult) -> None:
    registry = OutputRegistry(result)
    before = result.to_dict()

    with pytest.raises(QueryError):
        registry.get("x86_64-linux", "nonexistent")

    assert result.to_dict() == before
    assert registry.list_outputs("x86_64-linux") == {"package", "devShell"}


def test_attr_paths_flatten_the_matrix(result: MatrixResult) -> None:
    registry = OutputRegistry(result)

    paths = registry.attr_paths()

    assert sorted(paths) == [
        "devShell.aarch64-darwin",
        "devShell.x86_64-linux",
        "package.aarch64-darwin",
        "package.x86_64-linux",
    ]
    assert paths["devShell.x86_64-linux"] is result["x86_64-linux"]["devShell"]
