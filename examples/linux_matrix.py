"""Evaluate the mypolkit configuration and inspect its outputs."""

from pathlib import Path

from sysmatrix import OutputRegistry, evaluate_matrix, load_config
from sysmatrix.compiler import write_flake
from sysmatrix.observability import StructuredLogger

HERE = Path(__file__).parent


def evaluate_linux_matrix() -> None:
    config = load_config(HERE / "mypolkit.json")
    logger = StructuredLogger()
    result = evaluate_matrix(config, logger=logger)

    registry = OutputRegistry(result)
    for system in registry.systems():
        shell = registry.get(system, "devShell")
        print(system, sorted(registry.list_outputs(system)), shell.deps.names())

    write_flake(config, HERE / "build")
    result.to_json(HERE / "build" / "matrix.json")
    logger.to_json_lines(HERE / "build" / "evaluate.jsonl")


if __name__ == "__main__":
    evaluate_linux_matrix()
