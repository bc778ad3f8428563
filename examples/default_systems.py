"""All four default systems; darwin fails because polkit is Linux-only."""

from sysmatrix import AggregateEvaluationError, DependencySet, MatrixConfig, evaluate_matrix


def evaluate_default_systems() -> None:
    config = MatrixConfig(
        name="mypolkit",
        dependencies=DependencySet.build(["glib", "polkit", "pkg-config", "cargo", "rustc"]),
    )
    try:
        evaluate_matrix(config)
    except AggregateEvaluationError as exc:
        print(exc)
        for system, error in exc.failures:
            print(system, error.to_dict())


if __name__ == "__main__":
    evaluate_default_systems()
