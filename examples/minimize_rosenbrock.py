"""
Example: Minimizing the Rosenbrock function with optdrive

Runs gradient descent, BFGS, L-BFGS and damped Newton on the same problem,
prints the per-iteration log for one run and compares how each method
terminates.
"""

import logging

import numpy as np

from optdrive import (
    BFGS,
    LBFGS,
    GradientDescent,
    HistoryRecorder,
    LoggingRecorder,
    Newton,
    Problem,
    Settings,
    configure_logging,
    minimize,
)


def rosen(x):
    return (1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2


def rosen_grad(x, out):
    out[0] = -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2)
    out[1] = 200 * (x[1] - x[0] ** 2)


def rosen_hess(x, out):
    out[0, 0] = 1200 * x[0] ** 2 - 400 * x[1] + 2
    out[0, 1] = out[1, 0] = -400 * x[0]
    out[1, 1] = 200


def example_logged_run(problem, x0):
    """Example: A single BFGS run with an iteration log."""
    print("=" * 60)
    print("Example 1: BFGS with a logging recorder")
    print("=" * 60)

    configure_logging(level=logging.INFO)
    settings = Settings(recorder=LoggingRecorder(), major_iterations=200)
    result = minimize(problem, x0, BFGS(), settings)
    configure_logging(level=logging.WARNING)

    print(f"Status: {result.status.value} ({result.message})")
    print(f"x = {result.x}, f = {result.f:.3e}")
    print()


def example_method_comparison(problem, x0):
    """Example: Compare methods on the same starting point."""
    print("=" * 60)
    print("Example 2: Method comparison")
    print("=" * 60)

    methods = {
        "gradient descent": GradientDescent(),
        "BFGS": BFGS(),
        "L-BFGS": LBFGS(m=5),
        "Newton": Newton(lambda_reg=1e-4),
    }
    settings = Settings(major_iterations=5000)
    for name, method in methods.items():
        result = minimize(problem, x0, method, settings)
        stats = result.stats
        print(
            f"{name:>16}: {result.status.value:<22} iters={stats.major_iterations:<5d} "
            f"nfev={stats.func_evaluations:<6d} njev={stats.grad_evaluations:<5d} "
            f"f={result.f:.3e}"
        )
    print()


def example_history(problem, x0):
    """Example: Inspect the recorded trajectory."""
    print("=" * 60)
    print("Example 3: Recorded trajectory")
    print("=" * 60)

    history = HistoryRecorder()
    minimize(problem, x0, Newton(lambda_reg=1e-4), Settings(recorder=history))
    for iteration, x, f in list(zip(history.iterations, history.xs, history.fs))[:5]:
        print(f"{iteration.value:>5}: x = {np.array2string(x, precision=4)}, f = {f:.4e}")
    print(f"... {len(history.iterations)} records in total")
    print()


def main():
    problem = Problem(fun=rosen, grad=rosen_grad, hess=rosen_hess, dim=2)
    x0 = np.array([-1.2, 1.0])

    example_logged_run(problem, x0)
    example_method_comparison(problem, x0)
    example_history(problem, x0)
    print("All examples completed")


if __name__ == "__main__":
    main()
