import numpy as np
import pytest

from optdrive.optimize import (
    FunctionConverge,
    Location,
    ProblemFailure,
    Settings,
    StagnationTracker,
    Stats,
    Status,
    check_convergence,
    check_thresholds,
    gradient_norm,
)


def make_tracker(settings: Settings, f0: float) -> StagnationTracker:
    tracker = StagnationTracker(settings.function_converge)
    tracker.reset(f0)
    return tracker


def test_gradient_norm_is_infinity_norm():
    assert gradient_norm(np.array([0.5, -3.0, 2.0])) == 3.0
    assert gradient_norm(np.array([])) == 0.0


def test_function_threshold_success():
    settings = Settings(function_threshold=-10.0, function_converge=None)
    loc = Location(x=np.zeros(1), f=-12.0)
    status = check_convergence(loc, Stats(), settings, make_tracker(settings, 0.0))
    assert status is Status.FUNCTION_THRESHOLD


def test_gradient_threshold_is_inclusive():
    settings = Settings(gradient_threshold=1e-6, function_converge=None)
    loc = Location(x=np.zeros(2), f=1.0, gradient=np.array([1e-6, -1e-7]))
    assert check_thresholds(loc, settings) is Status.GRADIENT_THRESHOLD
    loc.gradient[0] = 1.1e-6
    assert check_thresholds(loc, settings) is Status.NOT_TERMINATED


def test_gradient_threshold_ignored_without_gradient():
    settings = Settings(gradient_threshold=1e6, function_converge=None)
    loc = Location(x=np.zeros(2), f=1.0)
    assert check_thresholds(loc, settings) is Status.NOT_TERMINATED


def test_failure_has_highest_priority():
    settings = Settings(function_threshold=10.0)
    loc = Location(x=np.zeros(1), f=0.0, gradient=np.zeros(1))
    failure = ProblemFailure(Status.FAILURE, RuntimeError("abort"))
    status = check_convergence(loc, Stats(), settings, make_tracker(settings, 1.0), failure=failure)
    assert status is Status.FAILURE


def test_failure_without_terminal_status_maps_to_failure():
    settings = Settings()
    failure = ProblemFailure(Status.NOT_TERMINATED, RuntimeError("abort"))
    loc = Location(x=np.zeros(1), f=0.0)
    status = check_convergence(loc, Stats(), settings, make_tracker(settings, 1.0), failure=failure)
    assert status is Status.FAILURE


def test_gradient_threshold_beats_iteration_limit():
    settings = Settings(gradient_threshold=1e-6, major_iterations=3, function_converge=None)
    loc = Location(x=np.zeros(2), f=1.0, gradient=np.zeros(2))
    stats = Stats(major_iterations=3)
    status = check_convergence(loc, stats, settings, make_tracker(settings, 2.0))
    assert status is Status.GRADIENT_THRESHOLD


def test_function_threshold_beats_gradient_threshold():
    settings = Settings(function_threshold=0.0, gradient_threshold=1.0)
    loc = Location(x=np.zeros(1), f=-1.0, gradient=np.zeros(1))
    status = check_convergence(loc, Stats(), settings, make_tracker(settings, 0.0))
    assert status is Status.FUNCTION_THRESHOLD


def test_stagnation_beats_limits():
    settings = Settings(
        function_converge=FunctionConverge(absolute=1e-3, iterations=1),
        major_iterations=1,
    )
    loc = Location(x=np.zeros(1), f=1.0)
    status = check_convergence(loc, Stats(major_iterations=1), settings, make_tracker(settings, 1.0))
    assert status is Status.FUNCTION_CONVERGENCE


def test_stagnation_fires_exactly_at_window():
    settings = Settings(function_converge=FunctionConverge(absolute=1e-3, iterations=20))
    tracker = StagnationTracker(settings.function_converge)
    values = [5.0 - 1e-4 * (i % 2) for i in range(21)]
    statuses = []
    for f in values:
        loc = Location(x=np.zeros(1), f=f)
        statuses.append(check_convergence(loc, Stats(), settings, tracker))
    assert statuses[:20] == [Status.NOT_TERMINATED] * 20
    assert statuses[20] is Status.FUNCTION_CONVERGENCE
    assert tracker.count == 20


def test_significant_decrease_resets_counter():
    settings = Settings(function_converge=FunctionConverge(absolute=1e-3, iterations=2))
    tracker = make_tracker(settings, 10.0)
    for i in range(1, 200):
        loc = Location(x=np.zeros(1), f=10.0 - 0.01 * i)
        assert check_convergence(loc, Stats(), settings, tracker) is Status.NOT_TERMINATED
        assert tracker.count == 0
        assert tracker.best == pytest.approx(10.0 - 0.01 * i)


def test_relative_tolerance_scales_with_magnitude():
    rule = FunctionConverge(absolute=0.0, relative=1e-2, iterations=5)
    tracker = StagnationTracker(rule)
    tracker.reset(1000.0)
    assert not tracker.update(995.0)
    assert tracker.count == 1
    assert tracker.best == 1000.0
    assert not tracker.update(980.0)
    assert tracker.count == 0
    assert tracker.best == 980.0


def test_increase_counts_as_stagnation():
    tracker = StagnationTracker(FunctionConverge(absolute=0.0, iterations=3))
    tracker.reset(1.0)
    assert not tracker.update(2.0)
    assert not tracker.update(3.0)
    assert tracker.update(1.5)
    assert tracker.best == 1.0


@pytest.mark.parametrize("rule", [None, FunctionConverge(iterations=0)])
def test_disabled_limits_never_fire(rule):
    settings = Settings(function_converge=rule, gradient_threshold=0.0)
    tracker = StagnationTracker(rule)
    tracker.reset(1.0)
    stats = Stats()
    loc = Location(x=np.zeros(1), f=1.0, gradient=np.ones(1))
    for _ in range(1000):
        stats.major_iterations += 1
        stats.func_evaluations += 3
        stats.grad_evaluations += 2
        stats.hess_evaluations += 1
        stats.runtime += 10.0
        assert check_convergence(loc, stats, settings, tracker) is Status.NOT_TERMINATED


def test_iteration_limit_reached_at_cap():
    settings = Settings(major_iterations=5, function_converge=None)
    tracker = make_tracker(settings, 1.0)
    loc = Location(x=np.zeros(1), f=1.0)
    assert check_convergence(loc, Stats(major_iterations=4), settings, tracker) is Status.NOT_TERMINATED
    assert check_convergence(loc, Stats(major_iterations=5), settings, tracker) is Status.ITERATION_LIMIT


def test_runtime_limit_requires_exceeding():
    settings = Settings(runtime=1.0, function_converge=None)
    tracker = make_tracker(settings, 1.0)
    loc = Location(x=np.zeros(1), f=1.0)
    assert check_convergence(loc, Stats(runtime=1.0), settings, tracker) is Status.NOT_TERMINATED
    assert check_convergence(loc, Stats(runtime=1.5), settings, tracker) is Status.RUNTIME_LIMIT


def test_iteration_limit_beats_runtime_and_evaluation_limits():
    settings = Settings(
        major_iterations=1,
        runtime=1.0,
        func_evaluations=1,
        function_converge=None,
    )
    stats = Stats(major_iterations=1, runtime=2.0, func_evaluations=1)
    loc = Location(x=np.zeros(1), f=1.0)
    assert check_convergence(loc, stats, settings, make_tracker(settings, 1.0)) is Status.ITERATION_LIMIT


@pytest.mark.parametrize(
    "field, limit_status",
    [
        ("func_evaluations", Status.FUNCTION_EVALUATION_LIMIT),
        ("grad_evaluations", Status.GRADIENT_EVALUATION_LIMIT),
        ("hess_evaluations", Status.HESSIAN_EVALUATION_LIMIT),
    ],
)
def test_evaluation_limits(field, limit_status):
    settings = Settings(function_converge=None, **{field: 4})
    tracker = make_tracker(settings, 1.0)
    loc = Location(x=np.zeros(1), f=1.0)
    assert check_convergence(loc, Stats(**{field: 3}), settings, tracker) is Status.NOT_TERMINATED
    assert check_convergence(loc, Stats(**{field: 4}), settings, tracker) is limit_status


def test_evaluation_limits_checked_in_order():
    settings = Settings(function_converge=None, func_evaluations=1, grad_evaluations=1, hess_evaluations=1)
    stats = Stats(func_evaluations=1, grad_evaluations=1, hess_evaluations=1)
    loc = Location(x=np.zeros(1), f=1.0)
    status = check_convergence(loc, stats, settings, make_tracker(settings, 1.0))
    assert status is Status.FUNCTION_EVALUATION_LIMIT
