"""Sinks receiving the locations visited by a run."""

from __future__ import annotations

import logging
from typing import List, Tuple

import numpy as np

from ..logging import get_logger
from .core import Iteration, Location, Stats


class Recorder:
    """Write-only sink for the initial, major and final locations of a run.

    Exceptions raised by a recorder are logged by the driver and otherwise
    ignored.
    """

    def init(self) -> None:
        """Called once before the first record of a run."""

    def record(self, location: Location, iteration: Iteration, stats: Stats) -> None:
        raise NotImplementedError


class LoggingRecorder(Recorder):
    """Log one line per recorded location."""

    def __init__(self, level: int = logging.INFO, name: str = __name__) -> None:
        self.level = level
        self.logger = get_logger(name)

    def record(self, location: Location, iteration: Iteration, stats: Stats) -> None:
        if not self.logger.isEnabledFor(self.level):
            return
        message = (
            f"{iteration.value:>5} iter={stats.major_iterations} "
            f"nfev={stats.func_evaluations} njev={stats.grad_evaluations} "
            f"nhev={stats.hess_evaluations} f={location.f:.8g}"
        )
        if location.gradient is not None:
            grad_norm = float(np.max(np.abs(location.gradient))) if location.gradient.size else 0.0
            message += f" |grad|={grad_norm:.4g}"
        self.logger.log(self.level, message)


class HistoryRecorder(Recorder):
    """Keep a snapshot of every recorded location.

    Example
    -------
    >>> history = HistoryRecorder()
    >>> settings = Settings(recorder=history)  # doctest: +SKIP
    >>> minimize(problem, x0, settings=settings)  # doctest: +SKIP
    >>> history.fs  # doctest: +SKIP
    """

    def __init__(self) -> None:
        self.entries: List[Tuple[Iteration, Location, Stats]] = []

    def init(self) -> None:
        self.entries.clear()

    def record(self, location: Location, iteration: Iteration, stats: Stats) -> None:
        self.entries.append((iteration, location.copy(), stats.copy()))

    @property
    def iterations(self) -> List[Iteration]:
        return [entry[0] for entry in self.entries]

    @property
    def xs(self) -> List[np.ndarray]:
        return [entry[1].x for entry in self.entries]

    @property
    def fs(self) -> List[float]:
        return [entry[1].f for entry in self.entries]


__all__ = ["Recorder", "LoggingRecorder", "HistoryRecorder"]
