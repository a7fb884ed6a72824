"""Interface implemented by optimization methods."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .core import Location, Needs, Request


class Method(ABC):
    """An optimization algorithm driven by :class:`~optdrive.optimize.driver.IterationDriver`.

    The driver hands the method a :class:`Location` and the method answers
    with the next request:

    * an :class:`~optdrive.optimize.core.Evaluation` after writing the point
      to evaluate into ``location.x``; the driver fills in the requested
      values and calls :meth:`iterate` again;
    * ``Iteration.MAJOR`` when ``location`` holds the next candidate, which
      the driver then convergence-checks.

    The location's arrays are reused by the driver, so anything that must
    survive to a later call has to be copied.
    """

    @abstractmethod
    def needs(self) -> Needs:
        """Derivative information the method reads from the location."""

    @abstractmethod
    def init(self, location: Location) -> Request:
        """Start from a fully evaluated initial location."""

    @abstractmethod
    def iterate(self, location: Location) -> Request:
        """Continue after the previous request was served."""


__all__ = ["Method"]
