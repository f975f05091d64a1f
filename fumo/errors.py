"""
Exceptions raised by the Fumo simulation core.

All errors are detected at the call boundary and raised synchronously.
The solver performs no I/O, so nothing here is ever retried internally.
Numerical non-convergence of the relaxation solves is deliberately absent:
accuracy is bounded by ``SimulationParameters.solver_steps`` instead.
"""

from __future__ import annotations


class FumoError(ValueError):
    """Base class for invalid input to the simulation core."""


class InvalidResolutionError(FumoError):
    """Grid resolution N is not a positive integer."""


class SizeMismatchError(FumoError):
    """A caller-supplied buffer does not have (N+2)**2 cells."""


class InvalidTimeStepError(FumoError):
    """Time step is not a positive, finite number of seconds."""


class InvalidShapeParametersError(FumoError):
    """Emitter radius is not positive or its center lies outside the grid."""


class InvalidParametersError(FumoError):
    """A physical constant or option lies outside its allowed range."""


class UnknownSourceError(FumoError, KeyError):
    """No live emitter is registered under the given handle."""
