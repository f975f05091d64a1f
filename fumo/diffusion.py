"""
Implicit diffusion by iterative relaxation.

Physical Background
-------------------
Diffusion of a quantity x with coefficient k obeys

    dx/dt = k * laplacian(x)

Integrating it explicitly is only stable for dt < h^2 / (4k). Taking the
backward-Euler step instead gives the linear system

    x - k * dt * laplacian(x) = x0

which is stable for any dt. On the grid (spacing h = 1/N) each interior
equation reads

    (1 + 4a) x[i,j] - a * (x[i-1,j] + x[i+1,j] + x[i,j-1] + x[i,j+1]) = x0[i,j]

with a = k * dt * N^2. The system is solved approximately with a fixed
number of Gauss-Seidel sweeps in red-black order: all cells with even
``i + j`` are updated first, then the odd cells read the freshly written
even values. Fewer sweeps under-diffuse; the budget is the caller's choice.
"""

from __future__ import annotations

import logging

import numpy as np

from fumo.boundary import apply_boundary
from fumo.grid import FieldKind, GridFields, as_grid
from fumo.mixing import CoefficientKind, coefficient_field
from fumo.parameters import SimulationParameters

logger = logging.getLogger(__name__)


_CHECKERBOARDS: dict[int, tuple[np.ndarray, np.ndarray]] = {}


def _checkerboard(n: int) -> tuple[np.ndarray, np.ndarray]:
    """Red and black masks over the ``(N, N)`` interior."""
    if n not in _CHECKERBOARDS:
        j, i = np.indices((n, n))
        red = (i + j) % 2 == 0
        _CHECKERBOARDS[n] = (red, ~red)
    return _CHECKERBOARDS[n]


def relax(
    kind: FieldKind,
    x: np.ndarray,
    x0: np.ndarray,
    a,
    c,
    n: int,
    iterations: int,
) -> np.ndarray:
    """
    Relax ``c*x - a*sum(neighbours of x) = x0`` over the interior.

    Parameters
    ----------
    kind : FieldKind
        Boundary rule re-applied after every sweep.
    x : np.ndarray
        Flat unknown, updated in place. Its current contents are the
        initial guess.
    x0 : np.ndarray
        Flat right-hand side, never modified.
    a, c : float or np.ndarray
        Neighbour weight and diagonal, scalars or ``(N, N)`` arrays.
    n : int
        Interior resolution.
    iterations : int
        Number of full (red + black) sweeps.

    Returns
    -------
    np.ndarray
        ``x``.
    """
    g = as_grid(x, n)
    rhs = as_grid(x0, n)[1:-1, 1:-1]
    interior = g[1:-1, 1:-1]

    for _ in range(iterations):
        for mask in _checkerboard(n):
            neighbours = g[:-2, 1:-1] + g[2:, 1:-1] + g[1:-1, :-2] + g[1:-1, 2:]
            update = (rhs + a * neighbours) / c
            interior[mask] = update[mask]
        apply_boundary(kind, x, n)

    return x


def diffuse(
    kind: FieldKind,
    current: np.ndarray,
    previous: np.ndarray,
    coefficient: CoefficientKind,
    dt: float,
    params: SimulationParameters,
    fields: GridFields,
    n: int,
) -> np.ndarray:
    """
    Diffuse ``previous`` into ``current`` over one time step.

    The coefficient strategy is resolved once, from the mixed state at the
    time of the call, so the relaxed system stays linear.

    Parameters
    ----------
    kind : FieldKind
        Boundary rule of the field.
    current : np.ndarray
        Destination buffer (also the initial guess).
    previous : np.ndarray
        Field value before diffusion (right-hand side x0).
    coefficient : CoefficientKind
        Which transport coefficient to use.
    dt : float
        Time step (s).
    params : SimulationParameters
        Physical constants and solver options.
    fields : GridFields
        State read by state-dependent coefficients.
    n : int
        Interior resolution.

    Returns
    -------
    np.ndarray
        ``current``.
    """
    k = coefficient_field(coefficient, params, fields, n)
    a = dt * k * n * n / (params.length_scale * params.length_scale)

    if np.isscalar(a) and a == 0.0:
        # Zero diffusivity: the implicit system is the identity
        current[:] = previous
        apply_boundary(kind, current, n)
        return current

    logger.debug(
        "Diffusing %s with %s (max a=%.3e, %d sweeps)",
        kind.name, CoefficientKind(coefficient).value, float(np.max(a)), params.solver_steps,
    )
    return relax(kind, current, previous, a, 1.0 + 4.0 * a, n, params.solver_steps)
