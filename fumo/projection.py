"""
Helmholtz-Hodge projection of the velocity field.

Any velocity field splits into a divergence-free part and the gradient of
a scalar potential p. Solving

    laplacian(p) = div(u)

and subtracting grad(p) leaves the divergence-free (mass conserving) part.
The Poisson equation is relaxed with the same red-black Gauss-Seidel kernel
used for diffusion, so the result is only as divergence-free as the
iteration budget allows.
"""

from __future__ import annotations

import logging

import numpy as np

from fumo.boundary import apply_boundary
from fumo.diffusion import relax
from fumo.grid import FieldKind, as_grid

logger = logging.getLogger(__name__)


def divergence(x_vel: np.ndarray, y_vel: np.ndarray, n: int) -> np.ndarray:
    """
    Central-difference divergence over the interior.

    Returns
    -------
    np.ndarray
        ``(N, N)`` array of ``du/dx + dv/dy`` in domain units (1/s).
    """
    u = as_grid(x_vel, n)
    v = as_grid(y_vel, n)
    return 0.5 * n * (
        u[1:-1, 2:] - u[1:-1, :-2]
        + v[2:, 1:-1] - v[:-2, 1:-1]
    )


def project(
    x_vel: np.ndarray,
    y_vel: np.ndarray,
    pressure: np.ndarray,
    div: np.ndarray,
    n: int,
    iterations: int,
) -> None:
    """
    Remove the gradient component of the velocity field in place.

    Parameters
    ----------
    x_vel, y_vel : np.ndarray
        Flat velocity components, corrected in place.
    pressure, div : np.ndarray
        Flat scratch buffers; overwritten.
    n : int
        Interior resolution.
    iterations : int
        Relaxation sweeps for the Poisson solve.
    """
    logger.debug("Projecting velocity field (%d sweeps)", iterations)
    h = 1.0 / n
    u = as_grid(x_vel, n)
    v = as_grid(y_vel, n)
    p = as_grid(pressure, n)
    d = as_grid(div, n)

    d[1:-1, 1:-1] = -0.5 * h * (
        u[1:-1, 2:] - u[1:-1, :-2]
        + v[2:, 1:-1] - v[:-2, 1:-1]
    )
    p.fill(0.0)
    apply_boundary(FieldKind.SCALAR, div, n)
    apply_boundary(FieldKind.SCALAR, pressure, n)

    relax(FieldKind.SCALAR, pressure, div, 1.0, 4.0, n, iterations)

    u[1:-1, 1:-1] -= 0.5 * (p[1:-1, 2:] - p[1:-1, :-2]) / h
    v[1:-1, 1:-1] -= 0.5 * (p[2:, 1:-1] - p[:-2, 1:-1]) / h
    apply_boundary(FieldKind.X_VELOCITY, x_vel, n)
    apply_boundary(FieldKind.Y_VELOCITY, y_vel, n)
