"""
Semi-Lagrangian advection.

Instead of pushing quantities forward along the flow, every destination
cell traces backward along the velocity for one time step and samples the
source field there by bilinear interpolation. The sample is a convex
combination of existing values, so the scheme cannot overshoot and is
stable for any dt; the price is some numerical diffusion.
"""

from __future__ import annotations

import numpy as np

from fumo.boundary import apply_boundary
from fumo.grid import FieldKind, as_grid


def advect(
    kind: FieldKind,
    destination: np.ndarray,
    source: np.ndarray,
    x_vel: np.ndarray,
    y_vel: np.ndarray,
    dt: float,
    n: int,
) -> np.ndarray:
    """
    Transport ``source`` along the velocity field into ``destination``.

    Parameters
    ----------
    kind : FieldKind
        Boundary rule of the advected field.
    destination : np.ndarray
        Flat output buffer (interior overwritten, then boundary applied).
    source : np.ndarray
        Flat field sampled at the traced positions.
    x_vel, y_vel : np.ndarray
        Flat velocity components in domain units per second.
    dt : float
        Time step (s).
    n : int
        Interior resolution.

    Returns
    -------
    np.ndarray
        ``destination``.
    """
    d = as_grid(destination, n)
    d0 = as_grid(source, n)
    u = as_grid(x_vel, n)[1:-1, 1:-1]
    v = as_grid(y_vel, n)[1:-1, 1:-1]

    dt0 = dt * n
    j, i = np.mgrid[1:n + 1, 1:n + 1]

    x = np.clip(i - dt0 * u, 0.5, n + 0.5)
    y = np.clip(j - dt0 * v, 0.5, n + 0.5)

    i0 = np.floor(x).astype(np.intp)
    j0 = np.floor(y).astype(np.intp)
    i1 = i0 + 1
    j1 = j0 + 1

    s1 = x - i0
    s0 = 1.0 - s1
    t1 = y - j0
    t0 = 1.0 - t1

    d[1:-1, 1:-1] = (
        s0 * (t0 * d0[j0, i0] + t1 * d0[j1, i0])
        + s1 * (t0 * d0[j0, i1] + t1 * d0[j1, i1])
    )
    apply_boundary(kind, destination, n)
    return destination
