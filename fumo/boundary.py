"""
Boundary conditions for the one-cell ring around the interior.

Walls are solid and insulating:

- x-velocity is reflected (negated) across the left/right walls so the
  normal flow vanishes there, and copied across the top/bottom walls
- y-velocity follows the same rule with the axes swapped
- scalars (density, temperature) copy their interior neighbour on every
  edge, giving a zero-gradient condition

Each corner is the average of its two adjacent edge cells.
"""

from __future__ import annotations

import numpy as np

from fumo.grid import FieldKind, as_grid


def apply_boundary(kind: FieldKind, field: np.ndarray, n: int) -> np.ndarray:
    """
    Fill the boundary ring of ``field`` in place.

    Parameters
    ----------
    kind : FieldKind
        Physical kind of the field.
    field : np.ndarray
        Flat array of ``(n+2)**2`` cells.
    n : int
        Interior resolution.

    Returns
    -------
    np.ndarray
        The same array, for chaining.
    """
    g = as_grid(field, n)

    # Columns i = 0 and i = N+1 (left/right walls)
    x_sign = -1.0 if kind == FieldKind.X_VELOCITY else 1.0
    g[1:-1, 0] = x_sign * g[1:-1, 1]
    g[1:-1, -1] = x_sign * g[1:-1, -2]

    # Rows j = 0 and j = N+1 (top/bottom walls)
    y_sign = -1.0 if kind == FieldKind.Y_VELOCITY else 1.0
    g[0, 1:-1] = y_sign * g[1, 1:-1]
    g[-1, 1:-1] = y_sign * g[-2, 1:-1]

    g[0, 0] = 0.5 * (g[0, 1] + g[1, 0])
    g[-1, 0] = 0.5 * (g[-1, 1] + g[-2, 0])
    g[0, -1] = 0.5 * (g[0, -2] + g[1, -1])
    g[-1, -1] = 0.5 * (g[-1, -2] + g[-2, -1])

    return field
