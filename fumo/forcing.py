"""
Buoyancy coupling and exponential dissipation.

Buoyancy
--------
A parcel lighter than the surrounding air is pushed upward with the
reduced-gravity acceleration

    B = g * (rho_air - rho_mix) / rho_air

where ``rho_mix`` is the mixed density of ``fumo.mixing`` (which carries
the gas/air mass ratio and, when temperature is simulated, the thermal
expansion). "Up" is toward decreasing row index, so a positive B is
subtracted from the y-velocity.

Dissipation
-----------
Density and temperature relax exponentially toward an ambient value:

    x(t + dt) = ambient + (x(t) - ambient) * exp(-rate * dt)
"""

from __future__ import annotations

import numpy as np

from fumo.boundary import apply_boundary
from fumo.grid import FieldKind, GridFields, as_grid
from fumo.mixing import interior_indices, mixed_density
from fumo.parameters import SimulationParameters


def buoyancy(params: SimulationParameters, fields: GridFields, n: int) -> np.ndarray:
    """
    Upward buoyant acceleration over the interior.

    Returns
    -------
    np.ndarray
        ``(N, N)`` array in m/s^2 (positive = rising).
    """
    rho = mixed_density(interior_indices(n), params, fields)
    return params.gravity * (params.air_density - rho) / params.air_density


def convect(
    y_vel: np.ndarray,
    dt: float,
    params: SimulationParameters,
    fields: GridFields,
    n: int,
) -> np.ndarray:
    """
    Add the buoyancy force to the vertical velocity in place.

    Does nothing unless ``params.gravity_on`` is set.
    """
    if not params.gravity_on:
        return y_vel
    v = as_grid(y_vel, n)
    v[1:-1, 1:-1] -= dt * buoyancy(params, fields, n) / params.length_scale
    apply_boundary(FieldKind.Y_VELOCITY, y_vel, n)
    return y_vel


def dissipate(
    field: np.ndarray,
    decay_rate: float,
    ambient_value: float,
    dt: float,
    n: int,
) -> np.ndarray:
    """Relax the interior of a scalar field toward ``ambient_value`` in place."""
    g = as_grid(field, n)
    factor = np.exp(-decay_rate * dt)
    g[1:-1, 1:-1] = ambient_value + (g[1:-1, 1:-1] - ambient_value) * factor
    apply_boundary(FieldKind.SCALAR, field, n)
    return field
