"""
Mixed-field accessors and state-dependent transport coefficients.

The density field holds the mass concentration of injected gas and the
temperature field holds the excess over ambient air temperature. The
functions here combine those samples with the ambient constants into the
effective ("mixed") density and absolute temperature of the gas/air
mixture, assuming an ideal gas at constant pressure:

    phi       = clip(rho_gas / (rho_air * M), 0, 1)      gas volume fraction
    rho_0     = rho_air * (1 - phi) + rho_air * M * phi  density at T_air
    T_mix     = T_air + dT
    rho_mix   = rho_0 * T_air / T_mix

where ``M`` is the gas/air mass ratio.

When ``advanced_coefficients`` is enabled the transport coefficients are
scaled by power laws of the mixed temperature (and, for kinematic
quantities, by the inverse mixed density). Otherwise every accessor returns
the uniform base coefficient unchanged.

All accessors take a linear cell index or an integer index array and are
free of side effects.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from fumo.grid import GridFields, as_grid
from fumo.parameters import SimulationParameters

# Absolute temperature floor for the ideal-gas relations (K)
MIN_TEMPERATURE = 1.0

# Power-law exponents of the temperature dependence
VISCOSITY_EXPONENT = 0.7
MASS_DIFFUSIVITY_EXPONENT = 1.75
THERMAL_DIFFUSIVITY_EXPONENT = 0.8


class CoefficientKind(Enum):
    """Transport coefficient used by a diffusion solve."""
    VISCOSITY = "viscosity"
    MASS_DIFFUSIVITY = "mass_diffusivity"
    THERMAL_DIFFUSIVITY = "thermal_diffusivity"


# =============================================================================
# Mixed State
# =============================================================================

def mixed_density_at_air_temp(ind, params: SimulationParameters, fields: GridFields):
    """Density of the gas/air mixture if it were at ambient temperature."""
    gas_density = params.air_density * params.mass_ratio
    fraction = np.clip(fields.density[ind] / gas_density, 0.0, 1.0)
    return params.air_density * (1.0 - fraction) + gas_density * fraction


def mixed_temperature(ind, params: SimulationParameters, fields: GridFields):
    """Absolute temperature of the mixture (K)."""
    if not params.temperature_on:
        return np.full(np.shape(ind), params.air_temperature)[()]
    return np.maximum(params.air_temperature + fields.temperature[ind], MIN_TEMPERATURE)


def mixed_density(ind, params: SimulationParameters, fields: GridFields):
    """Density of the mixture at its actual temperature (kg/m^3)."""
    expansion = params.air_temperature / mixed_temperature(ind, params, fields)
    return mixed_density_at_air_temp(ind, params, fields) * expansion


# =============================================================================
# Adjusted Coefficients
# =============================================================================

def _temperature_ratio(ind, params, fields):
    return mixed_temperature(ind, params, fields) / params.air_temperature


def adjusted_viscosity(ind, params: SimulationParameters, fields: GridFields):
    """Kinematic viscosity (m^2/s); hot or light regions are more viscous."""
    if not params.advanced_coefficients:
        return params.viscosity
    ratio = _temperature_ratio(ind, params, fields)
    return (
        params.viscosity
        * ratio ** VISCOSITY_EXPONENT
        * params.air_density / mixed_density(ind, params, fields)
    )


def adjusted_mass_diffusivity(ind, params: SimulationParameters, fields: GridFields):
    """Gas mass diffusivity (m^2/s), Fuller-style temperature scaling."""
    if not params.advanced_coefficients:
        return params.diffusion
    ratio = _temperature_ratio(ind, params, fields)
    return params.diffusion * ratio ** MASS_DIFFUSIVITY_EXPONENT


def adjusted_thermal_diffusivity(ind, params: SimulationParameters, fields: GridFields):
    """Thermal diffusivity (m^2/s)."""
    if not params.advanced_coefficients:
        return params.thermal_diffusivity
    ratio = _temperature_ratio(ind, params, fields)
    return (
        params.thermal_diffusivity
        * ratio ** THERMAL_DIFFUSIVITY_EXPONENT
        * params.air_density / mixed_density(ind, params, fields)
    )


_ACCESSORS = {
    CoefficientKind.VISCOSITY: adjusted_viscosity,
    CoefficientKind.MASS_DIFFUSIVITY: adjusted_mass_diffusivity,
    CoefficientKind.THERMAL_DIFFUSIVITY: adjusted_thermal_diffusivity,
}


def interior_indices(n: int) -> np.ndarray:
    """Linear indices of the interior cells as an ``(N, N)`` array."""
    all_indices = as_grid(np.arange((n + 2) * (n + 2)), n)
    return all_indices[1:-1, 1:-1]


def coefficient_field(
    kind: CoefficientKind,
    params: SimulationParameters,
    fields: GridFields,
    n: int,
):
    """
    Resolve a coefficient strategy for one diffusion solve.

    Returns
    -------
    float or np.ndarray
        The uniform coefficient (m^2/s), or an ``(N, N)`` array over the
        interior cells when advanced coefficients are enabled.
    """
    accessor = _ACCESSORS[CoefficientKind(kind)]
    if not params.advanced_coefficients:
        return float(accessor(0, params, fields))
    return accessor(interior_indices(n), params, fields)
