"""
Tests for mixed-state accessors and adjusted transport coefficients.
"""

import numpy as np
import pytest

from fumo.grid import GridFields, index
from fumo.mixing import (
    CoefficientKind,
    adjusted_mass_diffusivity,
    adjusted_thermal_diffusivity,
    adjusted_viscosity,
    coefficient_field,
    interior_indices,
    mixed_density,
    mixed_density_at_air_temp,
    mixed_temperature,
)
from fumo.parameters import SimulationParameters

N = 8


@pytest.fixture
def fields():
    return GridFields.zeros(N)


class TestMixedState:
    """Tests for mixed density and temperature."""

    def test_ambient_cell(self, fields):
        """Test that an untouched cell has ambient properties."""
        params = SimulationParameters()
        ind = index(3, 3, N)
        assert mixed_temperature(ind, params, fields) == params.air_temperature
        assert mixed_density(ind, params, fields) == params.air_density

    def test_hot_cell_is_lighter(self, fields):
        """Test thermal expansion at twice ambient temperature."""
        params = SimulationParameters()
        ind = index(2, 5, N)
        fields.temperature[ind] = params.air_temperature
        assert mixed_temperature(ind, params, fields) == pytest.approx(2 * params.air_temperature)
        assert mixed_density(ind, params, fields) == pytest.approx(params.air_density / 2)

    def test_pure_heavy_gas(self, fields):
        """Test density of a cell filled with heavy gas."""
        params = SimulationParameters(mass_ratio=2.0)
        ind = index(4, 4, N)
        fields.density[ind] = 2.0 * params.air_density
        assert mixed_density_at_air_temp(ind, params, fields) == pytest.approx(2.0 * params.air_density)

    def test_half_mixture(self, fields):
        """Test density of an equal-volume gas/air mixture."""
        params = SimulationParameters(mass_ratio=0.5)
        ind = index(4, 4, N)
        # Half the volume is gas of density 0.5 * rho_air
        fields.density[ind] = 0.25 * params.air_density
        assert mixed_density_at_air_temp(ind, params, fields) == pytest.approx(0.75 * params.air_density)

    def test_fraction_is_clipped(self, fields):
        """Test that the gas fraction stays within [0, 1]."""
        params = SimulationParameters(mass_ratio=3.0)
        ind = index(1, 1, N)
        fields.density[ind] = 1000.0
        assert mixed_density_at_air_temp(ind, params, fields) == pytest.approx(3.0 * params.air_density)
        fields.density[ind] = -5.0
        assert mixed_density_at_air_temp(ind, params, fields) == pytest.approx(params.air_density)

    def test_temperature_off_uses_ambient(self, fields):
        """Test that temperature is ignored when disabled."""
        params = SimulationParameters(temperature_on=False)
        ind = index(2, 2, N)
        fields.temperature[ind] = 500.0
        assert mixed_temperature(ind, params, fields) == params.air_temperature
        assert mixed_density(ind, params, fields) == params.air_density

    def test_vectorized_indices(self, fields):
        """Test accessors over an index array."""
        params = SimulationParameters()
        fields.temperature[index(4, 4, N)] = 100.0
        ind = interior_indices(N)
        temps = mixed_temperature(ind, params, fields)
        assert temps.shape == (N, N)
        assert temps[3, 3] == pytest.approx(params.air_temperature + 100.0)
        assert temps[0, 0] == pytest.approx(params.air_temperature)

    def test_accessors_have_no_side_effects(self, fields):
        """Test that accessors do not modify the fields."""
        params = SimulationParameters(advanced_coefficients=True)
        fields.temperature[:] = 50.0
        fields.density[:] = 0.3
        before = fields.temperature.copy(), fields.density.copy()
        mixed_density(interior_indices(N), params, fields)
        adjusted_viscosity(interior_indices(N), params, fields)
        assert np.array_equal(fields.temperature, before[0])
        assert np.array_equal(fields.density, before[1])


class TestAdjustedCoefficients:
    """Tests for state-dependent transport coefficients."""

    def test_basic_mode_returns_base(self, fields):
        """Test uniform coefficients when advanced mode is off."""
        params = SimulationParameters()
        fields.temperature[:] = 300.0
        ind = index(3, 3, N)
        assert adjusted_viscosity(ind, params, fields) == params.viscosity
        assert adjusted_mass_diffusivity(ind, params, fields) == params.diffusion
        assert adjusted_thermal_diffusivity(ind, params, fields) == params.thermal_diffusivity

    def test_advanced_mode_at_ambient_returns_base(self, fields):
        """Test that ambient cells keep the base coefficients."""
        params = SimulationParameters(advanced_coefficients=True)
        ind = index(3, 3, N)
        assert adjusted_viscosity(ind, params, fields) == pytest.approx(params.viscosity)
        assert adjusted_mass_diffusivity(ind, params, fields) == pytest.approx(params.diffusion)
        assert adjusted_thermal_diffusivity(ind, params, fields) == pytest.approx(params.thermal_diffusivity)

    def test_hot_gas_diffuses_faster(self, fields):
        """Test temperature scaling of the adjusted coefficients."""
        params = SimulationParameters(advanced_coefficients=True)
        ind = index(3, 3, N)
        fields.temperature[ind] = params.air_temperature
        assert adjusted_mass_diffusivity(ind, params, fields) == pytest.approx(
            params.diffusion * 2.0 ** 1.75
        )
        # Kinematic quantities also scale with 1 / rho_mix
        assert adjusted_viscosity(ind, params, fields) == pytest.approx(
            params.viscosity * 2.0 ** 0.7 * 2.0
        )
        assert adjusted_thermal_diffusivity(ind, params, fields) > params.thermal_diffusivity


class TestCoefficientField:
    """Tests for per-solve coefficient resolution."""

    def test_uniform_is_scalar(self, fields):
        """Test scalar coefficient when advanced mode is off."""
        params = SimulationParameters(viscosity=2e-4)
        k = coefficient_field(CoefficientKind.VISCOSITY, params, fields, N)
        assert isinstance(k, float)
        assert k == 2e-4

    def test_advanced_is_interior_array(self, fields):
        """Test per-cell coefficients with advanced mode."""
        params = SimulationParameters(advanced_coefficients=True)
        fields.temperature[index(5, 2, N)] = 200.0
        k = coefficient_field(CoefficientKind.THERMAL_DIFFUSIVITY, params, fields, N)
        assert k.shape == (N, N)
        assert k[1, 4] > k[0, 0]
        assert k[0, 0] == pytest.approx(params.thermal_diffusivity)
