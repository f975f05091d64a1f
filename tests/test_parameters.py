"""
Tests for simulation parameters and presets.
"""

import dataclasses
import math

import pytest

from fumo.errors import InvalidParametersError
from fumo.parameters import (
    ALL_PARAMETERS,
    PRESETS,
    SimulationParameters,
    get_parameter_info,
    get_preset,
    list_parameters,
)


class TestSimulationParameters:
    """Tests for the parameter value object."""

    def test_defaults(self):
        """Test default parameters and options."""
        params = SimulationParameters()
        assert params.length_scale == 1.0
        assert params.air_temperature == pytest.approx(293.15)
        assert params.gravity_on is True
        assert params.temperature_on is True
        assert params.advanced_coefficients is False
        assert params.solver_steps == 20

    def test_defaults_match_definitions(self):
        """Test that defaults agree with the parameter table."""
        params = SimulationParameters()
        for name, param in ALL_PARAMETERS.items():
            assert getattr(params, name) == param.default

    def test_frozen(self):
        """Test that parameters are immutable."""
        params = SimulationParameters()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.viscosity = 1.0

    @pytest.mark.parametrize("changes", [
        {"viscosity": -1.0},
        {"diffusion": math.nan},
        {"air_density": 0.0},
        {"air_temperature": math.inf},
        {"length_scale": 0.0},
        {"density_decay": -0.1},
        {"solver_steps": 0},
        {"solver_steps": 2.5},
        {"solver_steps": True},
    ])
    def test_invalid_values(self, changes):
        """Test rejection of out-of-range or non-finite values."""
        with pytest.raises(InvalidParametersError):
            SimulationParameters(**changes)

    def test_with_updates_validates(self):
        """Test that derived copies are validated."""
        params = SimulationParameters()
        updated = params.with_updates(gravity=3.7, solver_steps=40)
        assert updated.gravity == 3.7
        assert updated.solver_steps == 40
        assert params.gravity == 9.81
        with pytest.raises(InvalidParametersError):
            params.with_updates(mass_ratio=0.0)

    def test_from_dict_ignores_unknown_keys(self):
        """Test loading from a dict with extra keys."""
        params = SimulationParameters.from_dict({"gravity": 1.0, "colour": "red"})
        assert params.gravity == 1.0

    def test_yaml_file(self, tmp_path):
        """Test saving and loading parameters as YAML."""
        path = tmp_path / "params.yaml"
        params = SimulationParameters(mass_ratio=0.5, temperature_on=False)
        params.to_yaml(str(path))
        assert SimulationParameters.from_yaml(str(path)) == params


class TestPresets:
    """Tests for named presets."""

    def test_all_presets_valid(self):
        """Test that every preset is a parameter object."""
        for name, preset in PRESETS.items():
            assert isinstance(preset, SimulationParameters), name

    def test_passive_disables_coupling(self):
        """Test that the passive preset disables gravity and heat."""
        preset = get_preset("passive")
        assert not preset.gravity_on
        assert not preset.temperature_on

    def test_hot_gas_is_light(self):
        """Test that the hot gas preset is lighter than air."""
        assert get_preset("hot_gas").mass_ratio < 1.0

    def test_unknown_preset(self):
        """Test that an unknown preset raises ValueError."""
        with pytest.raises(ValueError, match="Unknown preset"):
            get_preset("plasma")


class TestParameterInfo:
    """Tests for parameter metadata."""

    def test_info_has_bounds(self):
        """Test parameter metadata export."""
        info = get_parameter_info()
        assert set(info) == set(ALL_PARAMETERS)
        assert info["viscosity"]["units"] == "m^2/s"
        assert info["viscosity"]["min"] == 0.0

    def test_list_by_category(self):
        """Test listing parameters by category."""
        assert set(list_parameters("dissipation")) == {"density_decay", "temperature_decay"}
        assert len(list_parameters()) == len(ALL_PARAMETERS)
