"""
Tests for the simulation state and time stepping.
"""

import math

import numpy as np
import pytest

from fumo import SimulationParameters, SimulationState
from fumo.errors import InvalidResolutionError, InvalidTimeStepError, SizeMismatchError
from fumo.grid import Field, as_grid, index
from fumo.sources import Shape, SourceManager


class TestConstruction:
    """Tests for state construction and accessors."""

    def test_sizes(self):
        """Test resolution and cell count."""
        state = SimulationState(32)
        assert state.get_n() == 32
        assert state.get_size() == 34 * 34

    @pytest.mark.parametrize("bad", [0, -1, 1.5])
    def test_invalid_resolution(self, bad):
        """Test rejection of invalid grid sizes."""
        with pytest.raises(InvalidResolutionError):
            SimulationState(bad)

    def test_fields_start_zeroed(self):
        """Test that a new state is all zero."""
        state = SimulationState(8)
        for field in Field:
            assert not state.get_field(field).any()
        assert state.step_count == 0
        assert state.time == 0.0

    def test_accessors_are_read_only(self):
        """Test that field views cannot be written."""
        state = SimulationState(8)
        for view in (
            state.get_density(),
            state.get_x_velocity(),
            state.get_y_velocity(),
            state.get_temperature(),
        ):
            assert view.shape == (state.get_size(),)
            with pytest.raises(ValueError):
                view[0] = 1.0

    def test_accessors_track_current_generation(self):
        """Test that views show the latest step."""
        state = SimulationState(8)
        source = np.zeros(state.get_size())
        source[index(4, 4, 8)] = 10.0
        state.set_sources(density=source)
        state.step(0.1)
        assert state.get_density()[index(4, 4, 8)] > 0.0
        assert np.array_equal(state.get_field("density"), state.get_density())

    def test_default_parameters(self):
        """Test default parameters when none are given."""
        state = SimulationState(8)
        assert state.params == SimulationParameters()


class TestSetSources:
    """Tests for caller-supplied source buffers."""

    def test_copies_values(self):
        """Test that source arrays are copied."""
        state = SimulationState(4)
        values = np.arange(state.get_size(), dtype=float)
        state.set_sources(density=values, y_velocity=-values)
        values[:] = 0.0
        assert state.fields.density_source[5] == 5.0
        assert state.fields.y_velocity_source[5] == -5.0
        assert not state.fields.x_velocity_source.any()

    def test_accepts_lists(self):
        """Test that plain lists are accepted as sources."""
        state = SimulationState(2)
        state.set_sources(temperature=[1.0] * state.get_size())
        assert np.all(state.fields.temperature_source == 1.0)

    def test_size_mismatch_writes_nothing(self):
        """Test that a wrong-sized array writes no buffer."""
        state = SimulationState(4)
        good = np.ones(state.get_size())
        bad = np.ones(state.get_size() - 1)
        with pytest.raises(SizeMismatchError):
            state.set_sources(density=good, temperature=bad)
        assert not state.fields.density_source.any()
        assert not state.fields.temperature_source.any()

    def test_none_leaves_buffer_untouched(self):
        """Test that omitted sources are kept."""
        state = SimulationState(4)
        state.set_sources(density=np.ones(state.get_size()))
        state.set_sources(x_velocity=np.ones(state.get_size()))
        assert np.all(state.fields.density_source == 1.0)


class TestStep:
    """Tests for the time-step orchestration."""

    @pytest.mark.parametrize("dt", [0.0, -0.1, math.nan, math.inf, "fast", None])
    def test_invalid_time_step(self, dt):
        """Test rejection of invalid time steps."""
        state = SimulationState(8)
        with pytest.raises(InvalidTimeStepError):
            state.step(dt)
        assert state.step_count == 0

    def test_zero_state_is_stable(self):
        """Test that zero fields stay zero."""
        state = SimulationState(16)
        for _ in range(10):
            state.step(0.1)
        for field in Field:
            assert not state.get_field(field).any()
        assert state.step_count == 10
        assert state.time == pytest.approx(1.0)

    def test_zero_state_is_stable_with_advanced_coefficients(self):
        """Test zero stability with advanced coefficients."""
        state = SimulationState(16, SimulationParameters(advanced_coefficients=True))
        for _ in range(10):
            state.step(0.1)
        for field in Field:
            assert not state.get_field(field).any()

    def test_sources_cleared_after_step(self):
        """Test that sources last one step."""
        state = SimulationState(8)
        ones = np.ones(state.get_size())
        state.set_sources(density=ones, x_velocity=ones, y_velocity=ones, temperature=ones)
        state.step(0.05)
        for field in Field:
            assert not state.fields.source(field).any()

    def test_alias(self):
        """Test the simulation_step alias."""
        state = SimulationState(4)
        state.simulation_step(0.1)
        assert state.step_count == 1

    def test_temperature_off_leaves_temperature_zero(self):
        """Test that disabled temperature is never advanced."""
        state = SimulationState(8, SimulationParameters(temperature_on=False))
        state.set_sources(temperature=np.ones(state.get_size()))
        state.step(0.1)
        assert not state.get_temperature().any()

    def test_density_conserved_without_flow(self):
        """Test density conservation in still air."""
        n = 32
        params = SimulationParameters(gravity_on=False, temperature_on=False, diffusion=1e-4)
        state = SimulationState(n, params)
        source = np.zeros(state.get_size())
        as_grid(source, n)[14:19, 14:19] = 5.0
        state.set_sources(density=source)
        state.step(0.1)

        total = state.total_density()
        assert total == pytest.approx(25 * 5.0 * 0.1, rel=1e-4)
        for _ in range(5):
            state.step(0.1)
        assert state.total_density() == pytest.approx(total, rel=1e-4)
        assert not state.get_x_velocity().any()

    def test_density_decay(self):
        """Test exponential density decay over one step."""
        n = 8
        params = SimulationParameters(
            gravity_on=False, temperature_on=False, diffusion=0.0, density_decay=0.5,
        )
        state = SimulationState(n, params)
        source = np.zeros(state.get_size())
        source[index(4, 4, n)] = 10.0
        state.set_sources(density=source)
        state.step(0.2)
        assert state.get_density()[index(4, 4, n)] == pytest.approx(2.0 * math.exp(-0.1))

    def test_reset(self):
        """Test that reset zeroes fields and the clock."""
        state = SimulationState(8)
        state.set_sources(density=np.ones(state.get_size()))
        state.step(0.1)
        state.reset()
        assert not state.get_density().any()
        assert state.step_count == 0
        assert state.time == 0.0


class TestScenarios:
    """End-to-end runs with emitters."""

    def test_gas_puff_stays_local(self):
        """Test that one gas puff stays near its emitter."""
        n = 32
        state = SimulationState(n)
        emitters = SourceManager(state)
        emitters.create_gas_source(Shape.CIRCLE, 1.0, 300.0, 16, 16, 3)
        emitters.update_sources()
        state.step(0.1)

        density = as_grid(state.get_density(), n)
        temperature = as_grid(state.get_temperature(), n)
        assert density[16, 16] > 0.0
        assert temperature[16, 16] > 0.0

        j, i = np.mgrid[0:n + 2, 0:n + 2]
        far = np.hypot(i - 16, j - 16) > 3 + 6
        assert np.all(np.abs(density[far]) < 1e-12)

    def test_hot_gas_rises(self):
        """Test that hot gas drifts up."""
        n = 32
        state = SimulationState(n)
        emitters = SourceManager(state)
        emitters.create_gas_source(Shape.CIRCLE, 0.05, 400.0, 16, 16, 3)

        for _ in range(30):
            emitters.update_sources()
            state.step(0.05)

        density = as_grid(state.get_density(), n)[1:-1, 1:-1]
        rows = np.arange(1, n + 1)
        centroid_row = (density.sum(axis=1) * rows).sum() / density.sum()
        assert centroid_row < 15.9
        assert as_grid(state.get_y_velocity(), n)[16, 16] < 0.0

    def test_heavy_cold_gas_sinks(self):
        """Test that heavy gas drifts down."""
        n = 32
        params = SimulationParameters(mass_ratio=3.0, temperature_on=False)
        state = SimulationState(n, params)
        emitters = SourceManager(state)
        emitters.create_gas_source(Shape.SQUARE, 0.05, 293.15, 16, 16, 2)

        for _ in range(30):
            emitters.update_sources()
            state.step(0.05)

        density = as_grid(state.get_density(), n)[1:-1, 1:-1]
        rows = np.arange(1, n + 1)
        centroid_row = (density.sum(axis=1) * rows).sum() / density.sum()
        assert centroid_row > 16.1
