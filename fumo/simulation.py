"""
Simulation state and time-step orchestration.

A ``SimulationState`` owns the grid fields and the physical parameters and
advances them with the stable-fluids operator splitting:

1. Velocity: add sources, diffuse, project, self-advect, buoyancy, project
2. Density: add source, diffuse, advect along the final velocity, decay
3. Temperature (optional): as density, decaying toward ambient

Each operator leaves the boundary ring consistent, because the next one
reads it as part of its stencil. Source buffers live for exactly one step:
they are consumed and then cleared.

Typical driver loop::

    state = SimulationState(64)
    emitters = SourceManager(state)
    emitters.create_gas_source(Shape.CIRCLE, 1.0, 350.0, 32, 56, 4)
    for _ in range(100):
        emitters.update_sources()
        state.step(0.05)
        frame = state.get_density()
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from fumo.advection import advect
from fumo.diffusion import diffuse
from fumo.errors import InvalidTimeStepError, SizeMismatchError
from fumo.forcing import convect, dissipate
from fumo.grid import Field, FieldKind, GridFields, cell_count, validate_resolution
from fumo.mixing import CoefficientKind
from fumo.parameters import SimulationParameters
from fumo.projection import project

logger = logging.getLogger(__name__)


# Temperature is stored as excess over ambient air, so ambient is zero
AMBIENT_TEMPERATURE_EXCESS = 0.0


def _read_only(array: np.ndarray) -> np.ndarray:
    view = array.view()
    view.flags.writeable = False
    return view


class SimulationState:
    """
    Grid state of one fluid simulation.

    Parameters
    ----------
    n : int
        Interior resolution; the grid holds ``(n+2)**2`` cells.
    params : SimulationParameters, optional
        Physical constants and options. Defaults are used when omitted.
    """

    def __init__(self, n: int, params: Optional[SimulationParameters] = None):
        self._n = validate_resolution(n)
        self._size = cell_count(self._n)
        self.params = params if params is not None else SimulationParameters()
        self.fields = GridFields.zeros(self._n)
        self.step_count = 0
        self.time = 0.0
        logger.debug("Created %dx%d simulation state", self._n, self._n)

    # -------------------------------------------------------------------------
    # Sizes
    # -------------------------------------------------------------------------

    @property
    def n(self) -> int:
        return self._n

    @property
    def size(self) -> int:
        return self._size

    def get_n(self) -> int:
        """Interior resolution N."""
        return self._n

    def get_size(self) -> int:
        """Total cell count (N+2)**2."""
        return self._size

    # -------------------------------------------------------------------------
    # Field accessors
    # -------------------------------------------------------------------------

    def get_density(self) -> np.ndarray:
        return _read_only(self.fields.density)

    def get_x_velocity(self) -> np.ndarray:
        return _read_only(self.fields.x_velocity)

    def get_y_velocity(self) -> np.ndarray:
        return _read_only(self.fields.y_velocity)

    def get_temperature(self) -> np.ndarray:
        """Temperature excess over ambient air (K)."""
        return _read_only(self.fields.temperature)

    def get_field(self, field: Field | str) -> np.ndarray:
        """Read-only view of the current generation of ``field``."""
        return _read_only(self.fields.current(Field(field)))

    # -------------------------------------------------------------------------
    # Sources
    # -------------------------------------------------------------------------

    def set_sources(
        self,
        density=None,
        x_velocity=None,
        y_velocity=None,
        temperature=None,
    ) -> None:
        """
        Copy caller-supplied per-cell rates into the source buffers.

        Each argument is an array-like of ``get_size()`` values, or None
        to leave that buffer untouched. Nothing is written unless every
        supplied array has the right size.

        Raises
        ------
        SizeMismatchError
            If a supplied array does not have ``get_size()`` cells.
        """
        supplied = {
            Field.DENSITY: density,
            Field.X_VELOCITY: x_velocity,
            Field.Y_VELOCITY: y_velocity,
            Field.TEMPERATURE: temperature,
        }
        staged = {}
        for field, values in supplied.items():
            if values is None:
                continue
            array = np.asarray(values, dtype=np.float64).ravel()
            if array.shape[0] != self._size:
                raise SizeMismatchError(
                    f"{field.value} source has {array.shape[0]} cells, expected {self._size}"
                )
            staged[field] = array

        for field, array in staged.items():
            self.fields.source(field)[:] = array

    def _add_source(self, field: Field, dt: float) -> None:
        self.fields.current(field)[:] += dt * self.fields.source(field)

    # -------------------------------------------------------------------------
    # Time stepping
    # -------------------------------------------------------------------------

    def step(self, dt: float) -> None:
        """
        Advance the simulation by ``dt`` seconds.

        Raises
        ------
        InvalidTimeStepError
            If ``dt`` is not a positive finite number.
        """
        try:
            dt = float(dt)
        except (TypeError, ValueError):
            raise InvalidTimeStepError(f"Time step must be a number, got {dt!r}") from None
        if not math.isfinite(dt) or dt <= 0.0:
            raise InvalidTimeStepError(f"Time step must be positive and finite, got {dt}")

        self._velocity_step(dt)
        self._density_step(dt)
        if self.params.temperature_on:
            self._temperature_step(dt)
        self.fields.clear_sources()

        self.step_count += 1
        self.time += dt
        logger.debug(
            "Step %d (t=%.4f s): total density %.6g",
            self.step_count, self.time, self.total_density(),
        )

    # Alias matching the external interface naming
    simulation_step = step

    def _velocity_step(self, dt: float) -> None:
        f = self.fields
        n = self._n
        params = self.params

        self._add_source(Field.X_VELOCITY, dt)
        self._add_source(Field.Y_VELOCITY, dt)

        f.swap(Field.X_VELOCITY)
        f.swap(Field.Y_VELOCITY)
        diffuse(FieldKind.X_VELOCITY, f.x_velocity, f.x_velocity_prev,
                CoefficientKind.VISCOSITY, dt, params, f, n)
        diffuse(FieldKind.Y_VELOCITY, f.y_velocity, f.y_velocity_prev,
                CoefficientKind.VISCOSITY, dt, params, f, n)
        project(f.x_velocity, f.y_velocity, f.x_velocity_prev, f.y_velocity_prev,
                n, params.solver_steps)

        f.swap(Field.X_VELOCITY)
        f.swap(Field.Y_VELOCITY)
        advect(FieldKind.X_VELOCITY, f.x_velocity, f.x_velocity_prev,
               f.x_velocity_prev, f.y_velocity_prev, dt, n)
        advect(FieldKind.Y_VELOCITY, f.y_velocity, f.y_velocity_prev,
               f.x_velocity_prev, f.y_velocity_prev, dt, n)

        convect(f.y_velocity, dt, params, f, n)
        project(f.x_velocity, f.y_velocity, f.x_velocity_prev, f.y_velocity_prev,
                n, params.solver_steps)

    def _scalar_step(
        self,
        field: Field,
        coefficient: CoefficientKind,
        decay_rate: float,
        ambient_value: float,
        dt: float,
    ) -> None:
        f = self.fields
        n = self._n

        self._add_source(field, dt)
        f.swap(field)
        diffuse(FieldKind.SCALAR, f.current(field), f.previous(field),
                coefficient, dt, self.params, f, n)
        f.swap(field)
        advect(FieldKind.SCALAR, f.current(field), f.previous(field),
               f.x_velocity, f.y_velocity, dt, n)
        if decay_rate > 0.0:
            dissipate(f.current(field), decay_rate, ambient_value, dt, n)

    def _density_step(self, dt: float) -> None:
        self._scalar_step(
            Field.DENSITY,
            CoefficientKind.MASS_DIFFUSIVITY,
            self.params.density_decay,
            0.0,
            dt,
        )

    def _temperature_step(self, dt: float) -> None:
        self._scalar_step(
            Field.TEMPERATURE,
            CoefficientKind.THERMAL_DIFFUSIVITY,
            self.params.temperature_decay,
            AMBIENT_TEMPERATURE_EXCESS,
            dt,
        )

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def total_density(self) -> float:
        """Sum of the density field over interior cells."""
        g = self.fields.density.reshape(self._n + 2, self._n + 2)
        return float(g[1:-1, 1:-1].sum())

    def reset(self) -> None:
        """Zero every field and restart the clock."""
        self.fields.clear()
        self.step_count = 0
        self.time = 0.0
