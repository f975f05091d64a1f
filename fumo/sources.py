"""
Shaped emitters that inject gas, wind, heat and energy.

An emitter covers a fixed set of interior cells, computed once from its
shape, center and radius (all in cell units; interior cell centers run
from 1 to N). Every update cycle ``SourceManager.update_sources`` adds the
emitter's per-cell rates into the state's source buffers; the next
``SimulationState.step`` consumes and clears them.

Emitter types
-------------
gas     flow rate (kg/s per unit depth) of gas at a given temperature (K)
wind    velocity source with direction (degrees, counter-clockwise from +x,
        90 = up) and speed (m/s)
heat    temperature (K) whose excess over ambient is added directly
energy  heating flux (K/s) scaled by the gap to a reference temperature

Contributions of overlapping emitters accumulate additively.
"""

from __future__ import annotations

import logging
import math
from dataclasses import astuple, dataclass, field, fields
from enum import Enum
from typing import Iterator, List, Union

import numpy as np

from fumo.errors import (
    InvalidParametersError,
    InvalidShapeParametersError,
    UnknownSourceError,
)
from fumo.grid import as_grid
from fumo.mixing import mixed_temperature
from fumo.simulation import SimulationState

logger = logging.getLogger(__name__)


class Shape(str, Enum):
    """Footprint of an emitter."""
    SQUARE = "square"
    CIRCLE = "circle"
    DIAMOND = "diamond"


class SourceType(str, Enum):
    """What an emitter injects."""
    GAS = "gas"
    WIND = "wind"
    HEAT = "heat"
    ENERGY = "energy"


# =============================================================================
# Payloads
# =============================================================================

@dataclass(frozen=True)
class GasPayload:
    flow_rate: float
    temperature: float


@dataclass(frozen=True)
class WindPayload:
    angle: float
    speed: float


@dataclass(frozen=True)
class HeatPayload:
    temperature: float


@dataclass(frozen=True)
class EnergyPayload:
    flux: float
    reference_temperature: float


Payload = Union[GasPayload, WindPayload, HeatPayload, EnergyPayload]


def check_payload(payload: Payload) -> None:
    """Raise if any payload value is NaN or infinite."""
    for f, value in zip(fields(payload), astuple(payload)):
        if not math.isfinite(value):
            raise InvalidParametersError(
                f"{type(payload).__name__}.{f.name} must be finite, got {value}"
            )


_PAYLOAD_TYPES = {
    SourceType.GAS: GasPayload,
    SourceType.WIND: WindPayload,
    SourceType.HEAT: HeatPayload,
    SourceType.ENERGY: EnergyPayload,
}


# =============================================================================
# Cell Membership
# =============================================================================

def compute_indices(
    n: int,
    shape: Shape,
    x_center: float,
    y_center: float,
    radius: float,
) -> np.ndarray:
    """
    Linear indices of the interior cells covered by a shape.

    A cell ``(i, j)`` belongs to the shape when its center satisfies

    - square:  ``max(|i - x|, |j - y|) <= radius``
    - circle:  ``hypot(i - x, j - y) <= radius``
    - diamond: ``|i - x| + |j - y| <= radius``

    Parameters
    ----------
    n : int
        Interior resolution.
    shape : Shape
        Emitter footprint.
    x_center, y_center : float
        Center in cell units, within ``[0.5, n + 0.5]``.
    radius : float
        Positive radius in cell units.

    Returns
    -------
    np.ndarray
        Ascending integer array of linear indices (row-major order).

    Raises
    ------
    InvalidShapeParametersError
        If the radius is not positive or the center is outside the grid.
    """
    shape = Shape(shape)
    if not math.isfinite(radius) or radius <= 0.0:
        raise InvalidShapeParametersError(f"Radius must be positive, got {radius}")
    for name, value in (("x_center", x_center), ("y_center", y_center)):
        if not math.isfinite(value) or not 0.5 <= value <= n + 0.5:
            raise InvalidShapeParametersError(
                f"{name}={value} outside grid [0.5, {n + 0.5}]"
            )

    j, i = np.mgrid[1:n + 1, 1:n + 1]
    dx = np.abs(i - x_center)
    dy = np.abs(j - y_center)

    if shape is Shape.SQUARE:
        inside = np.maximum(dx, dy) <= radius
    elif shape is Shape.CIRCLE:
        inside = np.hypot(dx, dy) <= radius
    else:
        inside = dx + dy <= radius

    all_indices = as_grid(np.arange((n + 2) * (n + 2)), n)[1:-1, 1:-1]
    return all_indices[inside]


# =============================================================================
# Emitter Record
# =============================================================================

@dataclass
class Emitter:
    """
    One emitter slot in the ``SourceManager`` arena.

    The index set is fixed at creation; only the active flag changes.
    """

    handle: int
    source_type: SourceType
    shape: Shape
    x_center: float
    y_center: float
    radius: float
    payload: Payload
    indices: np.ndarray = field(repr=False)
    is_active: bool = True
    removed: bool = False

    def __post_init__(self):
        expected = _PAYLOAD_TYPES[self.source_type]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.source_type.value} emitter needs {expected.__name__}, "
                f"got {type(self.payload).__name__}"
            )
        self.indices.flags.writeable = False

    @property
    def n_cells(self) -> int:
        return int(self.indices.shape[0])

    def set_active(self, is_active: bool) -> None:
        self.is_active = bool(is_active)


# =============================================================================
# Source Manager
# =============================================================================

class SourceManager:
    """
    Collection of emitters feeding one simulation state.

    The manager keeps a non-owning reference to the state and writes only
    into its source generation.

    Parameters
    ----------
    sim_state : SimulationState
        State whose source buffers receive the contributions.
    """

    def __init__(self, sim_state: SimulationState):
        self.sim_state = sim_state
        self._emitters: List[Emitter] = []

    @property
    def n(self) -> int:
        return self.sim_state.get_n()

    @property
    def cell_area(self) -> float:
        """Physical area of one cell (m^2)."""
        h = self.sim_state.params.length_scale / self.n
        return h * h

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def _add(
        self,
        source_type: SourceType,
        shape: Shape,
        payload: Payload,
        x_center: float,
        y_center: float,
        radius: float,
    ) -> int:
        shape = Shape(shape)
        check_payload(payload)
        indices = compute_indices(self.n, shape, x_center, y_center, radius)
        handle = len(self._emitters)
        emitter = Emitter(
            handle=handle,
            source_type=source_type,
            shape=shape,
            x_center=float(x_center),
            y_center=float(y_center),
            radius=float(radius),
            payload=payload,
            indices=indices,
        )
        self._emitters.append(emitter)

        if emitter.n_cells == 0:
            logger.warning(
                "%s %s emitter at (%.2f, %.2f) with radius %.2f covers no cells",
                shape.value, source_type.value, x_center, y_center, radius,
            )
        else:
            logger.info(
                "Created %s %s emitter #%d covering %d cells",
                shape.value, source_type.value, handle, emitter.n_cells,
            )
        return handle

    def create_gas_source(self, shape, flow_rate, temperature, x_center, y_center, radius) -> int:
        """Gas released at ``flow_rate`` kg/s with the given absolute temperature (K)."""
        payload = GasPayload(float(flow_rate), float(temperature))
        return self._add(SourceType.GAS, shape, payload, x_center, y_center, radius)

    def create_wind_source(self, shape, angle, speed, x_center, y_center, radius) -> int:
        """Wind blowing toward ``angle`` degrees (counter-clockwise from +x) at ``speed`` m/s."""
        payload = WindPayload(float(angle), float(speed))
        return self._add(SourceType.WIND, shape, payload, x_center, y_center, radius)

    def create_heat_source(self, shape, temperature, x_center, y_center, radius) -> int:
        payload = HeatPayload(float(temperature))
        return self._add(SourceType.HEAT, shape, payload, x_center, y_center, radius)

    def create_energy_source(self, shape, flux, reference_temperature, x_center, y_center, radius) -> int:
        if reference_temperature <= 0.0:
            raise InvalidParametersError(
                f"Reference temperature must be positive, got {reference_temperature}"
            )
        payload = EnergyPayload(float(flux), float(reference_temperature))
        return self._add(SourceType.ENERGY, shape, payload, x_center, y_center, radius)

    # -------------------------------------------------------------------------
    # Arena access
    # -------------------------------------------------------------------------

    def get(self, handle: int) -> Emitter:
        """Return the live emitter registered under ``handle``."""
        if not 0 <= handle < len(self._emitters) or self._emitters[handle].removed:
            raise UnknownSourceError(f"No emitter with handle {handle}")
        return self._emitters[handle]

    def set_active(self, handle: int, is_active: bool) -> None:
        self.get(handle).set_active(is_active)

    def remove_source(self, handle: int) -> None:
        """Retire an emitter; its handle is never reused."""
        emitter = self.get(handle)
        emitter.removed = True
        emitter.is_active = False
        logger.info("Removed emitter #%d", handle)

    def __iter__(self) -> Iterator[Emitter]:
        return (e for e in self._emitters if not e.removed)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    # -------------------------------------------------------------------------
    # Injection
    # -------------------------------------------------------------------------

    def update_sources(self) -> None:
        """Add every active emitter's contribution to the source buffers."""
        state = self.sim_state
        params = state.params
        fields = state.fields

        for emitter in self:
            if not emitter.is_active or emitter.n_cells == 0:
                continue
            ind = emitter.indices
            payload = emitter.payload

            if emitter.source_type is SourceType.GAS:
                density_rate = payload.flow_rate / (emitter.n_cells * self.cell_area)
                np.add.at(fields.density_source, ind, density_rate)
                if params.temperature_on:
                    heat_rate = (
                        density_rate / params.air_density
                        * (payload.temperature - params.air_temperature)
                    )
                    np.add.at(fields.temperature_source, ind, heat_rate)

            elif emitter.source_type is SourceType.WIND:
                theta = math.radians(payload.angle)
                speed = payload.speed / params.length_scale
                np.add.at(fields.x_velocity_source, ind, speed * math.cos(theta))
                np.add.at(fields.y_velocity_source, ind, -speed * math.sin(theta))

            elif emitter.source_type is SourceType.HEAT:
                if params.temperature_on:
                    np.add.at(
                        fields.temperature_source, ind,
                        payload.temperature - params.air_temperature,
                    )

            elif emitter.source_type is SourceType.ENERGY:
                if params.temperature_on:
                    gap = payload.reference_temperature - mixed_temperature(ind, params, fields)
                    np.add.at(
                        fields.temperature_source, ind,
                        payload.flux * gap / payload.reference_temperature,
                    )
