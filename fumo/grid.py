"""
Grid storage for the Fumo simulator.

Every field is stored as a flat float64 array of ``(N+2)**2`` cells in
row-major order: cell ``(i, j)`` lives at offset ``i + (N+2)*j`` where ``i``
is the column (x) index and ``j`` the row (y) index. The outer ring
(``i`` or ``j`` in ``{0, N+1}``) holds boundary-condition values only.

Each of the four physical fields keeps three generations:

    current   -- result of the last completed step, read by callers
    previous  -- scratch/input buffer for the operators
    source    -- per-step injection rates, cleared after every step
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

import numpy as np

from fumo.errors import InvalidResolutionError


class FieldKind(IntEnum):
    """Physical kind of a field, selecting its boundary rule."""
    SCALAR = 0
    X_VELOCITY = 1
    Y_VELOCITY = 2


class Field(str, Enum):
    """Names of the simulated fields."""
    X_VELOCITY = "x_velocity"
    Y_VELOCITY = "y_velocity"
    DENSITY = "density"
    TEMPERATURE = "temperature"


FIELD_KINDS = {
    Field.X_VELOCITY: FieldKind.X_VELOCITY,
    Field.Y_VELOCITY: FieldKind.Y_VELOCITY,
    Field.DENSITY: FieldKind.SCALAR,
    Field.TEMPERATURE: FieldKind.SCALAR,
}


def cell_count(n: int) -> int:
    """Total number of cells, boundary ring included, for resolution ``n``."""
    return (n + 2) * (n + 2)


def index(i: int, j: int, n: int) -> int:
    """Linear offset of cell ``(i, j)`` on a grid of resolution ``n``."""
    return i + (n + 2) * j


def as_grid(array: np.ndarray, n: int) -> np.ndarray:
    """Return the ``(N+2, N+2)`` view of a flat field, indexed ``[j, i]``."""
    return array.reshape(n + 2, n + 2)


def validate_resolution(n) -> int:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n <= 0:
        raise InvalidResolutionError(f"Grid resolution must be a positive integer, got {n!r}")
    return int(n)


@dataclass
class GridFields:
    """Twelve flat arrays: four fields times three generations."""

    x_velocity: np.ndarray
    y_velocity: np.ndarray
    density: np.ndarray
    temperature: np.ndarray

    x_velocity_prev: np.ndarray
    y_velocity_prev: np.ndarray
    density_prev: np.ndarray
    temperature_prev: np.ndarray

    x_velocity_source: np.ndarray
    y_velocity_source: np.ndarray
    density_source: np.ndarray
    temperature_source: np.ndarray

    @classmethod
    def zeros(cls, n: int) -> "GridFields":
        """Allocate zeroed fields for a grid of resolution ``n``."""
        n = validate_resolution(n)
        size = cell_count(n)
        names = [
            f"{field.value}{suffix}"
            for suffix in ("", "_prev", "_source")
            for field in Field
        ]
        return cls(**{name: np.zeros(size, dtype=np.float64) for name in names})

    @property
    def size(self) -> int:
        return self.density.shape[0]

    def current(self, field: Field) -> np.ndarray:
        return getattr(self, Field(field).value)

    def previous(self, field: Field) -> np.ndarray:
        return getattr(self, f"{Field(field).value}_prev")

    def source(self, field: Field) -> np.ndarray:
        return getattr(self, f"{Field(field).value}_source")

    def swap(self, field: Field) -> None:
        """Exchange the current and previous buffers of ``field``."""
        name = Field(field).value
        current = getattr(self, name)
        setattr(self, name, getattr(self, f"{name}_prev"))
        setattr(self, f"{name}_prev", current)

    def clear_sources(self) -> None:
        for field in Field:
            self.source(field).fill(0.0)

    def clear(self) -> None:
        """Zero every generation of every field."""
        for field in Field:
            self.current(field).fill(0.0)
            self.previous(field).fill(0.0)
            self.source(field).fill(0.0)
