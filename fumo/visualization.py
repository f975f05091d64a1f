"""
Visualization module for Fumo.

This module provides a coarse terminal rendering of a field (for watching
a run from the console) and matplotlib figures of the simulated fields.
Both consume read-only views of the current generation and never touch
the simulation state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import matplotlib.pyplot as plt
import numpy as np
from matplotlib import cm

from fumo.grid import Field, as_grid

if TYPE_CHECKING:
    from fumo.simulation import SimulationState

logger = logging.getLogger(__name__)


# =============================================================================
# Color Maps and Styles
# =============================================================================

FIELD_CMAPS = {
    Field.DENSITY: cm.gray,
    Field.TEMPERATURE: cm.inferno,
    Field.X_VELOCITY: cm.RdBu_r,
    Field.Y_VELOCITY: cm.RdBu_r,
}

FIELD_LABELS = {
    Field.DENSITY: "Gas density (kg/m³)",
    Field.TEMPERATURE: "Temperature excess (K)",
    Field.X_VELOCITY: "x-velocity (domain/s)",
    Field.Y_VELOCITY: "y-velocity (domain/s)",
}

# Terminal ramp from faint to dense
ASCII_RAMP = " .:-=+*#%@"


# =============================================================================
# Terminal Rendering
# =============================================================================


def format_grid(field: np.ndarray, n: int, minimum: float = 0.0) -> str:
    """
    Render the interior of a flat field as text.

    Cells at or below ``minimum`` are blank; the rest are mapped linearly
    onto ``ASCII_RAMP`` between ``minimum`` and the field maximum. Row 1
    (the top of the domain) is printed first.

    Parameters
    ----------
    field : np.ndarray
        Flat field of ``(n+2)**2`` cells.
    n : int
        Interior resolution.
    minimum : float
        Display threshold.

    Returns
    -------
    str
        ``n`` lines of ``n`` characters each.
    """
    interior = np.asarray(as_grid(np.asarray(field), n)[1:-1, 1:-1], dtype=np.float64)
    peak = float(interior.max()) if interior.size else minimum
    span = peak - minimum

    levels = np.zeros(interior.shape, dtype=np.intp)
    visible = interior > minimum
    if span > 0.0:
        scaled = (interior - minimum) / span * (len(ASCII_RAMP) - 1)
        levels = np.clip(np.ceil(scaled), 1, len(ASCII_RAMP) - 1).astype(np.intp)
    levels[~visible] = 0

    ramp = np.array(list(ASCII_RAMP))
    return "\n".join("".join(row) for row in ramp[levels])


def display_grid(
    state: SimulationState,
    minimum: float = 0.0,
    field: Field | str = Field.DENSITY,
) -> None:
    """Print ``field`` of ``state`` to the terminal."""
    click.echo(format_grid(state.get_field(field), state.get_n(), minimum))


# =============================================================================
# Static Plotting Functions
# =============================================================================


def _interior_image(state: SimulationState, field: Field) -> np.ndarray:
    n = state.get_n()
    return as_grid(state.get_field(field), n)[1:-1, 1:-1]


def plot_field(
    state: SimulationState,
    field: Field | str = Field.DENSITY,
    output_path: Path | None = None,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 7),
    dpi: int = 150,
    vmax: float | None = None,
) -> plt.Figure:
    """
    Plot one field of the simulation.

    Parameters
    ----------
    state : SimulationState
        Simulation to read from.
    field : Field or str
        Which field to show.
    output_path : Path, optional
        If provided, save figure to this path.
    title : str, optional
        Plot title; defaults to the field label and simulated time.
    figsize : tuple
        Figure size in inches.
    dpi : int
        Figure resolution.
    vmax : float, optional
        Maximum value for the color scale.

    Returns
    -------
    Figure
        Matplotlib figure object.
    """
    field = Field(field)
    image = _interior_image(state, field)
    length = state.params.length_scale

    fig, ax = plt.subplots(figsize=figsize)

    kwargs = {}
    if field in (Field.X_VELOCITY, Field.Y_VELOCITY):
        limit = vmax if vmax is not None else max(float(np.abs(image).max()), 1e-12)
        kwargs.update(vmin=-limit, vmax=limit)
    elif vmax is not None:
        kwargs.update(vmin=0, vmax=vmax)

    im = ax.imshow(
        image,
        extent=[0, length, 0, length],
        origin="upper",
        cmap=FIELD_CMAPS[field],
        aspect="equal",
        **kwargs,
    )
    ax.set_title(title or f"{FIELD_LABELS[field]} at t = {state.time:.2f} s")
    ax.set_xlabel("x (m)")
    ax.set_ylabel("height (m)")
    plt.colorbar(im, ax=ax, label=FIELD_LABELS[field])

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
        logger.info(f"Saved {field.value} plot to {output_path}")

    return fig


def plot_fields(
    state: SimulationState,
    output_path: Path | None = None,
    figsize: tuple[float, float] = (12, 10),
    dpi: int = 150,
) -> plt.Figure:
    """
    Plot all four fields in a 2x2 panel.

    Parameters
    ----------
    state : SimulationState
        Simulation to read from.
    output_path : Path, optional
        If provided, save figure to this path.
    figsize : tuple
        Figure size in inches.
    dpi : int
        Figure resolution.

    Returns
    -------
    Figure
        Matplotlib figure object.
    """
    fig, axes = plt.subplots(2, 2, figsize=figsize)
    length = state.params.length_scale

    for ax, field in zip(axes.flat, Field):
        image = _interior_image(state, field)
        kwargs = {}
        if field in (Field.X_VELOCITY, Field.Y_VELOCITY):
            limit = max(float(np.abs(image).max()), 1e-12)
            kwargs.update(vmin=-limit, vmax=limit)
        im = ax.imshow(
            image,
            extent=[0, length, 0, length],
            origin="upper",
            cmap=FIELD_CMAPS[field],
            aspect="equal",
            **kwargs,
        )
        ax.set_title(FIELD_LABELS[field])
        plt.colorbar(im, ax=ax)

    fig.suptitle(f"t = {state.time:.2f} s (step {state.step_count})")
    plt.tight_layout()

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
        logger.info(f"Saved field panel to {output_path}")

    return fig
