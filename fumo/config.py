"""
Configuration loading and validation for Fumo.

This module provides Pydantic models for validating the fumo.yaml run
configuration and utility functions for loading configurations.

Example configuration::

    grid:
      resolution: 64
      time_step: 0.05
      n_steps: 200
    parameters:
      preset: smoke
      gravity: 9.81
    sources:
      - type: gas
        shape: circle
        x: 32
        y: 56
        radius: 4
        flow_rate: 0.5
        temperature: 350
    output:
      display: true
      display_interval: 20
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from fumo.parameters import SimulationParameters, get_preset, PRESETS
from fumo.simulation import SimulationState
from fumo.sources import Shape, SourceManager, SourceType

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================


class GridConfig(BaseModel):
    """Grid and time-stepping configuration."""

    resolution: int = Field(64, ge=1, description="Interior cells per side (N)")
    time_step: float = Field(0.05, gt=0, description="Time step in seconds")
    n_steps: int = Field(100, ge=0, description="Number of steps to run")


class ParametersConfig(BaseModel):
    """Physical parameters; unset values come from the preset or defaults."""

    preset: str | None = Field(None, description="Named parameter preset")

    length_scale: float | None = None
    viscosity: float | None = None
    diffusion: float | None = None
    gravity: float | None = None
    air_density: float | None = None
    mass_ratio: float | None = None
    air_temperature: float | None = None
    thermal_diffusivity: float | None = None
    density_decay: float | None = None
    temperature_decay: float | None = None

    advanced_coefficients: bool | None = None
    gravity_on: bool | None = None
    temperature_on: bool | None = None
    solver_steps: int | None = None

    @field_validator("preset")
    @classmethod
    def check_preset(cls, v: str | None) -> str | None:
        if v is not None and v not in PRESETS:
            raise ValueError(f"Unknown preset '{v}'. Available: {list(PRESETS.keys())}")
        return v

    def to_parameters(self) -> SimulationParameters:
        """Build validated ``SimulationParameters``."""
        base = get_preset(self.preset) if self.preset else SimulationParameters()
        overrides = {
            k: v for k, v in self.model_dump(exclude={"preset"}).items()
            if v is not None
        }
        return base.with_updates(**overrides)


class SourceConfig(BaseModel):
    """A single emitter."""

    type: Literal["gas", "wind", "heat", "energy"]
    shape: Literal["square", "circle", "diamond"] = "circle"
    x: float = Field(..., description="Center column in cell units")
    y: float = Field(..., description="Center row in cell units")
    radius: float = Field(..., gt=0, description="Radius in cell units")
    active: bool = True

    # Type-specific payload
    flow_rate: float | None = Field(None, description="Gas flow rate (kg/s)")
    temperature: float | None = Field(None, description="Gas or heat temperature (K)")
    angle: float | None = Field(None, description="Wind direction (deg, CCW from +x)")
    speed: float | None = Field(None, description="Wind speed (m/s)")
    flux: float | None = Field(None, description="Energy heating flux (K/s)")
    reference_temperature: float | None = Field(None, description="Energy reference temperature (K)")

    @model_validator(mode="after")
    def check_payload(self) -> "SourceConfig":
        """Validate that the payload required by the type is present."""
        required = {
            "gas": ("flow_rate", "temperature"),
            "wind": ("angle", "speed"),
            "heat": ("temperature",),
            "energy": ("flux", "reference_temperature"),
        }[self.type]
        missing = [name for name in required if getattr(self, name) is None]
        if missing:
            raise ValueError(f"{self.type} source requires: {', '.join(missing)}")
        return self


class OutputConfig(BaseModel):
    """Console and figure output."""

    display: bool = Field(False, description="Print the field to the terminal")
    display_field: Literal["density", "temperature", "x_velocity", "y_velocity"] = "density"
    display_threshold: float = Field(0.0, description="Minimum value shown")
    display_interval: int = Field(10, ge=1, description="Steps between displays")
    plot_path: Path | None = Field(None, description="Save a field panel here at the end")


class FumoConfig(BaseModel):
    """Root configuration model."""

    grid: GridConfig = Field(default_factory=GridConfig)
    parameters: ParametersConfig = Field(default_factory=ParametersConfig)
    sources: list[SourceConfig] = Field(default_factory=list)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def check_sources_inside_grid(self) -> "FumoConfig":
        n = self.grid.resolution
        for k, src in enumerate(self.sources):
            for name in ("x", "y"):
                value = getattr(src, name)
                if not 0.5 <= value <= n + 0.5:
                    raise ValueError(
                        f"sources[{k}].{name}={value} outside grid [0.5, {n + 0.5}]"
                    )
        return self

    def to_parameters(self) -> SimulationParameters:
        return self.parameters.to_parameters()

    def build(self) -> tuple[SimulationState, SourceManager]:
        """Create the simulation state and its emitters."""
        state = SimulationState(self.grid.resolution, self.to_parameters())
        manager = SourceManager(state)
        for src in self.sources:
            shape = Shape(src.shape)
            kind = SourceType(src.type)
            if kind is SourceType.GAS:
                handle = manager.create_gas_source(
                    shape, src.flow_rate, src.temperature, src.x, src.y, src.radius)
            elif kind is SourceType.WIND:
                handle = manager.create_wind_source(
                    shape, src.angle, src.speed, src.x, src.y, src.radius)
            elif kind is SourceType.HEAT:
                handle = manager.create_heat_source(
                    shape, src.temperature, src.x, src.y, src.radius)
            else:
                handle = manager.create_energy_source(
                    shape, src.flux, src.reference_temperature, src.x, src.y, src.radius)
            manager.set_active(handle, src.active)
        return state, manager


# =============================================================================
# Configuration Loading
# =============================================================================


def _resolve_paths(config: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Resolve the output plot path relative to the configuration file."""
    output = config.get("output")
    if isinstance(output, dict) and output.get("plot_path"):
        path = Path(output["plot_path"])
        if not path.is_absolute():
            output["plot_path"] = str((base_dir / path).resolve())
    return config


def load_config(config_path: str | Path) -> FumoConfig:
    """
    Load and validate configuration from a YAML file.

    Parameters
    ----------
    config_path : str or Path
        Path to the fumo.yaml configuration file.

    Returns
    -------
    FumoConfig
        Validated configuration object.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    ValueError
        If the configuration is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        raise ValueError(f"Empty configuration file: {config_path}")

    raw_config = _resolve_paths(raw_config, config_path.parent)

    config = FumoConfig.model_validate(raw_config)

    logger.info(
        f"Configuration loaded: {config.grid.resolution}x{config.grid.resolution} grid, "
        f"{len(config.sources)} source(s)"
    )
    return config


def write_config_template(path: str | Path) -> Path:
    """Write a documented example configuration to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    n = 64
    template = {
        "grid": {"resolution": n, "time_step": 0.05, "n_steps": 200},
        "parameters": {"preset": "smoke", "solver_steps": 20},
        "sources": [
            {
                "type": "gas", "shape": "circle", "x": n / 2, "y": n - 6,
                "radius": 4, "flow_rate": 0.02, "temperature": 350.0,
            },
            {
                "type": "wind", "shape": "square", "x": 8, "y": n / 2,
                "radius": 3, "angle": 0.0, "speed": 0.5, "active": False,
            },
        ],
        "output": {"display": True, "display_interval": 20, "display_threshold": 0.01},
    }
    with open(path, "w") as f:
        yaml.dump(template, f, default_flow_style=False, sort_keys=False)
    return path
