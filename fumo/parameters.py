"""
Physical constants and solver options for the Fumo simulator.

This module defines:
- ``ParameterDef`` entries with default values, physical bounds,
  units and descriptions for every tunable quantity
- ``SimulationParameters``, the immutable value object owned by a
  ``SimulationState``
- Named presets covering the common smoke/heat set-ups

All coefficients are given in SI units. The solver converts them to
domain units (domain side = 1) on use, see ``fumo.mixing``.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List

import yaml

from fumo.errors import InvalidParametersError


# =============================================================================
# Parameter Definition Classes
# =============================================================================

@dataclass
class ParameterDef:
    """Definition of a single physical parameter."""
    name: str
    default: float
    min_val: float
    max_val: float
    units: str
    description: str
    category: str = "general"

    def validate(self, value: float) -> float:
        """Return ``value`` if it is finite and within bounds, else raise."""
        if not math.isfinite(value) or value < self.min_val or value > self.max_val:
            raise InvalidParametersError(
                f"{self.name}={value} outside [{self.min_val}, {self.max_val}] {self.units}"
            )
        return value

    def to_dict(self) -> dict:
        return {
            'default': self.default,
            'min': self.min_val,
            'max': self.max_val,
            'units': self.units,
            'description': self.description,
            'category': self.category,
        }


# =============================================================================
# Physical Constants
# =============================================================================

PHYSICAL_PARAMS = {
    'length_scale': ParameterDef(
        name='length_scale',
        default=1.0,
        min_val=1e-6,
        max_val=1e6,
        units='m',
        description='Physical side length of the square domain',
        category='geometry',
    ),
    'viscosity': ParameterDef(
        name='viscosity',
        default=1.5e-5,
        min_val=0.0,
        max_val=1e3,
        units='m^2/s',
        description='Kinematic viscosity of the air',
        category='transport',
    ),
    'diffusion': ParameterDef(
        name='diffusion',
        default=1.0e-5,
        min_val=0.0,
        max_val=1e3,
        units='m^2/s',
        description='Mass diffusivity of the injected gas in air',
        category='transport',
    ),
    'thermal_diffusivity': ParameterDef(
        name='thermal_diffusivity',
        default=2.0e-5,
        min_val=0.0,
        max_val=1e3,
        units='m^2/s',
        description='Thermal diffusivity of the air',
        category='transport',
    ),
    'gravity': ParameterDef(
        name='gravity',
        default=9.81,
        min_val=0.0,
        max_val=100.0,
        units='m/s^2',
        description='Gravitational acceleration driving buoyancy',
        category='buoyancy',
    ),
    'air_density': ParameterDef(
        name='air_density',
        default=1.225,
        min_val=1e-6,
        max_val=1e3,
        units='kg/m^3',
        description='Reference density of ambient air',
        category='buoyancy',
    ),
    'mass_ratio': ParameterDef(
        name='mass_ratio',
        default=1.0,
        min_val=1e-3,
        max_val=1e3,
        units='-',
        description='Molar mass of injected gas relative to air',
        category='buoyancy',
    ),
    'air_temperature': ParameterDef(
        name='air_temperature',
        default=293.15,
        min_val=1.0,
        max_val=1e4,
        units='K',
        description='Ambient air temperature',
        category='thermal',
    ),
    'density_decay': ParameterDef(
        name='density_decay',
        default=0.0,
        min_val=0.0,
        max_val=1e3,
        units='1/s',
        description='Exponential decay rate of gas density toward zero',
        category='dissipation',
    ),
    'temperature_decay': ParameterDef(
        name='temperature_decay',
        default=0.0,
        min_val=0.0,
        max_val=1e3,
        units='1/s',
        description='Exponential decay rate of temperature toward ambient',
        category='dissipation',
    ),
}

SOLVER_STEPS_RANGE = (1, 10000)

ALL_PARAMETERS: Dict[str, ParameterDef] = dict(PHYSICAL_PARAMS)


# =============================================================================
# Simulation Parameters
# =============================================================================

@dataclass(frozen=True)
class SimulationParameters:
    """
    Physical constants and option flags for one simulation.

    Instances are immutable; use ``dataclasses.replace`` (or
    :meth:`with_updates`) to derive a modified copy.

    Attributes
    ----------
    advanced_coefficients : bool
        Derive viscosity and diffusivities from the local mixed state
        instead of using the uniform values.
    gravity_on : bool
        Apply the buoyancy force to the vertical velocity.
    temperature_on : bool
        Simulate the temperature field at all.
    solver_steps : int
        Relaxation iterations used by every diffusion and projection solve.
    """

    length_scale: float = 1.0
    viscosity: float = 1.5e-5
    diffusion: float = 1.0e-5
    gravity: float = 9.81
    air_density: float = 1.225
    mass_ratio: float = 1.0
    air_temperature: float = 293.15
    thermal_diffusivity: float = 2.0e-5
    density_decay: float = 0.0
    temperature_decay: float = 0.0

    # Options
    advanced_coefficients: bool = False
    gravity_on: bool = True
    temperature_on: bool = True
    solver_steps: int = 20

    def __post_init__(self):
        for name, param_def in ALL_PARAMETERS.items():
            param_def.validate(float(getattr(self, name)))

        lo, hi = SOLVER_STEPS_RANGE
        if isinstance(self.solver_steps, bool) or not isinstance(self.solver_steps, int):
            raise InvalidParametersError(
                f"solver_steps must be an integer, got {self.solver_steps!r}"
            )
        if not lo <= self.solver_steps <= hi:
            raise InvalidParametersError(
                f"solver_steps={self.solver_steps} outside [{lo}, {hi}]"
            )

    def with_updates(self, **changes: Any) -> "SimulationParameters":
        """Return a validated copy with ``changes`` applied."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Export to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationParameters":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_yaml(self, path: str) -> None:
        """Save to YAML file."""
        with open(path, 'w') as f:
            yaml.dump({'parameters': self.to_dict()}, f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, path: str) -> "SimulationParameters":
        """Load from YAML file."""
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data.get('parameters', {}))


# =============================================================================
# Presets
# =============================================================================

PRESETS: Dict[str, SimulationParameters] = {
    # Inert tracer in still air: no buoyancy, no heat
    'passive': SimulationParameters(
        gravity_on=False,
        temperature_on=False,
    ),
    # Warm smoke that slowly fades
    'smoke': SimulationParameters(
        mass_ratio=1.0,
        density_decay=0.05,
        temperature_decay=0.2,
    ),
    # Light, hot combustion gas with state-dependent transport
    'hot_gas': SimulationParameters(
        mass_ratio=0.6,
        temperature_decay=0.1,
        advanced_coefficients=True,
        solver_steps=30,
    ),
}


def get_preset(name: str) -> SimulationParameters:
    """Get preset parameters by name."""
    if name not in PRESETS:
        raise ValueError(f"Unknown preset: {name}. Available: {list(PRESETS.keys())}")
    return PRESETS[name]


def get_parameter_info() -> Dict[str, dict]:
    """Get parameter metadata for documentation."""
    return {name: param.to_dict() for name, param in ALL_PARAMETERS.items()}


def list_parameters(category: str | None = None) -> List[str]:
    """List parameter names, optionally restricted to one category."""
    return [
        name for name, param in ALL_PARAMETERS.items()
        if category is None or param.category == category
    ]
