"""
Fumo: Stable-Fluids Smoke and Heat Simulator
============================================

A fixed-grid, semi-implicit fluid solver in the "stable fluids" family.
Each time step advances velocity, gas density and temperature on a uniform
2-D grid by combining implicit diffusion, semi-Lagrangian advection,
Helmholtz-Hodge projection, buoyancy and exponential dissipation.

The solver is meant to be embedded: a caller defines emitters or fills the
source buffers, advances one step, and reads the fields back.

Modules
-------
parameters : Physical constants, bounds and presets
grid : Flat field storage with three generations per field
boundary : Wall boundary conditions
mixing : Mixed density/temperature and adjusted coefficients
diffusion : Implicit diffusion by red-black Gauss-Seidel relaxation
projection : Pressure projection of the velocity field
advection : Semi-Lagrangian transport
forcing : Buoyancy and dissipation
simulation : SimulationState and the step orchestration
sources : Gas, wind, heat and energy emitters
config : YAML run configuration
visualization : Terminal and matplotlib rendering
cli : Command-line interface

References
----------
- Stam, J. (1999). Stable Fluids. SIGGRAPH 99.
- Stam, J. (2003). Real-Time Fluid Dynamics for Games. GDC 2003.
- Fedkiw, R., Stam, J., Jensen, H.W. (2001). Visual Simulation of Smoke.
"""

__version__ = "0.1.0"

from fumo.errors import (
    FumoError,
    InvalidParametersError,
    InvalidResolutionError,
    InvalidShapeParametersError,
    InvalidTimeStepError,
    SizeMismatchError,
    UnknownSourceError,
)
from fumo.grid import Field, FieldKind, GridFields
from fumo.parameters import PRESETS, SimulationParameters, get_preset
from fumo.simulation import SimulationState
from fumo.sources import Emitter, Shape, SourceManager, SourceType

__all__ = [
    # Version
    "__version__",
    # Core
    "SimulationState",
    "SimulationParameters",
    "GridFields",
    "Field",
    "FieldKind",
    "PRESETS",
    "get_preset",
    # Sources
    "SourceManager",
    "Emitter",
    "Shape",
    "SourceType",
    # Errors
    "FumoError",
    "InvalidResolutionError",
    "SizeMismatchError",
    "InvalidTimeStepError",
    "InvalidShapeParametersError",
    "InvalidParametersError",
    "UnknownSourceError",
]
