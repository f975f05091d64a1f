#!/usr/bin/env python3
"""
Rising Smoke Plume Demo for Fumo.

This script drives the simulation core directly, the way an embedding
application would:

1. Create a simulation state and its emitters
2. Inject a warm gas source near the floor and a gusting side wind
3. Step the solver, toggling the wind on and off
4. Print the plume to the terminal and save a field panel

Usage:
    python examples/smoke_plume.py
"""

import logging
from pathlib import Path

from fumo import Shape, SimulationState, SourceManager, get_preset
from fumo.visualization import display_grid, plot_fields

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main():
    n = 48
    dt = 0.05

    state = SimulationState(n, get_preset("smoke"))
    emitters = SourceManager(state)

    emitters.create_gas_source(Shape.CIRCLE, 0.01, 380.0, n / 2, n - 4, 3)
    emitters.create_heat_source(Shape.DIAMOND, 330.0, n / 2, n - 2, 2)
    wind = emitters.create_wind_source(Shape.SQUARE, 0.0, 0.4, 4, n / 2, 3)

    for k in range(200):
        # Gust every other second
        emitters.set_active(wind, (k // 20) % 2 == 1)
        emitters.update_sources()
        state.step(dt)

        if (k + 1) % 50 == 0:
            logger.info(f"t = {state.time:.2f} s, total density = {state.total_density():.4g}")
            display_grid(state, minimum=0.01)

    output = Path(__file__).parent / "output" / "smoke_plume.png"
    plot_fields(state, output_path=output)
    logger.info(f"Saved {output}")


if __name__ == "__main__":
    main()
