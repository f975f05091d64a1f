#!/usr/bin/env python3
"""
Fumo: Stable-Fluids Smoke and Heat Simulator
============================================

Main entry point for running simulations without the CLI. For full CLI
functionality, use:

    fumo run fumo.yaml

Usage
-----
    python run_fumo.py [config_path]

Arguments
---------
config_path : str, optional
    Path to configuration file. Default: fumo.yaml
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path


def main(config_path: str | Path = "fumo.yaml") -> int:
    """
    Run a Fumo simulation.

    Parameters
    ----------
    config_path : str or Path
        Path to configuration YAML file.

    Returns
    -------
    int
        Exit code (0 for success, 1 for failure).
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger = logging.getLogger("fumo")

    print("=" * 60)
    print("FUMO: Stable-Fluids Smoke and Heat Simulator")
    print("=" * 60)
    print()

    config_path = Path(config_path)

    if not config_path.exists():
        logger.error(f"Configuration file not found: {config_path}")
        print(f"\nError: Configuration file not found: {config_path}")
        print("\nTo create a template configuration, run:")
        print("    fumo init")
        return 1

    try:
        from fumo.config import load_config
        from fumo.visualization import display_grid

        config = load_config(config_path)
        state, emitters = config.build()

        logger.info(f"Running {config.grid.n_steps} steps of {config.grid.time_step} s")
        for _ in range(config.grid.n_steps):
            emitters.update_sources()
            state.step(config.grid.time_step)

        display_grid(state, config.output.display_threshold, config.output.display_field)

        print()
        print("=" * 60)
        print("SIMULATION SUMMARY")
        print("=" * 60)
        print(f"Grid: {state.get_n()} x {state.get_n()}")
        print(f"Simulated time: {state.time:.2f} s")
        print(f"Total gas density: {state.total_density():.6g}")
        print("=" * 60)

        return 0

    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except Exception:
        logger.exception("Simulation failed")
        return 1


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
