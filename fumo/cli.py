"""
Command-line interface for Fumo.

This module provides the CLI entry points for running simulations
and other utilities.

Commands:
- fumo run: Run a smoke/heat simulation from a YAML configuration
- fumo init: Generate configuration template
- fumo info: Display system, parameter and preset information
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Optional

import click

logger = logging.getLogger(__name__)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.version_option(package_name="fumo")
def main():
    """
    FUMO: Stable-fluids smoke and heat simulator

    Advances velocity, gas density and temperature on a uniform 2-D grid
    with implicit diffusion, semi-Lagrangian advection and pressure
    projection.

    \b
    Quick Start:
        fumo init                 # Create config template
        fumo run fumo.yaml        # Run simulation
    """
    pass


def _setup_logging(verbose: bool, quiet: bool) -> None:
    if quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True
    )


# =============================================================================
# Run Command
# =============================================================================

def run_simulation_command(
    config_path: Path,
    steps: Optional[int],
    dt: Optional[float],
    preset: Optional[str],
    plot: Optional[Path],
    verbose: bool,
    quiet: bool,
):
    """Core simulation logic for the run command."""
    from fumo.config import load_config
    from fumo.visualization import display_grid, plot_fields

    _setup_logging(verbose, quiet)

    if not quiet:
        click.echo("=" * 60)
        click.echo("FUMO: Smoke and Heat Simulation")
        click.echo("=" * 60)

    try:
        config = load_config(config_path)

        # Apply CLI overrides
        if steps is not None:
            config.grid.n_steps = steps
        if dt is not None:
            config.grid.time_step = dt
        if preset is not None:
            config.parameters.preset = preset
        if plot is not None:
            config.output.plot_path = plot

        state, emitters = config.build()
        out = config.output
        n_steps = config.grid.n_steps
        time_step = config.grid.time_step

        if not quiet:
            click.echo(f"Grid: {state.get_n()} x {state.get_n()}")
            click.echo(f"Time step: {time_step} s, steps: {n_steps}")
            click.echo(f"Emitters: {len(emitters)}")
            click.echo("\nStarting simulation...")

        start = time.perf_counter()
        for k in range(n_steps):
            emitters.update_sources()
            state.step(time_step)

            if out.display and not quiet and (k + 1) % out.display_interval == 0:
                click.echo(f"\n--- step {state.step_count}, t = {state.time:.2f} s ---")
                display_grid(state, out.display_threshold, out.display_field)
        elapsed = time.perf_counter() - start

        if out.plot_path is not None:
            plot_fields(state, output_path=out.plot_path)

        if not quiet:
            click.echo("\n" + "=" * 60)
            click.echo("SIMULATION COMPLETE")
            click.echo("=" * 60)
            click.echo(f"Simulated time: {state.time:.2f} s in {elapsed:.2f} s wall clock")
            click.echo(f"Total gas density: {state.total_density():.6g}")
            if out.plot_path is not None:
                click.echo(f"Field plot: {out.plot_path}")
            click.echo("=" * 60)

    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception("Simulation failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("config_path", type=click.Path(exists=True, path_type=Path))
@click.option("--steps", "-n", type=int, help="Number of time steps")
@click.option("--dt", type=float, help="Time step in seconds")
@click.option("--preset", "-p", type=str, help="Parameter preset (passive, smoke, hot_gas)")
@click.option("--plot", type=click.Path(path_type=Path), help="Save a field panel PNG")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress output")
def run(config_path, steps, dt, preset, plot, verbose, quiet):
    """
    Run a smoke/heat simulation.

    \b
    Examples:
        fumo run fumo.yaml
        fumo run fumo.yaml --steps 500 --dt 0.02
        fumo run fumo.yaml --preset hot_gas --plot out/fields.png -v
    """
    run_simulation_command(config_path, steps, dt, preset, plot, verbose, quiet)


# =============================================================================
# Init Command
# =============================================================================

@main.command()
@click.option("--output", "-o", type=click.Path(path_type=Path), default=Path("fumo.yaml"),
              help="Output path for configuration")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing files")
def init(output: Path, force: bool):
    """
    Generate configuration template.

    Creates a new configuration with a rising warm gas plume and an
    inactive side wind.
    """
    from fumo.config import write_config_template

    output = Path(output)
    if output.suffix not in (".yaml", ".yml"):
        output = output.with_suffix(".yaml")
    if output.exists() and not force:
        click.echo(f"File exists: {output}. Use --force to overwrite.", err=True)
        sys.exit(1)

    write_config_template(output)
    click.echo(f"Created configuration: {output}")


# =============================================================================
# Info Command
# =============================================================================

@main.command()
@click.option("--presets", is_flag=True, help="Show available presets")
@click.option("--parameters", is_flag=True, help="Show all parameters")
def info(presets, parameters):
    """Display system and configuration information."""
    import platform
    import numpy
    from fumo import __version__

    click.echo("=" * 60)
    click.echo("FUMO Smoke and Heat Simulator")
    click.echo("=" * 60)
    click.echo(f"Version: {__version__}")
    click.echo(f"Python: {platform.python_version()}")
    click.echo(f"NumPy: {numpy.__version__}")

    if presets:
        from fumo.parameters import PRESETS
        click.echo("\n" + "=" * 60)
        click.echo("Available Presets:")
        click.echo("=" * 60)
        for name, preset in PRESETS.items():
            click.echo(f"\n{name}:")
            click.echo(f"  gravity_on: {preset.gravity_on}")
            click.echo(f"  temperature_on: {preset.temperature_on}")
            click.echo(f"  advanced_coefficients: {preset.advanced_coefficients}")
            click.echo(f"  solver_steps: {preset.solver_steps}")

    if parameters:
        from fumo.parameters import ALL_PARAMETERS
        click.echo("\n" + "=" * 60)
        click.echo("Physical Parameters:")
        click.echo("=" * 60)
        for name, param in ALL_PARAMETERS.items():
            click.echo(f"  {name}: {param.default} ({param.units})")
            click.echo(f"    {param.description}")
            click.echo(f"    Range: [{param.min_val}, {param.max_val}]")


if __name__ == "__main__":
    main()
