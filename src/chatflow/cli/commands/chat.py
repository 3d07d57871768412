"""Chat command for interactive previews."""

import asyncio
from pathlib import Path

import typer

from chatflow.core.errors import ChatflowError


def run_chat(
    flow: Path = typer.Argument(..., help="Path to the exported flow JSON"),
    settings: Path | None = typer.Option(
        None, "--settings", "-s", help="Path to settings YAML file or directory"
    ),
    welcome: str | None = typer.Option(
        None, "--welcome", "-w", help="Welcome message shown before the flow starts"
    ),
    step_delay: float | None = typer.Option(
        None, "--step-delay", help="Seconds to pause before each block"
    ),
    debug: bool = typer.Option(False, "--debug", help="Debug mode"),
) -> None:
    """Preview a flow as a chat conversation."""
    from chatflow.cli.simulator import SimulatorConfig, run_simulation

    config = SimulatorConfig(
        flow_path=flow,
        settings_path=settings,
        mode="chat",
        welcome_message=welcome,
        step_delay=step_delay,
        debug=debug,
    )

    try:
        asyncio.run(run_simulation(config))
    except KeyboardInterrupt:
        pass
    except ChatflowError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
