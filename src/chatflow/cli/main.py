"""Main CLI entry point for chatflow."""

import typer

from chatflow.__version__ import __version__
from chatflow.cli.commands import chat as chat_module
from chatflow.cli.commands import inspect as inspect_module
from chatflow.cli.commands import simulate as simulate_module

app = typer.Typer(
    name="chatflow",
    help="chatflow - run and preview chatbot flows from the terminal",
    add_completion=False,
)

# Register subcommands
app.command("simulate", help="Run a flow and print its execution log")(simulate_module.run_simulate)
app.command("chat", help="Preview a flow as a chat conversation")(chat_module.run_chat)
app.command("inspect", help="Show the blocks and edges of a flow")(inspect_module.run_inspect)


def version_callback(value: bool) -> None:
    """Print version and exit"""
    if value:
        typer.echo(f"chatflow version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """chatflow - run and preview chatbot flows from the terminal"""
    pass


def cli() -> None:
    """Entry point for CLI"""
    app()


if __name__ == "__main__":
    cli()
