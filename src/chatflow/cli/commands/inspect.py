"""Inspect command: summarize the blocks and edges of a flow."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from chatflow.config.blocks import (
    AICallBlock,
    AnyBlock,
    ConditionBlock,
    IntegrationBlock,
    ListBlock,
    OptionsBlock,
    SaveResponseBlock,
    TemplateBlock,
)
from chatflow.config.document import FlowDocument
from chatflow.core.errors import FlowDocumentError
from chatflow.flow.graph import FlowGraph

console = Console()


def describe_block(block: AnyBlock) -> str:
    """One-line summary of what a block does."""
    match block:
        case OptionsBlock() | ListBlock():
            labels = ", ".join(option.label for option in block.options)
            return f"{block.message} [{labels}]"
        case ConditionBlock():
            clause = block.clause
            return f"{clause.variable} {clause.operator.value} {clause.value!r}"
        case IntegrationBlock():
            return f"{block.method} {block.url} -> {block.variable_to_save or '-'}"
        case AICallBlock():
            return f"{block.prompt} -> {block.variable_to_save or '-'}"
        case SaveResponseBlock():
            return f"{block.message} -> {block.variable_to_save or '-'}"
        case TemplateBlock():
            return f"{block.template_name} ({block.variables})"
    for field in ("content", "url", "name", "seconds", "label"):
        value = getattr(block, field, None)
        if value:
            return str(value)
    return ""


def run_inspect(
    flow: Path = typer.Argument(..., help="Path to the exported flow JSON"),
) -> None:
    """Show the blocks and edges of a flow."""
    try:
        document = FlowDocument.load(flow)
    except FlowDocumentError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    graph = FlowGraph.from_document(document)
    start = graph.start_block
    console.print(f"Flow: [green]{escape(str(flow))}[/]")
    console.print(f"Start block: [cyan]{escape(start.id) if start else 'none'}[/]\n")

    blocks = Table(title="Blocks")
    blocks.add_column("ID", style="cyan")
    blocks.add_column("Type", style="magenta")
    blocks.add_column("Details")
    for block in graph:
        blocks.add_row(escape(block.id), block.type, escape(describe_block(block)))
    console.print(blocks)

    edges = Table(title="Edges")
    edges.add_column("Source", style="cyan")
    edges.add_column("Handle", style="yellow")
    edges.add_column("Target", style="cyan")
    for edge in graph.edges:
        missing = "" if edge.target in graph else " [red](missing)[/]"
        edges.add_row(
            escape(edge.source),
            escape(edge.source_handle or "-"),
            f"{escape(edge.target)}{missing}",
        )
    console.print(edges)
