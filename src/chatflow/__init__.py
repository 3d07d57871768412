"""chatflow - conversation engine for block-based chatbot flows.

Runs flows built in a visual editor (WhatsApp-style blocks connected by
edges): emits messages, branches on stored variables, waits for user input
and drives delays, HTTP integrations and AI calls.

Quick start:
    from chatflow import BufferedDisplaySink, FlowDocument, FlowRunner

    document = FlowDocument.load("flow.json")
    sink = BufferedDisplaySink()
    runner = FlowRunner.from_document(document, sink)

    await runner.start()
    await runner.provide_input("Ana")
"""

from chatflow.__version__ import __version__
from chatflow.config.blocks import BlockOption, BlockType, Edge
from chatflow.config.document import FlowDocument, WidgetConfig
from chatflow.config.settings import Settings
from chatflow.core.constants import RunStatus
from chatflow.core.display import (
    BufferedDisplaySink,
    DisplayMessage,
    DisplaySink,
    DisplayState,
)
from chatflow.core.errors import (
    ChatflowError,
    CompletionError,
    ConfigError,
    FlowDocumentError,
    IntegrationError,
)
from chatflow.core.template import resolve
from chatflow.flow.graph import FlowGraph
from chatflow.runtime.runner import FlowRunner, SelectedOption

__all__ = [
    # Version info
    "__version__",
    # Engine
    "FlowRunner",
    "SelectedOption",
    "RunStatus",
    "resolve",
    # Flow model
    "FlowDocument",
    "FlowGraph",
    "WidgetConfig",
    "BlockType",
    "BlockOption",
    "Edge",
    "Settings",
    # Display
    "DisplaySink",
    "BufferedDisplaySink",
    "DisplayMessage",
    "DisplayState",
    # Errors
    "ChatflowError",
    "ConfigError",
    "FlowDocumentError",
    "IntegrationError",
    "CompletionError",
]
