"""Core domain types and infrastructure."""

from chatflow.core.condition import evaluate_condition
from chatflow.core.constants import MessageKind, RunStatus
from chatflow.core.display import (
    BufferedDisplaySink,
    CallbackDisplaySink,
    DisplayMessage,
    DisplaySink,
    DisplayState,
    as_display_sink,
)
from chatflow.core.template import resolve, stringify
from chatflow.core.variables import VariableStore

__all__ = [
    "BufferedDisplaySink",
    "CallbackDisplaySink",
    "DisplayMessage",
    "DisplaySink",
    "DisplayState",
    "MessageKind",
    "RunStatus",
    "VariableStore",
    "as_display_sink",
    "evaluate_condition",
    "resolve",
    "stringify",
]
