"""Flow graph model and routing."""

from chatflow.flow.graph import FlowGraph
from chatflow.flow.router import Router

__all__ = ["FlowGraph", "Router"]
