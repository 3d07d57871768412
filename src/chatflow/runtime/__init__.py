"""Flow execution runtime."""

from chatflow.runtime.runner import FlowRunner, SelectedOption

__all__ = ["FlowRunner", "SelectedOption"]
