"""External collaborators: outbound HTTP and AI completion."""

from chatflow.integrations.ai import CompletionClient, DSPyCompletion
from chatflow.integrations.http import HttpClient, HttpxClient

__all__ = ["CompletionClient", "DSPyCompletion", "HttpClient", "HttpxClient"]
