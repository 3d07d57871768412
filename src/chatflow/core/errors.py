"""Error types raised by loaders and collaborators.

The runner never raises for flow content: these errors surface only while
loading documents/settings or inside the HTTP and AI collaborators, where the
runner catches them at the block boundary.
"""


class ChatflowError(Exception):
    """Base class for all chatflow errors."""

    pass


class ConfigError(ChatflowError):
    """Raised when a settings file is missing or invalid."""


class FlowDocumentError(ChatflowError):
    """Raised when a flow document cannot be read or parsed."""

    pass


class IntegrationError(ChatflowError):
    """Raised when an outbound HTTP call fails."""

    pass


class CompletionError(ChatflowError):
    """Raised when the AI completion backend yields no usable answer."""

    pass
