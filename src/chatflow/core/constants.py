"""Core constants and enums."""

from enum import Enum


class RunStatus(str, Enum):
    """Lifecycle of a flow runner."""

    IDLE = "idle"
    RUNNING = "running"
    WAITING_FOR_INPUT = "waiting_for_input"
    FINISHED = "finished"


class MessageKind(str, Enum):
    """What a conversation message renders as."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    LOCATION = "location"
    TEMPLATE = "template"
    ERROR = "error"


# Handles used by Condition blocks
THEN_HANDLE = "then"
ELSE_HANDLE = "else"

# Fallback content for blocks whose fields resolve to nothing
EMPTY_TEXT_PLACEHOLDER = "..."
PLACEHOLDER_IMAGE_URL = "https://picsum.photos/200/150"
DOCUMENT_PLACEHOLDER = "Document"
LOCATION_PLACEHOLDER = "Location"
