"""Flow document model.

A flow document is the unit the editor downloads and shares:
``{"nodes": [...], "edges": [...], "config": {...}}``. Nodes may be bare
blocks or the editor's node wrappers (``{"id", "type", "position", "data"}``),
in which case ``data`` holds the block.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator

from chatflow.config.blocks import Block, Edge, FlowModel
from chatflow.core.errors import FlowDocumentError

logger = logging.getLogger(__name__)


class WidgetConfig(FlowModel):
    """Display settings of the embeddable chat widget."""

    title: str = ""
    avatar_url: str = ""
    theme_color: str = ""
    welcome_message: str = ""


class FlowDocument(FlowModel):
    """Blocks and edges of one conversation definition."""

    nodes: tuple[Block, ...] = Field(default=())
    edges: tuple[Edge, ...] = Field(default=())
    config: WidgetConfig | None = None

    @field_validator("nodes", mode="before")
    @classmethod
    def _unwrap_editor_nodes(cls, value: Any) -> Any:
        """Replace editor node wrappers by the block stored in their ``data``."""
        if not isinstance(value, (list, tuple)):
            return value
        return [_unwrap_node(node) for node in value]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FlowDocument":
        """Validate a document from decoded JSON.

        Raises:
            FlowDocumentError: If the document does not match the block schema.
        """
        if not isinstance(data, dict):
            raise FlowDocumentError(
                f"Flow document must be a JSON object, got {type(data).__name__}"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise FlowDocumentError(f"Invalid flow document: {e}") from e

    @classmethod
    def loads(cls, text: str) -> "FlowDocument":
        """Parse a document from JSON text."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise FlowDocumentError(f"Error parsing flow JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: str | Path) -> "FlowDocument":
        """Load a document from a JSON file.

        Raises:
            FlowDocumentError: If the file is missing or invalid.
        """
        path = Path(path)
        if not path.is_file():
            raise FlowDocumentError(f"Flow file not found: {path}")

        document = cls.loads(path.read_text(encoding="utf-8"))
        logger.debug(f"Loaded flow {path} with {len(document.nodes)} blocks")
        return document

    def to_dict(self) -> dict[str, Any]:
        """Export form with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)

    def dumps(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def dump(self, path: str | Path) -> None:
        """Write the document as JSON."""
        Path(path).write_text(self.dumps(), encoding="utf-8")


def _unwrap_node(node: Any) -> Any:
    if not isinstance(node, dict) or not isinstance(node.get("data"), dict):
        return node
    block = dict(node["data"])
    block.setdefault("id", node.get("id"))
    block.setdefault("type", node.get("type"))
    return block
