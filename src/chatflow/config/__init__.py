"""Configuration module for chatflow."""

from chatflow.config.blocks import AnyBlock, Block, BlockOption, BlockType, Edge, parse_block
from chatflow.config.document import FlowDocument, WidgetConfig
from chatflow.config.settings import Settings

__all__ = [
    "AnyBlock",
    "Block",
    "BlockOption",
    "BlockType",
    "Edge",
    "FlowDocument",
    "Settings",
    "WidgetConfig",
    "parse_block",
]
