"""Immutable graph snapshot of one flow."""

from collections.abc import Iterable, Iterator
from types import MappingProxyType
from typing import Any

from chatflow.config.blocks import AnyBlock, Edge, StartBlock
from chatflow.config.document import FlowDocument
from chatflow.flow.router import Router


class FlowGraph:
    """Blocks indexed by id plus the edges between them.

    Blocks and edges are frozen models, so a graph never changes after
    construction; restarting a conversation means building a new runner,
    not mutating the graph.
    """

    def __init__(self, blocks: Iterable[AnyBlock], edges: Iterable[Edge] = ()) -> None:
        self._order: tuple[AnyBlock, ...] = tuple(blocks)
        self._blocks = MappingProxyType({block.id: block for block in self._order})
        self._edges: tuple[Edge, ...] = tuple(edges)
        self.router = Router(self._edges)

    @classmethod
    def from_document(cls, document: FlowDocument) -> "FlowGraph":
        return cls(document.nodes, document.edges)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FlowGraph":
        """Build from a decoded flow document (``{"nodes", "edges"}``)."""
        return cls.from_document(FlowDocument.from_dict(data))

    @property
    def blocks(self) -> tuple[AnyBlock, ...]:
        """Blocks in declaration order."""
        return self._order

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._edges

    @property
    def start_block(self) -> StartBlock | None:
        """The flow's Start block (first one if the document holds several)."""
        for block in self._order:
            if isinstance(block, StartBlock):
                return block
        return None

    def get_block(self, block_id: str) -> AnyBlock | None:
        return self._blocks.get(block_id)

    def __contains__(self, block_id: object) -> bool:
        return block_id in self._blocks

    def __iter__(self) -> Iterator[AnyBlock]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)
