"""Edge routing between blocks."""

import logging
from collections.abc import Iterable

from chatflow.config.blocks import Edge

logger = logging.getLogger(__name__)


class Router:
    """Finds the successor of a block by scanning its outgoing edges.

    Edges keep declaration order, so a malformed graph with several matching
    edges always resolves to the first one.
    """

    def __init__(self, edges: Iterable[Edge]) -> None:
        self._outgoing: dict[str, list[Edge]] = {}
        for edge in edges:
            self._outgoing.setdefault(edge.source, []).append(edge)

    def outgoing(self, source_id: str) -> tuple[Edge, ...]:
        """Edges leaving ``source_id`` in declaration order."""
        return tuple(self._outgoing.get(source_id, ()))

    def next_block_id(self, source_id: str, handle: str | None = None) -> str | None:
        """Target of the first edge leaving ``source_id`` through ``handle``.

        Without a handle, the first edge from the source matches whatever its
        handle. Returns None when no edge matches: the flow ends there.
        """
        for edge in self._outgoing.get(source_id, ()):
            if handle is None or edge.source_handle == handle:
                return edge.target

        if handle is not None:
            logger.debug(f"No edge from '{source_id}' through handle '{handle}'")
        return None
