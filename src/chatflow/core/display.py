"""Display snapshots and the DisplaySink interface.

The runner publishes a new immutable :class:`DisplayState` after every
message and every typing toggle. Sinks receive them in order, one at a time.
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from chatflow.config.blocks import BlockOption, FlowModel
from chatflow.core.constants import MessageKind


class DisplayMessage(FlowModel):
    """One conversation turn as shown to the user."""

    id: str
    content: str
    is_user: bool = False
    options: tuple[BlockOption, ...] | None = None
    list_button_text: str | None = None
    kind: MessageKind = MessageKind.TEXT
    attachment: dict[str, Any] | None = None
    is_error: bool = False


class DisplayState(FlowModel):
    """Snapshot of the conversation pushed to the UI."""

    conversation: tuple[DisplayMessage, ...] = ()
    is_typing: bool = False
    is_waiting_for_input: bool = False

    @property
    def last_message(self) -> DisplayMessage | None:
        return self.conversation[-1] if self.conversation else None

    def to_dict(self) -> dict[str, Any]:
        """Wire form: ``{conversation, isTyping, isWaitingForInput}``."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


StateCallback = Callable[[DisplayState], Awaitable[None] | None]


class DisplaySink(ABC):
    """Interface for streaming display snapshots to the UI (DIP)."""

    @abstractmethod
    async def publish(self, state: DisplayState) -> None:
        """Deliver a snapshot immediately."""
        ...


class BufferedDisplaySink(DisplaySink):
    """Buffers snapshots for testing or batch delivery."""

    def __init__(self) -> None:
        self.states: list[DisplayState] = []

    async def publish(self, state: DisplayState) -> None:
        """Append snapshot to buffer."""
        self.states.append(state)

    @property
    def latest(self) -> DisplayState:
        return self.states[-1] if self.states else DisplayState()

    @property
    def contents(self) -> list[str]:
        """Message contents of the latest snapshot."""
        return [message.content for message in self.latest.conversation]

    def clear(self) -> None:
        """Clear the snapshot buffer."""
        self.states.clear()


class CallbackDisplaySink(DisplaySink):
    """Adapts a plain callback (sync or async) to the sink interface."""

    def __init__(self, callback: StateCallback) -> None:
        self._callback = callback

    async def publish(self, state: DisplayState) -> None:
        result = self._callback(state)
        if inspect.isawaitable(result):
            await result


def as_display_sink(sink: DisplaySink | StateCallback) -> DisplaySink:
    """Accept either a sink or a bare callback."""
    if isinstance(sink, DisplaySink):
        return sink
    if callable(sink):
        return CallbackDisplaySink(sink)
    raise TypeError(f"Expected a DisplaySink or callable, got {type(sink).__name__}")
