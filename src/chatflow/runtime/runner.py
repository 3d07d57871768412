"""FlowRunner: the conversation engine.

Walks the block graph one block at a time, publishing a display snapshot after
every visible change, and suspends on Options, List and SaveResponse blocks
until :meth:`FlowRunner.provide_input` is called.

State machine::

    IDLE -> RUNNING -> WAITING_FOR_INPUT -> RUNNING -> ... -> FINISHED

Block failures (bad JSON, failed HTTP call) are logged and treated as an
empty result; the run always ends in FINISHED or a stable WAITING_FOR_INPUT.
"""

import asyncio
import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, assert_never

from chatflow.config.blocks import (
    AICallBlock,
    AnyBlock,
    AudioBlock,
    ChoiceBlock,
    ConditionBlock,
    DelayBlock,
    DocumentBlock,
    GroupBlock,
    ImageBlock,
    IntegrationBlock,
    ListBlock,
    LocationBlock,
    OptionsBlock,
    SaveResponseBlock,
    StartBlock,
    TemplateBlock,
    TextBlock,
    VideoBlock,
)
from chatflow.config.document import FlowDocument
from chatflow.core.condition import evaluate_condition
from chatflow.core.constants import (
    DOCUMENT_PLACEHOLDER,
    ELSE_HANDLE,
    EMPTY_TEXT_PLACEHOLDER,
    LOCATION_PLACEHOLDER,
    PLACEHOLDER_IMAGE_URL,
    THEN_HANDLE,
    MessageKind,
    RunStatus,
)
from chatflow.core.display import (
    DisplayMessage,
    DisplaySink,
    DisplayState,
    StateCallback,
    as_display_sink,
)
from chatflow.core.template import resolve
from chatflow.core.variables import VariableStore
from chatflow.flow.graph import FlowGraph
from chatflow.integrations.ai import CompletionClient, DSPyCompletion
from chatflow.integrations.http import HttpClient, HttpxClient
from chatflow.observability.logging import ContextLogger

logger = logging.getLogger(__name__)

WELCOME_MESSAGE_ID = "welcome"


@dataclass(frozen=True)
class SelectedOption:
    """Choice made on an Options or List block."""

    handle_id: str
    label: str


class _Suspend:
    """Marker returned by block handlers that wait for input."""

    def __repr__(self) -> str:
        return "SUSPEND"


SUSPEND = _Suspend()

# What a handler yields: next block id, None (end of flow) or SUSPEND
NextStep = str | None | _Suspend


class FlowRunner:
    """Executes one conversation over a flow graph.

    A runner serves exactly one conversation. Restarting means calling
    :meth:`start` again (which clears variables and conversation) or building
    a new runner; late results of a superseded run are discarded.

    Usage:
        sink = BufferedDisplaySink()
        runner = FlowRunner(FlowGraph.from_document(document), sink)
        await runner.start()
        if runner.status is RunStatus.WAITING_FOR_INPUT:
            await runner.provide_input("Ana")
    """

    def __init__(
        self,
        graph: FlowGraph,
        sink: DisplaySink | StateCallback,
        *,
        http_client: HttpClient | None = None,
        completion: CompletionClient | None = None,
        step_delay: float = 0.0,
    ) -> None:
        self.graph = graph
        self._router = graph.router
        self._sink = as_display_sink(sink)
        self._http = http_client or HttpxClient()
        self._completion = completion or DSPyCompletion()
        self._step_delay = max(step_delay, 0.0)

        self._variables = VariableStore()
        self._state = DisplayState()
        self._status = RunStatus.IDLE
        self._current_id: str | None = None
        self._generation = 0
        self._run_tag = ""
        self._log: logging.LoggerAdapter | logging.Logger = logger

    @classmethod
    def from_document(
        cls,
        document: FlowDocument,
        sink: DisplaySink | StateCallback,
        **kwargs: Any,
    ) -> "FlowRunner":
        return cls(FlowGraph.from_document(document), sink, **kwargs)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def state(self) -> DisplayState:
        """Last published snapshot."""
        return self._state

    @property
    def variables(self) -> MappingProxyType[str, Any]:
        """Read-only copy of the variable store."""
        return self._variables.snapshot()

    @property
    def current_block_id(self) -> str | None:
        return self._current_id

    @property
    def suspended_block(self) -> AnyBlock | None:
        """Block waiting for input, if any."""
        if self._status is not RunStatus.WAITING_FOR_INPUT or self._current_id is None:
            return None
        return self.graph.get_block(self._current_id)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def start(self, welcome_message: str | None = None) -> RunStatus:
        """Start (or restart) the conversation from the Start block.

        Args:
            welcome_message: Optional synthetic bot message shown first.

        Returns:
            Status after the run loop yields (WAITING_FOR_INPUT or FINISHED).
        """
        self._generation += 1
        generation = self._generation
        self._run_tag = uuid.uuid4().hex[:8]
        self._log = ContextLogger(__name__).with_context(run=self._run_tag)

        self._variables.clear()
        self._current_id = None
        self._status = RunStatus.RUNNING

        conversation: tuple[DisplayMessage, ...] = ()
        if welcome_message:
            conversation = (
                DisplayMessage(id=WELCOME_MESSAGE_ID, content=welcome_message, is_user=False),
            )
        await self._publish(DisplayState(conversation=conversation), generation)

        start_block = self.graph.start_block
        if start_block is None:
            self._log.warning("Flow has no Start block, nothing to run")
            self._finish()
            return self._status

        self._log.info(f"Starting flow at '{start_block.id}' ({len(self.graph)} blocks)")
        self._current_id = self._router.next_block_id(start_block.id)
        await self._run(generation)
        return self._status

    async def provide_input(self, value: str, option: SelectedOption | None = None) -> RunStatus:
        """Resume a suspended run with the user's answer.

        Args:
            value: Text typed by the user.
            option: Button/menu choice when answering an Options or List block.
                Without it, ``value`` is matched against the option labels.

        Returns:
            Status after the run loop yields. Calls made while the runner is
            not waiting for input are ignored.
        """
        block = self.suspended_block
        if block is None:
            logger.debug(f"provide_input ignored: runner is {self._status.value}")
            return self._status

        generation = self._generation

        if isinstance(block, ChoiceBlock):
            if option is None:
                option = self.match_option(block, value)
            if option is None:
                await self._report_invalid_choice(block, generation)
                return self._status

            self._status = RunStatus.RUNNING
            await self._emit(generation, option.label, is_user=True)
            self._current_id = self._router.next_block_id(block.id, option.handle_id)
        elif isinstance(block, SaveResponseBlock):
            self._status = RunStatus.RUNNING
            if block.variable_to_save:
                self._variables[block.variable_to_save] = value
                self._log.debug(f"Saved input into '{block.variable_to_save}'")
            await self._emit(generation, value, is_user=True)
            self._current_id = self._router.next_block_id(block.id)
        else:
            self._log.warning(f"Block '{block.id}' ({block.type}) cannot take input")
            return self._status

        await self._update(generation, is_waiting_for_input=False)
        await self._run(generation)
        return self._status

    @staticmethod
    def match_option(block: ChoiceBlock, text: str) -> SelectedOption | None:
        """Option whose label equals ``text``, ignoring case and surrounding blanks."""
        wanted = text.strip().lower()
        if not wanted:
            return None
        for option in block.options:
            if option.label.strip().lower() == wanted:
                return SelectedOption(handle_id=option.id, label=option.label)
        return None

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    async def _run(self, generation: int) -> None:
        while self._is_current(generation):
            block_id = self._current_id
            if block_id is None:
                self._finish()
                return

            block = self.graph.get_block(block_id)
            if block is None:
                self._log.warning(f"Block '{block_id}' not found, ending flow")
                self._current_id = None
                self._finish()
                return

            if isinstance(block, GroupBlock):
                self._current_id = self._router.next_block_id(block.id)
                continue

            if self._step_delay:
                await asyncio.sleep(self._step_delay)
                if not self._is_current(generation):
                    return

            self._log.debug(f"Executing block {block.type} ({block.id})")
            next_step = await self._dispatch(block, generation)
            if not self._is_current(generation):
                return

            if isinstance(next_step, _Suspend):
                self._status = RunStatus.WAITING_FOR_INPUT
                await self._update(generation, is_waiting_for_input=True)
                return

            self._current_id = next_step

    async def _dispatch(self, block: AnyBlock, generation: int) -> NextStep:
        """Run one block and return where to go next."""
        match block:
            case TextBlock():
                content = self._resolve(block.content) or EMPTY_TEXT_PLACEHOLDER
                await self._emit(generation, content)
            case ImageBlock():
                url = self._resolve(block.url) or PLACEHOLDER_IMAGE_URL
                await self._emit(generation, url, kind=MessageKind.IMAGE, attachment={"url": url})
            case AudioBlock():
                url = self._resolve(block.url)
                await self._emit(generation, url, kind=MessageKind.AUDIO, attachment={"url": url})
            case VideoBlock():
                url = self._resolve(block.url)
                await self._emit(generation, url, kind=MessageKind.VIDEO, attachment={"url": url})
            case DocumentBlock():
                await self._emit_document(block, generation)
            case LocationBlock():
                await self._emit_location(block, generation)
            case TemplateBlock():
                await self._emit_template(block, generation)
            case OptionsBlock() | ListBlock():
                await self._emit(
                    generation,
                    self._resolve(block.message) or EMPTY_TEXT_PLACEHOLDER,
                    options=block.options,
                    list_button_text=block.button_text if isinstance(block, ListBlock) else None,
                )
                return SUSPEND
            case SaveResponseBlock():
                await self._emit(generation, self._resolve(block.message) or EMPTY_TEXT_PLACEHOLDER)
                return SUSPEND
            case ConditionBlock():
                return self._route_condition(block)
            case DelayBlock():
                await self._run_delay(block, generation)
            case IntegrationBlock():
                await self._run_integration(block, generation)
            case AICallBlock():
                await self._run_ai_call(block, generation)
            case StartBlock() | GroupBlock():
                pass
            case _:
                assert_never(block)

        return self._router.next_block_id(block.id)

    # ------------------------------------------------------------------
    # Block handlers
    # ------------------------------------------------------------------

    async def _emit_document(self, block: DocumentBlock, generation: int) -> None:
        url = self._resolve(block.url)
        filename = self._resolve(block.filename)
        await self._emit(
            generation,
            filename or DOCUMENT_PLACEHOLDER,
            kind=MessageKind.DOCUMENT,
            attachment={"url": url, "filename": filename},
        )

    async def _emit_location(self, block: LocationBlock, generation: int) -> None:
        name = self._resolve(block.name)
        await self._emit(
            generation,
            name or LOCATION_PLACEHOLDER,
            kind=MessageKind.LOCATION,
            attachment={
                "latitude": self._resolve(block.latitude),
                "longitude": self._resolve(block.longitude),
                "name": name,
                "address": self._resolve(block.address),
            },
        )

    async def _emit_template(self, block: TemplateBlock, generation: int) -> None:
        template_name = self._resolve(block.template_name)
        await self._emit(
            generation,
            f"Using template: {template_name}",
            kind=MessageKind.TEMPLATE,
            attachment={
                "templateName": template_name,
                "variables": [self._resolve(name) for name in block.variable_names],
            },
        )

    def _route_condition(self, block: ConditionBlock) -> str | None:
        clause = block.clause
        handle = THEN_HANDLE if evaluate_condition(clause, self._variables) else ELSE_HANDLE
        self._log.debug(
            f"Condition '{block.id}': {clause.variable!r} {clause.operator.value} "
            f"{clause.value!r} -> {handle}"
        )
        return self._router.next_block_id(block.id, handle)

    async def _run_delay(self, block: DelayBlock, generation: int) -> None:
        await self._update(generation, is_typing=True)
        await asyncio.sleep(max(block.seconds, 0.0))
        await self._update(generation, is_typing=False)

    async def _run_integration(self, block: IntegrationBlock, generation: int) -> None:
        await self._update(generation, is_typing=True)

        succeeded = False
        result: Any = None
        try:
            url = self._resolve(block.url)
            headers = self._decode_headers(block.headers)
            body = json.loads(self._resolve(block.body)) if block.body.strip() else None
            result = await self._http.request(url, block.method, headers, body)
            succeeded = True
        except Exception:
            self._log.exception(f"Integration block '{block.id}' failed, continuing without result")

        if not self._is_current(generation):
            return

        if succeeded and block.variable_to_save:
            self._variables[block.variable_to_save] = result
            self._log.debug(f"Saved HTTP response into '{block.variable_to_save}'")

        await self._update(generation, is_typing=False)

    def _decode_headers(self, raw: str) -> dict[str, str]:
        headers = json.loads(self._resolve(raw or "{}") or "{}")
        if not isinstance(headers, Mapping):
            raise ValueError(f"Headers must be a JSON object, got {type(headers).__name__}")
        return {str(name): str(value) for name, value in headers.items()}

    async def _run_ai_call(self, block: AICallBlock, generation: int) -> None:
        await self._update(generation, is_typing=True)

        reply: str | None = None
        try:
            reply = await self._completion.generate(self._resolve(block.prompt))
        except Exception:
            self._log.exception(f"AI call block '{block.id}' failed, continuing without result")

        if not self._is_current(generation):
            return

        if reply is not None:
            if block.variable_to_save:
                self._variables[block.variable_to_save] = reply
                self._log.debug(f"Saved AI reply into '{block.variable_to_save}'")
            await self._emit(generation, reply)

        await self._update(generation, is_typing=False)

    async def _report_invalid_choice(self, block: ChoiceBlock, generation: int) -> None:
        labels = ", ".join(option.label for option in block.options)
        self._log.info(f"Unmatched answer for '{block.id}', still waiting")
        await self._emit(
            generation,
            f"Invalid option. Choose one of: {labels}",
            kind=MessageKind.ERROR,
            is_error=True,
        )

    # ------------------------------------------------------------------
    # Display helpers
    # ------------------------------------------------------------------

    def _resolve(self, text: str) -> str:
        return resolve(text, self._variables)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _finish(self) -> None:
        self._status = RunStatus.FINISHED
        self._log.info("End of flow reached")

    async def _emit(
        self,
        generation: int,
        content: str,
        *,
        is_user: bool = False,
        **fields: Any,
    ) -> None:
        conversation = self._state.conversation
        message = DisplayMessage(
            id=f"msg-{self._run_tag}-{len(conversation)}",
            content=content,
            is_user=is_user,
            **fields,
        )
        await self._publish(
            self._state.model_copy(update={"conversation": (*conversation, message)}),
            generation,
        )

    async def _update(self, generation: int, **flags: bool) -> None:
        await self._publish(self._state.model_copy(update=flags), generation)

    async def _publish(self, state: DisplayState, generation: int) -> None:
        if not self._is_current(generation):
            return
        self._state = state
        await self._sink.publish(state)
