"""Interactive flow simulator for the chatflow CLI.

Thin caller of :class:`FlowRunner`: it renders display snapshots either as an
execution log (``[BOT]``, ``[USER]``, ``[INFO]``, ``[ERROR]``, ``[VAR]`` lines)
or as a chat preview, and feeds typed answers back into the runner.
"""

import logging
from abc import abstractmethod
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from chatflow.config.blocks import AnyBlock, ChoiceBlock
from chatflow.config.document import FlowDocument
from chatflow.config.loader import SettingsLoader
from chatflow.config.settings import Settings
from chatflow.core.constants import RunStatus
from chatflow.core.display import DisplayMessage, DisplaySink, DisplayState
from chatflow.core.template import stringify
from chatflow.integrations.ai import DSPyCompletion
from chatflow.integrations.http import HttpxClient
from chatflow.observability.logging import setup_logging
from chatflow.runtime.runner import FlowRunner, SelectedOption

SimulatorMode = Literal["log", "chat"]

EXIT_COMMANDS = ("quit", "exit", "q", "/quit", "/exit")

# Loggers whose records make up the execution log in "log" mode
EXECUTION_LOGGERS = ("chatflow.runtime.runner", "chatflow.integrations.http")


class ExecutionLogHandler(logging.Handler):
    """Prints engine log records as [INFO]/[ERROR] lines of the execution log."""

    def __init__(self, console: Console):
        super().__init__(logging.DEBUG)
        self.console = console

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = record.getMessage()
            if record.exc_info and record.exc_info[1] is not None:
                message = f"{message}: {record.exc_info[1]}"
            if record.levelno >= logging.WARNING:
                self.console.print(f"[red][ERROR] {escape(message)}[/]")
            else:
                self.console.print(f"[dim][INFO] {escape(message)}[/]")
        except Exception:
            self.handleError(record)


class _SnapshotRenderer(DisplaySink):
    """Prints only what changed since the previous snapshot."""

    def __init__(self, console: Console):
        self.console = console
        self._seen = 0
        self._typing = False

    async def publish(self, state: DisplayState) -> None:
        if len(state.conversation) < self._seen:
            self._seen = 0
        for message in state.conversation[self._seen :]:
            self.render_message(message)
        self._seen = len(state.conversation)

        if state.is_typing and not self._typing:
            self.render_typing()
        self._typing = state.is_typing

    @abstractmethod
    def render_message(self, message: DisplayMessage) -> None:
        """Print one new conversation message."""
        ...

    def render_typing(self) -> None:
        pass


class LogDisplaySink(_SnapshotRenderer):
    """Renders snapshots as an execution log."""

    def render_message(self, message: DisplayMessage) -> None:
        content = escape(message.content)
        if message.is_error:
            self.console.print(f"[red][ERROR] {content}[/]")
        elif message.is_user:
            self.console.print(f"[green][USER] {content}[/]")
        else:
            self.console.print(f"[cyan][BOT] {content}[/]")
            if message.options:
                labels = ", ".join(f"'{escape(option.label)}'" for option in message.options)
                self.console.print(f"[dim][INFO] Waiting for a choice: [{labels}][/]")

    def render_typing(self) -> None:
        self.console.print("[dim][INFO] Bot is typing...[/]")


class ChatDisplaySink(_SnapshotRenderer):
    """Renders snapshots as chat turns with numbered buttons."""

    def render_message(self, message: DisplayMessage) -> None:
        content = escape(message.content)
        if message.is_error:
            self.console.print(f"[red]{content}[/]\n")
            return
        if message.is_user:
            self.console.print(f"[bold green]You > [/]{content}\n")
            return

        self.console.print(f"[bold blue]Bot > [/]{content}")
        if message.list_button_text:
            self.console.print(f"  [dim]{escape(message.list_button_text)}[/]")
        for number, option in enumerate(message.options or (), start=1):
            self.console.print(f"  [bold][{number}][/] {escape(option.label)}")
        self.console.print()

    def render_typing(self) -> None:
        self.console.print("[dim]typing...[/]")


@dataclass
class SimulatorConfig:
    """Configuration for the simulator."""

    flow_path: Path
    settings_path: Path | None = None
    mode: SimulatorMode = "log"
    welcome_message: str | None = None
    step_delay: float | None = None
    debug: bool = False


class FlowSimulator:
    """Interactive simulation session.

    Encapsulates the setup, execution, and cleanup of one conversation
    driven from the terminal.
    """

    def __init__(self, config: SimulatorConfig, console: Console | None = None):
        """Initialize simulator.

        Args:
            config: Simulator configuration
            console: Console to render to (defaults to stdout)
        """
        self.config = config
        self.console = console or Console()
        self.runner: FlowRunner | None = None
        self.settings = Settings()
        self.welcome_message: str | None = config.welcome_message
        self._known_variables: dict[str, Any] = {}

    async def setup(self) -> None:
        """Load settings and flow, then build the runner.

        Raises:
            ConfigError: If the settings file is invalid
            FlowDocumentError: If the flow file is invalid
        """
        from dotenv import load_dotenv

        load_dotenv()

        if self.config.settings_path is not None:
            self.settings = SettingsLoader.load(self.config.settings_path)

        level = "DEBUG" if self.config.debug else self.settings.logging.level
        setup_logging(level, self.settings.logging.json_file)

        document = FlowDocument.load(self.config.flow_path)
        if self.welcome_message is None:
            self.welcome_message = self.settings.runner.welcome_message
        if self.welcome_message is None and document.config is not None:
            self.welcome_message = document.config.welcome_message or None

        step_delay = self.config.step_delay
        if step_delay is None:
            step_delay = self.settings.runner.step_delay

        self.runner = FlowRunner.from_document(
            document,
            self._create_sink(),
            http_client=HttpxClient.from_settings(self.settings.http),
            completion=DSPyCompletion(self.settings.ai),
            step_delay=step_delay,
        )

    def _create_sink(self) -> DisplaySink:
        if self.config.mode == "chat":
            return ChatDisplaySink(self.console)
        return LogDisplaySink(self.console)

    async def start(self) -> None:
        """Run the conversation until it finishes or the user quits."""
        if self.runner is None:
            await self.setup()
        assert self.runner is not None

        self.console.print(f"Flow: [green]{escape(str(self.config.flow_path))}[/]")
        self.console.print("Type 'exit' or 'quit' to end session.\n")

        with self._execution_log():
            await self._converse()

    @contextmanager
    def _execution_log(self) -> Iterator[None]:
        """Echo engine log records to the console while a log-mode session runs."""
        if self.config.mode != "log":
            yield
            return

        handler = ExecutionLogHandler(self.console)
        loggers = [logging.getLogger(name) for name in EXECUTION_LOGGERS]
        levels = [engine_logger.level for engine_logger in loggers]
        for engine_logger in loggers:
            engine_logger.addHandler(handler)
            engine_logger.setLevel(logging.DEBUG)
        try:
            yield
        finally:
            for engine_logger, level in zip(loggers, levels, strict=True):
                engine_logger.removeHandler(handler)
                engine_logger.setLevel(level)

    async def _converse(self) -> None:
        assert self.runner is not None
        await self.runner.start(self.welcome_message)
        self._report_variables()

        while self.runner.status is RunStatus.WAITING_FOR_INPUT:
            try:
                user_input = Prompt.ask("[bold green]You[/]", console=self.console)
            except (KeyboardInterrupt, EOFError):
                self.console.print("\n[yellow]Goodbye![/]")
                return

            if self._is_exit_command(user_input):
                self.console.print("\n[yellow]Goodbye![/]")
                return

            if not user_input.strip():
                continue

            await self.submit(user_input)

        # In log mode the runner's own record already announces the end
        if self.config.mode == "chat":
            self.console.print("[dim]End of flow reached.[/]")

    async def submit(self, user_input: str) -> RunStatus:
        """Feed one answer to the runner."""
        assert self.runner is not None
        option = self._resolve_choice(self.runner.suspended_block, user_input)
        status = await self.runner.provide_input(user_input, option)
        self._report_variables()
        return status

    def _resolve_choice(self, block: AnyBlock | None, user_input: str) -> SelectedOption | None:
        """Map a 1-based option number to its option; labels are matched by the runner."""
        if not isinstance(block, ChoiceBlock) or not user_input.strip().isdigit():
            return None
        index = int(user_input.strip()) - 1
        if 0 <= index < len(block.options):
            option = block.options[index]
            return SelectedOption(handle_id=option.id, label=option.label)
        return None

    def _report_variables(self) -> None:
        """Print a [VAR] line for every variable that changed (log mode only)."""
        assert self.runner is not None
        current: Mapping[str, Any] = self.runner.variables
        if self.config.mode == "log":
            for name, value in current.items():
                if name not in self._known_variables or self._known_variables[name] != value:
                    rendered = escape(stringify(value))
                    self.console.print(f"[yellow][VAR] '{{{{{escape(name)}}}}}' = {rendered}[/]")
        self._known_variables = dict(current)

    def _is_exit_command(self, user_input: str) -> bool:
        """Check if input is an exit command."""
        return user_input.strip().lower() in EXIT_COMMANDS

    async def cleanup(self) -> None:
        """Release the runner."""
        self.runner = None
        self._known_variables = {}

    async def __aenter__(self) -> "FlowSimulator":
        """Async context manager entry."""
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.cleanup()


async def run_simulation(config: SimulatorConfig, console: Console | None = None) -> None:
    """Run an interactive simulation session.

    Args:
        config: Simulator configuration
        console: Optional console override
    """
    async with FlowSimulator(config, console) as simulator:
        await simulator.start()
