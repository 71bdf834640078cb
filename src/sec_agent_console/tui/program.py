"""The console event loop.

Each command runs as its own asyncio task. When a command finishes, its
message goes onto the inbox; the loop takes messages off the inbox one at a
time and hands them to the model. Only the loop touches the model.

Commands are never cancelled. A message that arrives after the operator has
moved on is still applied; the model decides whether it still matters. A
command that raises instead of returning its message is logged and counted as
settled, so the loop never waits on it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from sec_agent_console.tui.actions import Action, ActionParseError, parse_action
from sec_agent_console.tui.commands import Command
from sec_agent_console.tui.messages import Message
from sec_agent_console.tui.model import ConsoleModel

logger = logging.getLogger(__name__)

LineReader = Callable[[], Awaitable[str | None]]


class ConsoleProgram:
    def __init__(
        self,
        model: ConsoleModel,
        *,
        on_render: Callable[[ConsoleModel], None] | None = None,
    ) -> None:
        self.model = model
        self._on_render = on_render
        # None stands in for the message of a command that raised.
        self._inbox: asyncio.Queue[Message | None] = asyncio.Queue()
        self._tasks: set[asyncio.Task[None]] = set()
        self._outstanding = 0

    @property
    def outstanding(self) -> int:
        """Commands dispatched whose message has not been consumed yet."""

        return self._outstanding

    def _render(self) -> None:
        if self._on_render is not None:
            self._on_render(self.model)

    async def _execute(self, command: Command) -> None:
        message: Message | None = None
        try:
            message = await command()
        except Exception:
            logger.exception("Command raised instead of returning a message")
        finally:
            self._inbox.put_nowait(message)

    def _spawn(self, commands: list[Command]) -> None:
        for command in commands:
            self._outstanding += 1
            task = asyncio.create_task(self._execute(command))
            # Keep a reference until the task finishes.
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    def dispatch(self, action: Action) -> None:
        """Hand an operator action to the model and start its commands."""

        logger.debug("Dispatching action", extra={"action": type(action).__name__})
        self._spawn(self.model.handle(action))
        self._render()

    def _consume(self, message: Message | None) -> None:
        self._outstanding -= 1
        if message is None:
            self.model.notice = "A command failed unexpectedly; see the log for details."
            self._render()
            return
        self._spawn(self.model.update(message))
        self._render()

    async def run_until_idle(self) -> None:
        """Apply messages until no dispatched command is left outstanding."""

        while self._outstanding:
            self._consume(await self._inbox.get())

    async def run(self, read_line: LineReader) -> None:
        """Interactive loop: operator input and command messages, interleaved.

        Stops on `quit` or end of input. Commands still running at that point
        are drained first so that no message is dropped.
        """

        self._render()
        read = asyncio.ensure_future(read_line())
        get = asyncio.ensure_future(self._inbox.get())
        try:
            while True:
                done, _ = await asyncio.wait({read, get}, return_when=asyncio.FIRST_COMPLETED)

                if get in done:
                    self._consume(get.result())
                    get = asyncio.ensure_future(self._inbox.get())

                if read in done:
                    line = read.result()
                    if line is None:
                        break
                    try:
                        action = parse_action(line)
                    except ActionParseError as e:
                        self.model.notice = str(e)
                        self._render()
                        action = None
                    if action is not None:
                        self.dispatch(action)
                        if self.model.quitting:
                            break
                    read = asyncio.ensure_future(read_line())
        finally:
            get.cancel()
            if not read.done():
                read.cancel()

        # A message may already be sitting in the inbox from the cancelled get.
        await self.run_until_idle()
