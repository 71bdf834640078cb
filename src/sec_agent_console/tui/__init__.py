"""Operator console: commands, messages, model and the event loop."""

from sec_agent_console.tui.commands import Command, ConsoleCommands
from sec_agent_console.tui.model import ConsoleModel
from sec_agent_console.tui.program import ConsoleProgram

__all__ = ["Command", "ConsoleCommands", "ConsoleModel", "ConsoleProgram"]
