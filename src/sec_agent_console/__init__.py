"""sec-agent operator console.

An asyncio bridge between a line-oriented operator console and the durable
workflows behind it:
- configuration loaded from `.env`
- structured logging
- scan and issue-approval workflows driven through a workflow gateway
"""

__version__ = "0.1.0"

from sec_agent_console.config import ConsoleSettings

__all__ = ["__version__", "ConsoleSettings"]
