"""
Prefix command dispatch
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set

from core.client import invoke_handler
from core.errors import HandlerExecutionError
from core.registry import CapabilityKind, CapabilityRegistry

logger = logging.getLogger('archon.handlers.command_handler')

GENERIC_ERROR_REPLY = "An error occurred while running this command."


@dataclass
class BoundCommand:
    name: str
    callback: Callable
    permissions: FrozenSet[str]


def actor_permissions(message: Any) -> Set[str]:
    """Names of the permission flags the message author has in its guild"""
    permissions = getattr(message.author, 'guild_permissions', None)
    if permissions is None:
        return set()
    return {name for name, enabled in permissions if enabled}


def parse_command(content: str, prefix: str) -> Optional[List[str]]:
    """
    Split ``<prefix>name arg1 arg2`` into ``[name, arg1, arg2]``.

    Returns None when the content does not start with the prefix or has no
    command name.
    """
    if not content.startswith(prefix):
        return None
    tokens = content[len(prefix):].split()
    if not tokens:
        return None
    tokens[0] = tokens[0].casefold()
    return tokens


class CommandDispatcher:
    """
    Routes prefixed chat messages to registered command handlers.

    Args:
        prefix: Prefix that marks a message as a command
        reply_unknown: Reply "Unknown command" for names nobody registered;
            when False those messages are ignored
    """

    def __init__(self, prefix: str, reply_unknown: bool = False):
        self.prefix = prefix
        self.reply_unknown = reply_unknown
        self._commands: Dict[str, BoundCommand] = {}

    def bind(self, registry: CapabilityRegistry) -> int:
        """
        Instantiate every command owner class once and bind its commands.

        Returns:
            Number of commands bound
        """
        bound = 0
        for owner in registry.owners(CapabilityKind.COMMAND):
            instance = owner()
            for entry in registry.entries(CapabilityKind.COMMAND, owner):
                self._commands[entry.name] = BoundCommand(
                    name=entry.name,
                    callback=entry.bind(instance),
                    permissions=entry.permissions
                )
                bound += 1

        logger.info(f"Registered {bound} commands")
        return bound

    def attach(self, runtime: Any) -> None:
        """Consult the command table on every message the runtime receives"""
        runtime.on('message', self.handle_message)

    def command_names(self) -> List[str]:
        return sorted(self._commands)

    def get(self, name: str) -> Optional[BoundCommand]:
        return self._commands.get(name.casefold())

    async def handle_message(self, message: Any) -> bool:
        """
        Dispatch a chat message.

        Returns:
            True when the message was treated as a command (including
            permission refusals and unknown-command replies)
        """
        if getattr(message.author, 'bot', False):
            return False

        tokens = parse_command(message.content or "", self.prefix)
        if tokens is None:
            return False

        name, args = tokens[0], tokens[1:]
        command = self._commands.get(name)

        if command is None:
            if self.reply_unknown:
                await message.reply(f"Unknown command: {name}")
                return True
            logger.debug(f"Ignoring unknown command: {name}")
            return False

        missing = sorted(command.permissions - actor_permissions(message))
        if missing:
            await message.reply(
                f"You lack the following permissions to use this command: {', '.join(missing)}"
            )
            return True

        logger.debug(f'Executing command "{name}" with args: [{", ".join(args)}]')
        try:
            await invoke_handler(command.callback, message, args)
        except Exception as e:
            error = HandlerExecutionError(name, e)
            logger.error(f"{error}", exc_info=e)
            try:
                await message.reply(GENERIC_ERROR_REPLY)
            except Exception as reply_error:
                logger.error(f'Could not report failure of "{name}": {reply_error}')
        return True
