"""
Discord client with an on/once listener table
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import discord

logger = logging.getLogger('archon.core.client')


@dataclass
class Listener:
    handler: Callable
    once: bool = False


def _event_name(name: str) -> str:
    return name[3:] if name.startswith('on_') else name


async def invoke_handler(handler: Callable, *args: Any, **kwargs: Any) -> Any:
    """Call a plain or async handler and await the result when needed"""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


class ArchonClient(discord.Client):
    """
    discord.Client that lets the bot attach any number of listeners per event.

    Listeners run after the client's own ``on_<event>`` method, in the order
    they were attached. A listener added with ``once`` is detached before its
    first invocation is scheduled, so it never fires twice.
    """

    def __init__(self, intents: Optional[discord.Intents] = None, **options: Any):
        if intents is None:
            intents = discord.Intents.default()
            intents.message_content = True
        super().__init__(intents=intents, **options)
        self._event_listeners: Dict[str, List[Listener]] = {}

    def on(self, event_name: str, handler: Callable) -> None:
        """Subscribe ``handler`` to every occurrence of ``event_name``"""
        self._add_listener(event_name, handler, once=False)

    def once(self, event_name: str, handler: Callable) -> None:
        """Subscribe ``handler`` to the next occurrence of ``event_name`` only"""
        self._add_listener(event_name, handler, once=True)

    def off(self, event_name: str, handler: Callable) -> bool:
        """Detach ``handler``. Returns False when it was not attached."""
        listeners = self._event_listeners.get(_event_name(event_name), [])
        for listener in listeners:
            if listener.handler == handler:
                listeners.remove(listener)
                return True
        return False

    def listener_count(self, event_name: str) -> int:
        return len(self._event_listeners.get(_event_name(event_name), []))

    def _add_listener(self, event_name: str, handler: Callable, once: bool) -> None:
        if not callable(handler):
            raise TypeError(f"Listener for '{event_name}' must be callable")
        name = _event_name(event_name)
        self._event_listeners.setdefault(name, []).append(Listener(handler=handler, once=once))
        logger.debug(f"Listener attached: {name} (once: {once})")

    def dispatch(self, event_name: str, /, *args: Any, **kwargs: Any) -> None:
        super().dispatch(event_name, *args, **kwargs)

        listeners = self._event_listeners.get(event_name)
        if not listeners:
            return

        method = 'on_' + event_name
        for listener in list(listeners):
            if listener.once:
                listeners.remove(listener)
            self._schedule_event(self._make_runner(listener.handler), method, *args, **kwargs)

    @staticmethod
    def _make_runner(handler: Callable) -> Callable:
        async def runner(*args: Any, **kwargs: Any) -> None:
            await invoke_handler(handler, *args, **kwargs)
        return runner


def create_client() -> ArchonClient:
    """Create the bot client with the intents the bot needs"""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.guild_messages = True
    intents.message_content = True
    return ArchonClient(intents=intents)
