"""
Dispatchers for Archon

Binds registered capabilities to the runtime: prefix commands and events to
the Discord client, webhooks to the HTTP router, slash commands to
interactions.
"""

from .command_handler import CommandDispatcher, parse_command
from .event_handler import register_all_events
from .webhook_handler import register_webhooks
from .slash_handler import (
    SlashCommand,
    SlashCommandSet,
    SlashCommandDispatcher,
    load_slash_commands,
    register_slash_commands
)

__all__ = [
    'CommandDispatcher',
    'parse_command',
    'register_all_events',
    'register_webhooks',
    'SlashCommand',
    'SlashCommandSet',
    'SlashCommandDispatcher',
    'load_slash_commands',
    'register_slash_commands'
]
