"""
Prefix command classes for Archon
"""

from .channel_commands import ChannelCommands
from .dev_commands import DevCommands

COMMAND_CLASSES = [DevCommands, ChannelCommands]

__all__ = ['ChannelCommands', 'DevCommands', 'COMMAND_CLASSES']
