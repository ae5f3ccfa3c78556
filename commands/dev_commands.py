"""
Developer commands: liveness checks and command listing
"""

import logging

from core.registry import CapabilityKind, command, get_capability_registry

logger = logging.getLogger('archon.commands.dev_commands')


class DevCommands:

    @command('ping')
    async def ping(self, message, args):
        await message.reply('$$ Pong! $$')

    @command('help')
    async def help(self, message, args):
        """List every registered prefix command"""
        names = sorted(get_capability_registry().names(CapabilityKind.COMMAND))
        if not names:
            await message.reply('No commands are registered.')
            return
        await message.reply(f"Available commands: {', '.join(names)}")

    @command('admin', permissions=['administrator'])
    async def admin(self, message, args):
        logger.info(f"Admin command used by {message.author}")
        await message.reply('You are an admin!')
