"""
Channel mapping commands

Lets server managers inspect and change which channel each event key
announces to, without editing the mappings file by hand.
"""

import logging
import re
from typing import List

from core.errors import NotInitialized, UnknownEventKey
from core.registry import command
from services.service_manager import get_service_manager

logger = logging.getLogger('archon.commands.channel_commands')

CHANNEL_MENTION = re.compile(r'^<#(\d+)>$')


def parse_channel_ids(args: List[str]) -> List[str]:
    """Accept raw ids or ``<#id>`` mentions; anything else is dropped"""
    ids = []
    for arg in args:
        match = CHANNEL_MENTION.match(arg)
        if match:
            ids.append(match.group(1))
        elif arg.isdigit():
            ids.append(arg)
    return ids


def _format_target(target) -> str:
    if isinstance(target, list):
        return ', '.join(f'<#{channel_id}>' for channel_id in target) or '(none)'
    return f'<#{target}>' if target else '(default)'


class ChannelCommands:

    @command('channels', permissions=['manage_guild'])
    async def channels(self, message, args):
        try:
            mappings = get_service_manager().get_channel_mapping_service().get_channel_mappings()
        except NotInitialized:
            await message.reply('Channel mappings are not available yet.')
            return

        lines = [f"**{key}**: {_format_target(target)}" for key, target in mappings.events.items()]
        lines.append(f"**default**: {_format_target(mappings.default)}")
        await message.reply('\n'.join(lines))

    @command('setchannel', permissions=['manage_guild'])
    async def set_channel(self, message, args):
        """Usage: setchannel <event_key> <channel...>"""
        channel_ids = parse_channel_ids(args[1:])
        if not args or not channel_ids:
            await message.reply('Usage: setchannel <event_key> <channel id or mention...>')
            return

        event_key = args[0]
        target = channel_ids[0] if len(channel_ids) == 1 else channel_ids
        try:
            get_service_manager().get_channel_mapping_service().override_event_channel(event_key, target)
        except NotInitialized:
            await message.reply('Channel mappings are not available yet.')
            return
        await message.reply(f'Event "{event_key}" now posts to {_format_target(target)}.')

    @command('resetchannel', permissions=['manage_guild'])
    async def reset_channel(self, message, args):
        if not args:
            await message.reply('Usage: resetchannel <event_key>')
            return

        event_key = args[0]
        try:
            get_service_manager().get_channel_mapping_service().reset_event_channel(event_key)
        except UnknownEventKey:
            await message.reply(f'Unknown event key: {event_key}')
            return
        except NotInitialized:
            await message.reply('Channel mappings are not available yet.')
            return
        await message.reply(f'Event "{event_key}" reset to its default channel.')

    @command('resetchannels', permissions=['manage_guild'])
    async def reset_channels(self, message, args):
        try:
            get_service_manager().get_channel_mapping_service().reset_all_mappings()
        except NotInitialized:
            await message.reply('Channel mappings are not available yet.')
            return
        await message.reply('All channel mappings reset to defaults.')
