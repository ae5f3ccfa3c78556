"""
Slash command: hug

Lets a member hug another member, with an optional reason and an option to
ping the hugged member.
"""

import logging
from typing import Any, Dict, Optional

import discord

from handlers.slash_handler import SlashCommand

logger = logging.getLogger('archon.commands.slash_commands.hug_command')

DEFAULT_REASON = "Well... why not?!"


def _option_values(interaction: Any) -> Dict[str, Any]:
    data = interaction.data or {}
    return {option['name']: option.get('value') for option in data.get('options', [])}


def _resolved_username(interaction: Any, user_id: Optional[str]) -> str:
    users = (interaction.data or {}).get('resolved', {}).get('users', {})
    user = users.get(str(user_id), {})
    return user.get('global_name') or user.get('username') or str(user_id)


async def run(client: discord.Client, interaction: Any) -> None:
    options = _option_values(interaction)
    user_id = options.get('user')
    reason = options.get('reason') or DEFAULT_REASON
    ping = bool(options.get('ping'))

    target = f'<@{user_id}>' if ping else _resolved_username(interaction, user_id)
    message = f"{interaction.user.name} gives a warm hug to {target}! Why? {reason}"

    logger.debug(f"{message} Pinged? {ping}.")
    await interaction.response.send_message(message)


command = SlashCommand(
    name="hug",
    description="Hug a user on the server",
    options=[
        {
            'name': "user",
            'description': "The user to hug",
            'type': discord.AppCommandOptionType.user.value,
            'required': True
        },
        {
            'name': "reason",
            'description': "Reason for the hug",
            'type': discord.AppCommandOptionType.string.value,
            'required': False
        },
        {
            'name': "ping",
            'description': "Whether to ping the hugged user",
            'type': discord.AppCommandOptionType.boolean.value,
            'required': False
        }
    ],
    run=run
)
