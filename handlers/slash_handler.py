"""
Slash command loading, registration and dispatch

Slash commands live as standalone modules in a directory and are loaded at
startup by the module scanner. A module either exposes a ``command``
attribute (usually a ``SlashCommand``) or defines ``name``, ``description``,
``options`` and ``run`` at module level.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import discord

from core.client import invoke_handler
from core.errors import HandlerExecutionError
from utils.file_scanner import import_files

logger = logging.getLogger('archon.handlers.slash_handler')

GENERIC_ERROR_REPLY = "An error occurred while executing this command."


@dataclass
class SlashCommand:
    """Descriptor for a slash command"""
    name: str
    run: Callable
    description: str = ""
    options: List[Dict[str, Any]] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description or self.name,
            'options': list(self.options),
        }


@dataclass
class SlashCommandSet:
    """Loaded slash commands plus everything that was skipped"""
    commands: Dict[str, SlashCommand] = field(default_factory=dict)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.commands)

    def payload(self) -> List[Dict[str, Any]]:
        return [command.to_payload() for command in self.commands.values()]


def _read(candidate: Any, key: str, default: Any = None) -> Any:
    if isinstance(candidate, dict):
        return candidate.get(key, default)
    return getattr(candidate, key, default)


def to_slash_command(candidate: Any) -> Optional[SlashCommand]:
    """Validate a loaded module or object; None when it lacks ``name`` or ``run``"""
    if isinstance(candidate, SlashCommand):
        return candidate if candidate.name and callable(candidate.run) else None

    name = _read(candidate, 'name')
    run = _read(candidate, 'run')
    if not isinstance(name, str) or not name or not callable(run):
        return None

    return SlashCommand(
        name=name,
        run=run,
        description=_read(candidate, 'description', "") or "",
        options=list(_read(candidate, 'options', None) or [])
    )


def load_slash_commands(directory: Union[str, Path]) -> SlashCommandSet:
    """Load and validate every slash command module under ``directory``"""
    import_failures: List[Tuple[Path, Exception]] = []
    modules = import_files(directory, attribute='command', failures=import_failures)

    loaded = SlashCommandSet()
    for path, error in import_failures:
        loaded.failures.append((str(path), str(error) or type(error).__name__))

    for module in modules:
        command = to_slash_command(module)
        source = getattr(module, '__file__', None) or repr(module)

        if command is None:
            logger.warning(f"Skipped invalid command module: {source}")
            loaded.failures.append((source, "missing name or run"))
            continue
        if command.name in loaded.commands:
            logger.warning(f"Skipped duplicate slash command '{command.name}' from {source}")
            loaded.failures.append((source, f"duplicate name '{command.name}'"))
            continue

        loaded.commands[command.name] = command
        logger.debug(f"Loaded slash command: {command.name}")

    logger.info(f"{len(loaded)} slash commands loaded")
    return loaded


async def register_slash_commands(
    client: discord.Client,
    commands: SlashCommandSet,
    application_id: Optional[Union[str, int]] = None,
    guild_id: Optional[Union[str, int]] = None
) -> bool:
    """
    Push the slash command definitions to Discord.

    Registers for one guild when ``guild_id`` is given, globally otherwise.
    Failures are logged, not raised.
    """
    app_id = application_id or client.application_id
    if not app_id:
        logger.error("Cannot register slash commands without an application id")
        return False

    try:
        logger.info("Registering slash commands...")
        if guild_id:
            await client.http.bulk_upsert_guild_commands(int(app_id), int(guild_id), commands.payload())
        else:
            await client.http.bulk_upsert_global_commands(int(app_id), commands.payload())
        logger.info("Slash commands registered successfully!")
        return True
    except Exception as e:
        logger.error(f"Failed to register slash commands: {e}")
        return False


class SlashCommandDispatcher:
    """Runs the loaded slash command matching each application-command interaction"""

    def __init__(self, commands: SlashCommandSet):
        self.commands = commands

    def attach(self, runtime: Any) -> None:
        runtime.on('interaction', self.handle_interaction)

    async def handle_interaction(self, interaction: Any) -> bool:
        """
        Returns:
            True when a slash command handled the interaction (even if it failed)
        """
        if interaction.type != discord.InteractionType.application_command:
            return False

        name = (interaction.data or {}).get('name')
        command = self.commands.commands.get(name)
        if command is None:
            logger.warning(f"Received interaction for unknown slash command: {name}")
            return False

        try:
            await invoke_handler(command.run, interaction.client, interaction)
        except Exception as e:
            error = HandlerExecutionError(name, e)
            logger.error(f"{error}", exc_info=e)
            await self._reply_error(interaction)
        return True

    async def _reply_error(self, interaction: Any) -> None:
        try:
            if interaction.response.is_done():
                await interaction.followup.send(GENERIC_ERROR_REPLY, ephemeral=True)
            else:
                await interaction.response.send_message(GENERIC_ERROR_REPLY, ephemeral=True)
        except Exception as e:
            logger.error(f"Could not send error reply for interaction: {e}")
