"""
Archon Application
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from core.client import ArchonClient, create_client
from core.config_manager import BotConfiguration, ConfigurationManager
from core.errors import ConfigurationError
from core.logging_config import configure_logging
from core.registry import CapabilityKind, CapabilityRegistry, get_capability_registry
from core.service_registry import ServiceRegistry
from handlers.command_handler import CommandDispatcher
from handlers.event_handler import register_all_events
from handlers.slash_handler import (
    SlashCommandDispatcher,
    SlashCommandSet,
    load_slash_commands,
    register_slash_commands
)
from .service_manager import ServiceManager, set_service_manager
from .webhook_server import WebhookServer

logger = logging.getLogger('archon.services.bot_application')


class ArchonApplication:
    """
    Main Archon application that wires configuration, services, handlers
    and the webhook server together.
    """

    def __init__(
        self,
        config_manager: Optional[ConfigurationManager] = None,
        registry: Optional[CapabilityRegistry] = None,
        service_registry: Optional[ServiceRegistry] = None
    ):
        self.config_manager = config_manager or ConfigurationManager()
        self.registry = registry or get_capability_registry()
        self.service_registry = service_registry or ServiceRegistry()

        self.config: Optional[BotConfiguration] = None
        self.client: Optional[ArchonClient] = None
        self.service_manager: Optional[ServiceManager] = None
        self.command_dispatcher: Optional[CommandDispatcher] = None
        self.slash_commands: Optional[SlashCommandSet] = None
        self.webhook_server: Optional[WebhookServer] = None
        self._initialized = False

    def initialize(self) -> None:
        """
        Load configuration and bind every handler to the client.

        Raises:
            ConfigurationError: If configuration is invalid or a handler
                class declares a conflicting capability
        """
        if self._initialized:
            logger.warning("ArchonApplication is already initialized")
            return

        logger.info("Initializing Archon...")
        self.config = self.config_manager.load_configuration()
        configure_logging(
            self.config.log_level,
            self.config.log_file_path,
            self.config.log_max_bytes,
            self.config.log_backup_count
        )

        self.client = create_client()
        self.service_manager = ServiceManager(self.service_registry)
        set_service_manager(self.service_manager)
        self.service_manager.initialize(self.client, self.config)

        self._register_capabilities()
        self._setup_slash_commands()

        register_all_events(self.registry, self.client)

        self.command_dispatcher = CommandDispatcher(
            self.config.command_prefix,
            reply_unknown=self.config.reply_unknown_commands
        )
        self.command_dispatcher.bind(self.registry)
        self.command_dispatcher.attach(self.client)

        self.webhook_server = WebhookServer(
            self.registry,
            host=self.config.webhook_host,
            port=self.config.webhook_port
        )

        self._initialized = True
        logger.info("Archon initialized")

    def _register_capabilities(self) -> None:
        from commands import COMMAND_CLASSES
        from events import EVENT_CLASSES
        from webhooks import WEBHOOK_CLASSES

        total = self.registry.register_owners([*COMMAND_CLASSES, *EVENT_CLASSES, *WEBHOOK_CLASSES])
        logger.info(f"Registered {total} capabilities")

    def _setup_slash_commands(self) -> None:
        self.slash_commands = load_slash_commands(Path(self.config.slash_commands_dir))
        for source, reason in self.slash_commands.failures:
            logger.warning(f"Slash command not loaded from {source}: {reason}")

        SlashCommandDispatcher(self.slash_commands).attach(self.client)

        async def on_ready(*_: Any) -> None:
            if len(self.slash_commands) == 0:
                return
            await register_slash_commands(
                self.client,
                self.slash_commands,
                application_id=self.config.client_id,
                guild_id=self.config.dev_guild_id
            )

        self.client.once('ready', on_ready)

    async def run(self) -> None:
        """Run the bot and the webhook server until the client disconnects"""
        self.initialize()
        if not self.config.bot_token:
            raise ConfigurationError("BOT_TOKEN environment variable is required")

        try:
            await self.webhook_server.start()
            logger.info("Starting Discord client...")
            await self.client.start(self.config.bot_token)
        finally:
            await self.shutdown()

    def run_sync(self) -> None:
        """Run the application synchronously (for main entry point)"""
        try:
            asyncio.run(self.run())
        except KeyboardInterrupt:
            logger.info("Bot shutdown requested")

    async def shutdown(self) -> None:
        """Stop the webhook server, close the client and release services"""
        logger.info("Shutting down Archon...")
        try:
            if self.webhook_server:
                await self.webhook_server.stop()
            if self.client and not self.client.is_closed():
                await self.client.close()
            if self.service_manager:
                await self.service_manager.shutdown()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")
        logger.info("Archon shutdown complete")

    def get_stats(self) -> Dict[str, Any]:
        """Counts of what is bound, for diagnostics"""
        return {
            'commands': len(self.registry.table(CapabilityKind.COMMAND)),
            'events': len(self.registry.table(CapabilityKind.EVENT)),
            'webhooks': len(self.registry.table(CapabilityKind.WEBHOOK)),
            'slash_commands': len(self.slash_commands) if self.slash_commands else 0,
            'phase': self.service_manager.phase.name if self.service_manager else None,
        }


def create_application() -> ArchonApplication:
    """Create a new ArchonApplication instance"""
    return ArchonApplication(service_registry=ServiceRegistry())
