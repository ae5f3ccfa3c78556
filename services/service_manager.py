"""
Service Manager - startup orchestration for Archon

Services are built in two phases:

- API_READY: services that only need static configuration (the Clockify
  client). Built synchronously by ``initialize``.
- CLIENT_READY: services that need a connected Discord client (channel
  mappings, notifications). Built when the client fires ``ready``.

Accessors raise ``NotInitialized`` until the phase that owns the service has
completed.
"""

import logging
from enum import IntEnum
from typing import Any, Optional, Type, TypeVar

import discord

from core.config_manager import BotConfiguration
from core.errors import AlreadyInitialized, NotInitialized
from core.logging_config import get_default_logger
from core.service_registry import ServiceRegistry, ServiceNotFound
from .channel_mapping_service import ChannelMappings, ChannelMappingService
from .clockify_service import ClockifyService
from .notification_service import NotificationConfig, NotificationService

logger = logging.getLogger('archon.services.service_manager')

T = TypeVar('T')


class ServicePhase(IntEnum):
    """Lifecycle phases, strictly increasing"""
    UNINITIALIZED = 0
    API_READY = 1
    CLIENT_READY = 2


class ServiceManager:
    """
    Orchestrates construction order of the bot's services.

    Usage:
        manager = ServiceManager()
        manager.initialize(client, config)   # API_READY
        # ... client connects, fires "ready" -> CLIENT_READY
        manager.get_notification_service()
    """

    def __init__(self, service_registry: Optional[ServiceRegistry] = None):
        self.service_registry = service_registry or ServiceRegistry()
        self.phase = ServicePhase.UNINITIALIZED
        self._config: Optional[BotConfiguration] = None
        self._logger: Optional[logging.Logger] = None

    def initialize(self, client: Any, config: BotConfiguration) -> None:
        """
        Build the API-backed services and wait for the client to be ready.

        ``client`` must provide ``once(event_name, handler)``.

        Raises:
            AlreadyInitialized: If called more than once
        """
        if self.phase is not ServicePhase.UNINITIALIZED:
            raise AlreadyInitialized("ServiceManager has already been initialized")

        self._config = config
        self.service_registry.register_instance(discord.Client, client)
        self.service_registry.register_instance(
            ClockifyService,
            ClockifyService(
                api_key=config.clockify_api_key,
                workspace_id=config.clockify_workspace_id,
                base_url=config.clockify_api_url,
                timeout=config.clockify_timeout
            )
        )
        self.phase = ServicePhase.API_READY
        logger.info("API services ready")

        def on_ready(*_: Any) -> None:
            self.setup_client_services(client)

        client.once('ready', on_ready)

    def setup_client_services(self, client: Any) -> None:
        """
        Build the services that need a connected client.

        Raises:
            NotInitialized: If ``initialize`` has not run
            AlreadyInitialized: If client services are already set up
        """
        if self.phase is ServicePhase.CLIENT_READY:
            raise AlreadyInitialized("Client services have already been initialized")
        if self.phase is ServicePhase.UNINITIALIZED:
            raise NotInitialized("ServiceManager.initialize must run before client services")

        channel_mapper = ChannelMappingService(
            ChannelMappings.from_config(self._config),
            self._config.channel_mappings_path
        )
        self.service_registry.register_instance(ChannelMappingService, channel_mapper)

        notification_service = NotificationService.initialize(
            NotificationConfig(client=client, channel_mapper=channel_mapper)
        )
        self.service_registry.register_instance(NotificationService, notification_service)

        self.phase = ServicePhase.CLIENT_READY
        logger.info("Client services ready")

    def _require(self, phase: ServicePhase, service_type: Type[T]) -> T:
        if self.phase < phase:
            raise NotInitialized(
                f"{service_type.__name__} is not available before phase {phase.name} "
                f"(current phase: {self.phase.name})"
            )
        try:
            return self.service_registry.get(service_type)
        except ServiceNotFound as e:
            raise NotInitialized(str(e)) from e

    def get_config(self) -> BotConfiguration:
        if self._config is None:
            raise NotInitialized("ServiceManager has not been initialized")
        return self._config

    def get_client(self) -> discord.Client:
        return self._require(ServicePhase.API_READY, discord.Client)

    def get_clockify_service(self) -> ClockifyService:
        return self._require(ServicePhase.API_READY, ClockifyService)

    def get_channel_mapping_service(self) -> ChannelMappingService:
        return self._require(ServicePhase.CLIENT_READY, ChannelMappingService)

    def get_notification_service(self) -> NotificationService:
        return self._require(ServicePhase.CLIENT_READY, NotificationService)

    def get_logger(self) -> logging.Logger:
        """Get the bot logger; usable before ``initialize``"""
        if self._logger is None:
            self._logger = get_default_logger()
        return self._logger

    async def shutdown(self) -> None:
        clockify = self.service_registry.get_optional(ClockifyService)
        if clockify is not None:
            await clockify.close()
        logger.info("ServiceManager shutdown complete")


# Global service manager instance
_global_service_manager: Optional[ServiceManager] = None


def get_service_manager() -> ServiceManager:
    """Get the global service manager instance"""
    global _global_service_manager
    if _global_service_manager is None:
        _global_service_manager = ServiceManager()
    return _global_service_manager


def set_service_manager(manager: Optional[ServiceManager]) -> None:
    """Install the service manager built by the application"""
    global _global_service_manager
    _global_service_manager = manager
