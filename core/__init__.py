"""
Core Infrastructure for Archon

Key Components:
- CapabilityRegistry: command, event and webhook tables filled from decorated classes
- ServiceRegistry: container for the services built at startup
- ConfigurationManager: YAML plus environment configuration
- ArchonClient: Discord client with on/once listeners
"""

from .errors import (
    ArchonError,
    ConfigurationError,
    AlreadyInitialized,
    NotInitialized,
    UnknownEventKey,
    ChannelResolutionFailure,
    HandlerExecutionError,
    ExternalApiError
)
from .registry import (
    CapabilityKind,
    CapabilityEntry,
    CapabilityRegistry,
    command,
    event,
    webhook,
    get_capability_registry
)
from .service_registry import ServiceRegistry, ServiceNotFound
from .config_manager import BotConfiguration, ConfigurationManager

__all__ = [
    'ArchonError',
    'ConfigurationError',
    'AlreadyInitialized',
    'NotInitialized',
    'UnknownEventKey',
    'ChannelResolutionFailure',
    'HandlerExecutionError',
    'ExternalApiError',
    'CapabilityKind',
    'CapabilityEntry',
    'CapabilityRegistry',
    'command',
    'event',
    'webhook',
    'get_capability_registry',
    'ServiceRegistry',
    'ServiceNotFound',
    'BotConfiguration',
    'ConfigurationManager'
]
