"""
Service Registry - Service container for Archon
"""

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, Optional, Type, TypeVar

logger = logging.getLogger('archon.core.service_registry')

T = TypeVar('T')


class ServiceNotFound(Exception):
    """Raised when a requested service is not registered"""
    pass


@dataclass
class ServiceDefinition:
    """Metadata for a registered service"""
    interface_type: Type
    instance: Any


class ServiceRegistry:
    """
    Container for the singleton services the bot builds at startup.

    Usage:
        registry = ServiceRegistry()
        registry.register_instance(ClockifyService, clockify)
        clockify = registry.get(ClockifyService)
    """

    def __init__(self):
        self._services: Dict[Type, ServiceDefinition] = {}
        self._lock = Lock()
        logger.debug("ServiceRegistry initialized")

    def register_instance(self, interface_type: Type[T], instance: T) -> 'ServiceRegistry':
        """
        Register a pre-created instance.

        Args:
            interface_type: The type the instance is resolved by
            instance: The pre-created instance

        Returns:
            Self for method chaining
        """
        with self._lock:
            self._services[interface_type] = ServiceDefinition(
                interface_type=interface_type,
                instance=instance
            )
            logger.info(f"Registered instance: {interface_type.__name__}")
            return self

    def get(self, interface_type: Type[T]) -> T:
        """
        Resolve a service instance.

        Raises:
            ServiceNotFound: If the service is not registered
        """
        service_def = self._services.get(interface_type)
        if service_def is None:
            raise ServiceNotFound(f"Service {interface_type.__name__} is not registered")
        return service_def.instance

    def get_optional(self, interface_type: Type[T]) -> Optional[T]:
        """Resolve a service instance, returning None if not registered"""
        try:
            return self.get(interface_type)
        except ServiceNotFound:
            return None
