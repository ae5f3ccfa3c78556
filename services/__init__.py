"""
Archon Services Package

The application entry point lives in ``services.bot_application`` and is
imported from there directly.
"""

from .api_service import ApiService
from .clockify_service import ClockifyService
from .channel_mapping_service import ChannelMappings, ChannelMappingService
from .notification_service import (
    AnnouncementField,
    AnnouncementOptions,
    NotificationConfig,
    NotificationService
)
from .service_manager import ServiceManager, ServicePhase, get_service_manager, set_service_manager

__all__ = [
    'ApiService',
    'ClockifyService',
    'ChannelMappings',
    'ChannelMappingService',
    'AnnouncementField',
    'AnnouncementOptions',
    'NotificationConfig',
    'NotificationService',
    'ServiceManager',
    'ServicePhase',
    'get_service_manager',
    'set_service_manager'
]
