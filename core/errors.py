"""
Error taxonomy for Archon
"""

from typing import Optional


class ArchonError(Exception):
    """Base class for all Archon errors"""
    pass


class ConfigurationError(ArchonError):
    """Raised when a registration or setting is invalid. Fatal at startup."""
    pass


class AlreadyInitialized(ArchonError):
    """Raised when a lifecycle step is entered a second time"""
    pass


class NotInitialized(ArchonError):
    """Raised when a service is requested before its phase has completed"""
    pass


class UnknownEventKey(ArchonError):
    """Raised when a channel-mapping key has no default"""

    def __init__(self, event_key: str):
        super().__init__(f'Event: "{event_key}" does not exist in default mappings')
        self.event_key = event_key


class ChannelResolutionFailure(ArchonError):
    """Raised when a channel id cannot be turned into a messageable channel"""

    def __init__(self, channel_id: str, reason: str):
        super().__init__(f"Could not resolve channel {channel_id}: {reason}")
        self.channel_id = channel_id
        self.reason = reason


class HandlerExecutionError(ArchonError):
    """Wraps an exception raised inside a handler at the dispatch boundary"""

    def __init__(self, capability: str, original: BaseException):
        super().__init__(f'Handler for "{capability}" failed: {original}')
        self.capability = capability
        self.original = original


class ExternalApiError(ArchonError):
    """Raised when an upstream REST call fails"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
