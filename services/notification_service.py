"""
Notification Service for Archon
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import discord

from core.errors import AlreadyInitialized, ChannelResolutionFailure, NotInitialized
from .channel_mapping_service import ChannelMappingService

logger = logging.getLogger('archon.services.notification_service')

DEFAULT_EMBED_COLOR = 0x00ff00


@dataclass
class NotificationConfig:
    client: discord.Client
    channel_mapper: ChannelMappingService


@dataclass
class AnnouncementField:
    name: str
    value: str
    inline: bool = False


@dataclass
class AnnouncementOptions:
    """Embed announcement options. Every field is optional."""
    title: Optional[str] = None
    description: Optional[str] = None
    fields: List[AnnouncementField] = field(default_factory=list)
    color: Optional[int] = None
    footer: Optional[str] = None
    icon_url: Optional[str] = None
    timestamp: bool = False

    def to_embed(self) -> discord.Embed:
        embed = discord.Embed(
            title=self.title,
            description=self.description,
            color=self.color if self.color is not None else DEFAULT_EMBED_COLOR,
            timestamp=discord.utils.utcnow() if self.timestamp else None
        )

        for embed_field in self.fields:
            embed.add_field(name=embed_field.name, value=embed_field.value, inline=embed_field.inline)

        if self.footer:
            embed.set_footer(text=self.footer, icon_url=self.icon_url)
        elif self.icon_url:
            embed.set_thumbnail(url=self.icon_url)

        return embed


class NotificationService:
    """
    Singleton responsible for sending messages and announcements to the
    channels mapped to an event key.

    Delivery is best effort: each resolved channel is attempted on its own
    and a failure on one does not stop the others.
    """

    _instance: Optional['NotificationService'] = None

    def __init__(self, config: NotificationConfig):
        self.client = config.client
        self.channel_mapper = config.channel_mapper

    @classmethod
    def initialize(cls, config: NotificationConfig) -> 'NotificationService':
        if cls._instance is not None:
            raise AlreadyInitialized("NotificationService has already been initialized")
        cls._instance = cls(config)
        logger.info("NotificationService initialized")
        return cls._instance

    @classmethod
    def get_instance(cls) -> 'NotificationService':
        """
        Retrieve the singleton instance.

        Raises:
            NotInitialized: If ``initialize`` has not been called yet
        """
        if cls._instance is None:
            raise NotInitialized("NotificationService has not been initialized")
        return cls._instance

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._instance is not None

    async def _get_channel(self, channel_id: str) -> discord.abc.Messageable:
        try:
            snowflake = int(channel_id)
        except (TypeError, ValueError):
            raise ChannelResolutionFailure(channel_id, "not a valid channel id")

        channel = self.client.get_channel(snowflake)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(snowflake)
            except Exception as e:
                # transport errors and timeouts count as unresolvable too
                raise ChannelResolutionFailure(channel_id, str(e) or type(e).__name__) from e

        if not isinstance(channel, discord.abc.Messageable):
            raise ChannelResolutionFailure(channel_id, "channel is not text-based")
        return channel

    async def _get_channels(self, event_key: Optional[str]) -> List[discord.abc.Messageable]:
        channels = []
        for channel_id in self.channel_mapper.resolve_channel_ids(event_key):
            try:
                channels.append(await self._get_channel(channel_id))
            except ChannelResolutionFailure as e:
                logger.error(f"NotificationService: {e}")
        return channels

    async def _deliver(self, event_key: Optional[str], **payload: Any) -> int:
        channels = await self._get_channels(event_key)
        if not channels:
            logger.warning(f'NotificationService: No valid channel found for event "{event_key or "default"}"')
            return 0

        delivered = 0
        for channel in channels:
            try:
                await channel.send(**payload)
                delivered += 1
            except Exception as e:
                logger.error(
                    f'NotificationService: Failed to send to channel {getattr(channel, "id", channel)} '
                    f'for event "{event_key or "default"}": {e}'
                )
        return delivered

    async def send_announcement(self, event_key: Optional[str], options: AnnouncementOptions) -> int:
        """
        Send an embed announcement to the channels for ``event_key``
        (or the default channel).

        Returns:
            Number of channels the announcement was delivered to
        """
        return await self._deliver(event_key, embed=options.to_embed())

    async def send_message(self, event_key: Optional[str], message: str) -> int:
        """Send a plain message to the channels for ``event_key``"""
        return await self._deliver(event_key, content=message)
