"""
Notification service tests
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import aiohttp
import discord
import pytest

from core.errors import AlreadyInitialized, NotInitialized
from services.notification_service import (
    AnnouncementField,
    AnnouncementOptions,
    NotificationConfig,
    NotificationService
)


def text_channel(channel_id):
    channel = Mock(spec=discord.TextChannel)
    channel.id = channel_id
    channel.send = AsyncMock()
    return channel


def make_service(channel_ids, channels=None, fetched=None):
    channels = channels or {}
    client = Mock()
    client.get_channel = Mock(side_effect=lambda snowflake: channels.get(snowflake))
    client.fetch_channel = AsyncMock(side_effect=fetched or discord.DiscordException("Unknown Channel"))
    mapper = Mock()
    mapper.resolve_channel_ids = Mock(return_value=list(channel_ids))
    return NotificationService.initialize(NotificationConfig(client=client, channel_mapper=mapper))


class TestSingleton:

    def test_get_instance_before_initialize(self):
        assert NotificationService.is_initialized() is False
        with pytest.raises(NotInitialized):
            NotificationService.get_instance()

    def test_initialize_once(self):
        service = make_service([])

        assert NotificationService.get_instance() is service
        with pytest.raises(AlreadyInitialized):
            NotificationService.initialize(NotificationConfig(client=Mock(), channel_mapper=Mock()))


class TestAnnouncementOptions:

    def test_defaults(self):
        embed = AnnouncementOptions(title="Hi").to_embed()

        assert embed.title == "Hi"
        assert embed.color.value == 0x00ff00
        assert embed.timestamp is None

    def test_footer_carries_icon(self):
        embed = AnnouncementOptions(
            footer="User: Dana",
            icon_url="https://img.example/a.png",
            timestamp=True,
            fields=[AnnouncementField("Duration", "1h", inline=True)]
        ).to_embed()

        assert embed.footer.text == "User: Dana"
        assert embed.footer.icon_url == "https://img.example/a.png"
        assert embed.timestamp is not None
        assert embed.fields[0].name == "Duration"
        assert embed.fields[0].inline is True

    def test_icon_without_footer_is_thumbnail(self):
        embed = AnnouncementOptions(icon_url="https://img.example/a.png").to_embed()

        assert embed.thumbnail.url == "https://img.example/a.png"


class TestDelivery:

    @pytest.mark.asyncio
    async def test_send_message_to_every_channel(self):
        first, second = text_channel(1), text_channel(2)
        service = make_service(['1', '2'], channels={1: first, 2: second})

        assert await service.send_message('log_event', 'hello') == 2

        service.channel_mapper.resolve_channel_ids.assert_called_once_with('log_event')
        first.send.assert_awaited_once_with(content='hello')
        second.send.assert_awaited_once_with(content='hello')

    @pytest.mark.asyncio
    async def test_announcement_sends_embed(self):
        channel = text_channel(1)
        service = make_service(['1'], channels={1: channel})

        await service.send_announcement('clockify_events', AnnouncementOptions(title="Started"))

        embed = channel.send.await_args.kwargs['embed']
        assert embed.title == "Started"

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_others(self):
        broken, healthy = text_channel(1), text_channel(2)
        broken.send.side_effect = RuntimeError("Missing Access")
        service = make_service(['1', '2'], channels={1: broken, 2: healthy})

        assert await service.send_message(None, 'hello') == 1
        healthy.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_channels(self, caplog):
        service = make_service([])

        assert await service.send_message('log_event', 'hello') == 0
        assert 'No valid channel found' in caplog.text

    @pytest.mark.asyncio
    async def test_fetches_uncached_channel(self):
        channel = text_channel(5)
        service = make_service(['5'], fetched=[channel])

        assert await service.send_message('log_event', 'hello') == 1
        service.client.fetch_channel.assert_awaited_once_with(5)

    @pytest.mark.asyncio
    async def test_unresolvable_channels_skipped(self):
        healthy = text_channel(2)
        category = Mock(spec=discord.CategoryChannel)
        service = make_service(['1', '2', '3', 'abc'], channels={2: healthy, 3: category})

        assert await service.send_message('log_event', 'hello') == 1
        healthy.send.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize('error', [
        aiohttp.ClientConnectionError("reset"),
        asyncio.TimeoutError(),
        OSError("network unreachable"),
    ])
    async def test_transport_error_on_fetch_does_not_stop_others(self, error):
        cached = text_channel(2)
        service = make_service(['1', '2'], channels={2: cached}, fetched=error)

        assert await service.send_message('log_event', 'hi') == 1
        cached.send.assert_awaited_once_with(content='hi')

    @pytest.mark.asyncio
    async def test_announcement_with_no_channels(self, caplog):
        service = make_service([])

        delivered = await service.send_announcement('clockify_events', AnnouncementOptions(title="Started"))

        assert delivered == 0
        assert 'No valid channel found for event "clockify_events"' in caplog.text
