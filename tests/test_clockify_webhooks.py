"""
Clockify webhook tests
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import aiohttp
import pytest
from fastapi.testclient import TestClient

from core.errors import ExternalApiError
from core.registry import CapabilityRegistry
from services.clockify_service import ClockifyService
from services.notification_service import NotificationService
from services.service_manager import ServiceManager, ServicePhase, set_service_manager
from services.webhook_server import create_webhook_app
from webhooks.clockify import ClockifyWebhooks, format_duration
from webhooks.models import ClockifyTimeEntry


def entry_payload(**overrides):
    payload = {
        "id": "entry-1",
        "description": "Writing tests",
        "billable": True,
        "currentlyRunning": True,
        "projectId": "project-1",
        "timeInterval": {
            "start": "2024-01-01T09:00:00Z",
            "end": "2024-01-01T10:30:00Z",
            "duration": "PT1H30M"
        },
        "user": {"id": "user-1", "name": "Dana"}
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def services():
    clockify = Mock(spec=ClockifyService)
    clockify.get_user = AsyncMock(return_value={'imageUrl': 'https://img.example/avatar.png'})
    notifications = Mock(spec=NotificationService)
    notifications.send_announcement = AsyncMock(return_value=1)

    manager = ServiceManager()
    manager.service_registry.register_instance(ClockifyService, clockify)
    manager.service_registry.register_instance(NotificationService, notifications)
    manager.phase = ServicePhase.CLIENT_READY
    set_service_manager(manager)
    return SimpleNamespace(clockify=clockify, notifications=notifications, manager=manager)


def sent_announcement(services):
    event_key, options = services.notifications.send_announcement.await_args.args
    assert event_key == 'clockify_events'
    return options


def field_map(options):
    return {field.name: field.value for field in options.fields}


class TestClockifyModels:

    def test_camel_case_payload(self):
        entry = ClockifyTimeEntry.model_validate(entry_payload())

        assert entry.currently_running is True
        assert entry.time_interval.duration == "PT1H30M"
        assert entry.user.name == "Dana"

    def test_running_entry_without_end(self):
        entry = ClockifyTimeEntry.model_validate(
            entry_payload(timeInterval={"start": "2024-01-01T09:00:00Z"})
        )

        assert entry.time_interval.end is None
        assert entry.time_interval.duration is None


class TestClockifyWebhooks:

    @pytest.mark.asyncio
    async def test_start(self, services):
        ack = await ClockifyWebhooks().create_entry(entry_payload())

        assert ack == 'Clockify create webhook processed.'
        services.clockify.get_user.assert_awaited_once_with('user-1')
        options = sent_announcement(services)
        assert options.title == "Clockify: Time Entry Started"
        assert options.color == 0x00bcd4
        assert options.footer == "User: Dana"
        assert options.icon_url == 'https://img.example/avatar.png'
        assert options.timestamp is True
        assert field_map(options) == {
            "Description": "Writing tests",
            "Start Time": "2024-01-01T09:00:00Z",
            "Currently Running": "Yes",
        }

    @pytest.mark.asyncio
    async def test_stop(self, services):
        ack = await ClockifyWebhooks().stop_entry(entry_payload(currentlyRunning=False))

        assert ack == 'Clockify stop webhook processed.'
        options = sent_announcement(services)
        assert options.title == "Clockify: Time Entry Stopped"
        assert options.color == 0xffa500
        fields = field_map(options)
        assert fields["Duration"] == "1h 30m"
        assert fields["End Time"] == "2024-01-01T10:30:00Z"

    @pytest.mark.asyncio
    async def test_stop_without_duration(self, services):
        await ClockifyWebhooks().stop_entry(
            entry_payload(description=None, timeInterval={"start": "2024-01-01T09:00:00Z"})
        )

        fields = field_map(sent_announcement(services))
        assert fields["Duration"] == "Unknown"
        assert fields["Description"] == "No Description"

    @pytest.mark.asyncio
    async def test_delete(self, services):
        ack = await ClockifyWebhooks().delete_entry(entry_payload(billable=False))

        assert ack == 'Clockify delete webhook processed.'
        options = sent_announcement(services)
        assert options.title == "Clockify: Time Entry Deleted"
        assert options.color == 0xff4500
        assert field_map(options) == {
            "Description": "Writing tests",
            "Duration": "1h 30m",
            "Billable": "No",
            "Entry ID": "entry-1",
            "Deleted By": "Dana",
        }

    @pytest.mark.asyncio
    async def test_missing_avatar(self, services):
        services.clockify.get_user.return_value = {}

        await ClockifyWebhooks().create_entry(entry_payload())

        assert sent_announcement(services).icon_url is None

    def test_format_duration(self):
        assert format_duration("PT45S") == "45s"
        assert format_duration(None) == "Unknown"
        assert format_duration("garbage") == "Unknown"


class TestClockifyRoutes:

    def make_client(self):
        registry = CapabilityRegistry()
        registry.register_owner(ClockifyWebhooks)
        return TestClient(create_webhook_app(registry))

    def test_start_route(self, services):
        response = self.make_client().post('/webhook/clockify/start', json=entry_payload())

        assert response.status_code == 200
        assert response.text == 'Clockify create webhook processed.'
        services.notifications.send_announcement.assert_awaited_once()

    def test_upstream_failure(self, services):
        services.clockify.get_user.side_effect = ExternalApiError("member profile unavailable", status=404)

        response = self.make_client().post('/webhook/clockify/stop', json=entry_payload())

        assert response.status_code == 500
        assert response.text == 'Failed to process webhook: member profile unavailable'
        services.notifications.send_announcement.assert_not_awaited()

    def test_invalid_payload(self, services):
        payload = entry_payload()
        del payload['user']

        response = self.make_client().post('/webhook/clockify/delete', json=payload)

        assert response.status_code == 500
        assert response.text.startswith('Failed to process webhook:')
        services.notifications.send_announcement.assert_not_awaited()

    def test_notifications_not_ready(self):
        manager = ServiceManager()
        manager.phase = ServicePhase.API_READY
        set_service_manager(manager)

        response = self.make_client().post('/webhook/clockify/start', json=entry_payload())

        assert response.status_code == 500
        assert 'NotificationService' in response.text

    def test_start_profile_fetch_network_failure(self, services):
        clockify = ClockifyService('key', 'workspace')
        session = Mock(closed=False)
        session.request = Mock(side_effect=aiohttp.ClientConnectionError("connection reset"))
        clockify.session = session
        services.manager.service_registry.register_instance(ClockifyService, clockify)
        payload = {
            "currentlyRunning": True,
            "timeInterval": {"start": "2024-01-01T09:00:00Z"},
            "user": {"id": "u1", "name": "Alice"}
        }

        response = self.make_client().post('/webhook/clockify/start', json=payload)

        assert response.status_code == 500
        assert response.text.startswith('Failed to process webhook: GET ')
        assert 'member-profile/u1' in response.text
        assert 'connection reset' in response.text
        services.notifications.send_announcement.assert_not_awaited()
