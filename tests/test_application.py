"""
Application wiring tests
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from core.config_manager import ConfigurationManager
from core.errors import ConfigurationError
from core.registry import CapabilityKind, CapabilityRegistry
from services.bot_application import ArchonApplication
from services.service_manager import ServicePhase, get_service_manager


@pytest.fixture
def application(tmp_path):
    environ = {
        'CHANNEL_MAPPINGS_PATH': str(tmp_path / 'channelMappings.json'),
        'CLOCKIFY_API_KEY': 'key',
        'CLOCKIFY_WORKSPACE_ID': 'workspace',
    }
    return ArchonApplication(
        config_manager=ConfigurationManager(tmp_path, environ=environ),
        registry=CapabilityRegistry()
    )


class TestArchonApplication:

    def test_initialize_wires_everything(self, application):
        with patch('services.bot_application.configure_logging'):
            application.initialize()

        assert get_service_manager() is application.service_manager
        assert application.service_manager.phase is ServicePhase.API_READY
        assert 'ping' in application.command_dispatcher.command_names()
        assert application.registry.get(CapabilityKind.WEBHOOK, '/clockify/start') is not None
        assert 'hug' in application.slash_commands.commands
        assert application.client.listener_count('message') == 1
        assert application.client.listener_count('interaction') == 1
        # service setup, slash registration and the online log line
        assert application.client.listener_count('ready') == 3

        stats = application.get_stats()
        assert stats['commands'] == 7
        assert stats['webhooks'] == 3
        assert stats['phase'] == 'API_READY'

        client = TestClient(application.webhook_server.app)
        assert client.get('/health').status_code == 200
        response = client.post('/webhook/clockify/stop', json={})
        assert response.status_code == 500
        assert response.text.startswith('Failed to process webhook:')
        assert client.post('/webhook/unknown', json={}).status_code == 404

    def test_initialize_is_idempotent(self, application):
        with patch('services.bot_application.configure_logging'):
            application.initialize()
            client = application.client
            application.initialize()

        assert application.client is client

    @pytest.mark.asyncio
    async def test_run_requires_token(self, application):
        with patch('services.bot_application.configure_logging'):
            with pytest.raises(ConfigurationError):
                await application.run()
