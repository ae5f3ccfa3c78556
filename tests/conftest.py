"""
Shared fixtures for the Archon test suite
"""

import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from core import logging_config
from core.registry import get_capability_registry
from services.notification_service import NotificationService
from services.service_manager import set_service_manager


@pytest.fixture(autouse=True)
def reset_globals():
    """Every test starts without singletons or globally registered classes"""
    NotificationService._instance = None
    set_service_manager(None)
    get_capability_registry().clear()
    yield
    NotificationService._instance = None
    set_service_manager(None)
    get_capability_registry().clear()


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handlers, levels and propagation set on the bot loggers"""
    saved = {}
    for name in logging_config.ROOT_LOGGERS:
        target = logging.getLogger(name)
        saved[name] = (list(target.handlers), target.level, target.propagate)
    configured = logging_config._configured
    yield
    for name, (handlers, level, propagate) in saved.items():
        target = logging.getLogger(name)
        for handler in list(target.handlers):
            if handler not in handlers:
                target.removeHandler(handler)
                handler.close()
        for handler in handlers:
            if handler not in target.handlers:
                target.addHandler(handler)
        target.setLevel(level)
        target.propagate = propagate
    logging_config._configured = configured


def make_message(content, permissions=(), bot=False):
    """Chat message stand-in with an awaitable ``reply``"""
    author = SimpleNamespace(
        bot=bot,
        name="tester",
        guild_permissions=discord.Permissions(**{name: True for name in permissions})
    )
    return SimpleNamespace(author=author, content=content, reply=AsyncMock())


@pytest.fixture
def message_factory():
    return make_message
