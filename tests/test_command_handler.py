"""
Prefix command dispatcher tests
"""

import pytest

from core.registry import CapabilityRegistry, command
from handlers.command_handler import GENERIC_ERROR_REPLY, CommandDispatcher, parse_command


class SampleCommands:
    calls = []

    @command('ping')
    async def ping(self, message, args):
        SampleCommands.calls.append(('ping', args))
        await message.reply('pong')

    @command('echo')
    def echo(self, message, args):
        SampleCommands.calls.append(('echo', args))

    @command('kick', permissions=['kick_members', 'ban_members'])
    async def kick(self, message, args):
        SampleCommands.calls.append(('kick', args))

    @command('explode')
    async def explode(self, message, args):
        raise RuntimeError("boom")


@pytest.fixture
def dispatcher():
    SampleCommands.calls = []
    registry = CapabilityRegistry()
    registry.register_owner(SampleCommands)
    dispatcher = CommandDispatcher('^')
    dispatcher.bind(registry)
    return dispatcher


class TestParseCommand:

    def test_splits_name_and_args(self):
        assert parse_command('^Echo  a   b', '^') == ['echo', 'a', 'b']

    def test_requires_prefix_and_name(self):
        assert parse_command('echo a', '^') is None
        assert parse_command('^', '^') is None
        assert parse_command('^   ', '^') is None


class TestCommandDispatcher:

    def test_bind_lists_commands(self, dispatcher):
        assert dispatcher.command_names() == ['echo', 'explode', 'kick', 'ping']
        assert dispatcher.get('PING').name == 'ping'

    @pytest.mark.asyncio
    async def test_dispatches_async_handler(self, dispatcher, message_factory):
        message = message_factory('^ping')

        assert await dispatcher.handle_message(message) is True
        message.reply.assert_awaited_once_with('pong')
        assert SampleCommands.calls == [('ping', [])]

    @pytest.mark.asyncio
    async def test_dispatches_sync_handler_with_args(self, dispatcher, message_factory):
        assert await dispatcher.handle_message(message_factory('^ECHO hello world')) is True
        assert SampleCommands.calls == [('echo', ['hello', 'world'])]

    @pytest.mark.asyncio
    async def test_ignores_bots_and_plain_messages(self, dispatcher, message_factory):
        bot_message = message_factory('^ping', bot=True)
        plain = message_factory('ping')

        assert await dispatcher.handle_message(bot_message) is False
        assert await dispatcher.handle_message(plain) is False
        assert SampleCommands.calls == []
        bot_message.reply.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_command_ignored_by_default(self, dispatcher, message_factory):
        message = message_factory('^nope')

        assert await dispatcher.handle_message(message) is False
        message.reply.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_command_reply(self, message_factory):
        dispatcher = CommandDispatcher('^', reply_unknown=True)
        message = message_factory('^Nope')

        assert await dispatcher.handle_message(message) is True
        message.reply.assert_awaited_once_with('Unknown command: nope')

    @pytest.mark.asyncio
    async def test_missing_permissions(self, dispatcher, message_factory):
        message = message_factory('^kick someone', permissions=['kick_members'])

        assert await dispatcher.handle_message(message) is True
        message.reply.assert_awaited_once_with(
            'You lack the following permissions to use this command: ban_members'
        )
        assert SampleCommands.calls == []

    @pytest.mark.asyncio
    async def test_permissions_all_missing_sorted(self, dispatcher, message_factory):
        message = message_factory('^kick')

        await dispatcher.handle_message(message)
        message.reply.assert_awaited_once_with(
            'You lack the following permissions to use this command: ban_members, kick_members'
        )

    @pytest.mark.asyncio
    async def test_permissions_granted(self, dispatcher, message_factory):
        message = message_factory('^kick someone', permissions=['kick_members', 'ban_members'])

        assert await dispatcher.handle_message(message) is True
        assert SampleCommands.calls == [('kick', ['someone'])]

    @pytest.mark.asyncio
    async def test_handler_failure_is_contained(self, dispatcher, message_factory):
        message = message_factory('^explode')

        assert await dispatcher.handle_message(message) is True
        message.reply.assert_awaited_once_with(GENERIC_ERROR_REPLY)

    @pytest.mark.asyncio
    async def test_custom_prefix(self, message_factory):
        registry = CapabilityRegistry()
        registry.register_owner(SampleCommands)
        dispatcher = CommandDispatcher('!!')
        dispatcher.bind(registry)
        SampleCommands.calls = []

        assert await dispatcher.handle_message(message_factory('^ping')) is False
        assert await dispatcher.handle_message(message_factory('!!ping')) is True
