"""
Telegram 命令处理测试

运行: pytest tests/test_telegram_bot.py -v
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from aiohttp import test_utils, web

from core.exceptions import NetworkError, TelegramAuthError
from monitoring.manager import MonitorManager
from monitoring.telegram_bot import (
    ALREADY_RUNNING_MESSAGE,
    NOT_RUNNING_MESSAGE,
    WELCOME_MESSAGE,
    TelegramCommandBot,
    parse_command,
)
from monitoring.telegram_notifier import TelegramNotifier


def message_update(update_id, chat_id, text):
    return {"update_id": update_id, "message": {"chat": {"id": chat_id}, "text": text}}


@pytest.fixture
def notifier():
    notifier = MagicMock(spec=TelegramNotifier)
    notifier.send = AsyncMock(return_value=True)
    notifier.get_updates = AsyncMock(return_value=[])
    return notifier


@pytest.fixture
def manager():
    manager = MagicMock(spec=MonitorManager)
    manager.start = AsyncMock(return_value=True)
    manager.stop = AsyncMock(return_value=True)
    manager.is_running = MagicMock(return_value=False)
    return manager


@pytest.fixture
def bot(notifier, manager):
    return TelegramCommandBot(notifier, manager, retry_delay=0)


class TestParseCommand:

    @pytest.mark.parametrize("text,expected", [
        ("/monitor", "monitor"),
        ("/Status", "status"),
        ("/stop@VolumeBot", "stop"),
        ("/start now please", "start"),
        ("monitor", None),
        ("/", None),
        ("", None),
        (None, None),
    ])
    def test_parse(self, text, expected):
        assert parse_command(text) == expected


class TestHandleCommand:

    @pytest.mark.asyncio
    async def test_start_sends_welcome(self, bot, notifier, manager):
        await bot.handle_command(10, "start")
        notifier.send.assert_awaited_once_with(10, WELCOME_MESSAGE)
        manager.start.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_monitor_starts_session(self, bot, notifier, manager):
        await bot.handle_command(10, "monitor")
        manager.start.assert_awaited_once_with(10)
        notifier.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_monitor_when_running(self, bot, notifier, manager):
        manager.start.return_value = False
        await bot.handle_command(10, "monitor")
        notifier.send.assert_awaited_once_with(10, ALREADY_RUNNING_MESSAGE)

    @pytest.mark.asyncio
    async def test_stop_when_not_running(self, bot, notifier, manager):
        manager.stop.return_value = False
        await bot.handle_command(10, "stop")
        manager.stop.assert_awaited_once_with(10)
        notifier.send.assert_awaited_once_with(10, NOT_RUNNING_MESSAGE)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("running,status", [(True, "running"), (False, "stopped")])
    async def test_status(self, bot, notifier, manager, running, status):
        manager.is_running.return_value = running
        await bot.handle_command(10, "status")
        notifier.send.assert_awaited_once_with(10, f"Monitoring is currently {status}")

    @pytest.mark.asyncio
    async def test_unknown_command_ignored(self, bot, notifier, manager):
        await bot.handle_command(10, "help")
        notifier.send.assert_not_awaited()
        manager.start.assert_not_awaited()


class TestPolling:

    @pytest.mark.asyncio
    async def test_poll_dispatches_and_advances_offset(self, bot, notifier, manager):
        notifier.get_updates.return_value = [
            message_update(5, 10, "/monitor"),
            message_update(6, 11, "hello"),
            {"update_id": 7, "edited_message": {}},
        ]

        assert await bot.poll_once() == 3
        manager.start.assert_awaited_once_with(10)
        notifier.get_updates.assert_awaited_with(offset=0, timeout=60)

        notifier.get_updates.return_value = []
        await bot.poll_once()
        notifier.get_updates.assert_awaited_with(offset=8, timeout=60)

    @pytest.mark.asyncio
    async def test_handler_error_does_not_stop_batch(self, bot, notifier, manager):
        manager.start.side_effect = [RuntimeError("boom"), True]
        notifier.get_updates.return_value = [
            message_update(1, 10, "/monitor"),
            message_update(2, 20, "/monitor"),
        ]

        await bot.poll_once()
        assert manager.start.await_count == 2

    @pytest.mark.asyncio
    async def test_run_retries_after_network_error(self, bot, notifier):
        calls = []

        async def get_updates(offset, timeout):
            calls.append(offset)
            if len(calls) == 1:
                raise NetworkError("getUpdates 超时")
            bot.stop()
            return []

        notifier.get_updates.side_effect = get_updates
        await bot.run()
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_run_survives_unexpected_error(self, bot, notifier):
        calls = []

        async def get_updates(offset, timeout):
            calls.append(offset)
            if len(calls) == 1:
                raise AttributeError("'list' object has no attribute 'get'")
            bot.stop()
            return []

        notifier.get_updates.side_effect = get_updates
        await bot.run()
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_malformed_update_does_not_stop_polling(self, bot, notifier, manager):
        calls = []

        async def get_updates(offset, timeout):
            calls.append(offset)
            if len(calls) == 1:
                return ["garbage"]
            if len(calls) == 2:
                return [message_update(3, 10, "/monitor")]
            bot.stop()
            return []

        notifier.get_updates.side_effect = get_updates
        await bot.run()
        manager.start.assert_awaited_once_with(10)


class TestTelegramNotifier:

    @pytest.mark.asyncio
    async def test_get_me_rejects_bad_token(self):
        notifier = TelegramNotifier(bot_token="bad")
        with patch.object(notifier, "_call", AsyncMock(return_value={"ok": False, "description": "Unauthorized"})):
            with pytest.raises(TelegramAuthError):
                await notifier.get_me()

    @pytest.mark.asyncio
    async def test_get_me_network_failure_is_auth_error(self):
        notifier = TelegramNotifier(bot_token="token")
        with patch.object(notifier, "_call", AsyncMock(side_effect=NetworkError("timeout"))):
            with pytest.raises(TelegramAuthError):
                await notifier.get_me()

    @pytest.mark.asyncio
    async def test_send_posts_message(self):
        notifier = TelegramNotifier(bot_token="token")
        with patch.object(notifier, "_call", AsyncMock(return_value={"ok": True})) as mock_call:
            assert await notifier.send(10, "hi") is True

        mock_call.assert_awaited_once_with(
            "sendMessage",
            {"chat_id": 10, "text": "hi"},
        )

    @pytest.mark.asyncio
    async def test_send_failure_returns_false(self):
        notifier = TelegramNotifier(bot_token="token")
        with patch.object(notifier, "_call", AsyncMock(side_effect=NetworkError("down"))):
            assert await notifier.send(10, "hi") is False

    @pytest.mark.asyncio
    async def test_get_updates_rejects_non_list_result(self):
        notifier = TelegramNotifier(bot_token="token")
        with patch.object(notifier, "_call", AsyncMock(return_value={"ok": True, "result": "oops"})):
            with pytest.raises(NetworkError):
                await notifier.get_updates()

    @pytest.mark.asyncio
    async def test_call_rejects_non_object_body(self):
        async def get_updates(request):
            return web.json_response([1, 2, 3])

        app = web.Application()
        app.router.add_post("/bottoken/getUpdates", get_updates)

        async with test_utils.TestServer(app) as server:
            notifier = TelegramNotifier(bot_token="token")
            notifier._base_url = str(server.make_url("/bottoken"))
            try:
                with pytest.raises(NetworkError):
                    await notifier.get_updates(timeout=0)
            finally:
                await notifier.close()
