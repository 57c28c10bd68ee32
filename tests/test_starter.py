"""
Unit tests for the eventd startup action.
"""

import asyncio
from unittest.mock import AsyncMock, Mock, call

import pytest

from eventd_sdk import starter
from eventd_sdk.app import HostApplication
from eventd_sdk.client import get_global_client
from eventd_sdk.errors import EventdConnectError, EventdNkeyError
from eventd_sdk.options import load_options


def failing_client(failures):
    client = Mock()
    client.options = load_options({})
    client.connect = AsyncMock(side_effect=[EventdConnectError("connection refused")] * failures + [None])
    return client


@pytest.fixture
def no_wait(monkeypatch):
    wait = AsyncMock(return_value=False)
    monkeypatch.setattr(starter, "_wait", wait)
    return wait


class TestConnectWithRetry:

    @pytest.mark.asyncio
    async def test_connects_first_time(self, no_wait):
        client = failing_client(0)
        assert await starter.connect_with_retry(client) is True
        client.connect.assert_awaited_once()
        no_wait.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_until_success(self, no_wait, capsys):
        client = failing_client(3)
        assert await starter.connect_with_retry(client) is True

        assert client.connect.await_count == 4
        assert no_wait.await_args_list == [call(None, 5.0)] * 3
        assert capsys.readouterr().err.count("retrying in 5s") == 3

    @pytest.mark.asyncio
    async def test_waits_between_attempts(self):
        client = failing_client(2)
        loop = asyncio.get_running_loop()
        started = loop.time()
        assert await starter.connect_with_retry(client, retry_interval=0.05) is True
        assert client.connect.await_count == 3
        assert loop.time() - started >= 0.1

    @pytest.mark.asyncio
    async def test_stop_event_ends_retry(self):
        stop = asyncio.Event()
        client = Mock()
        client.options = load_options({})

        async def refuse():
            stop.set()
            raise EventdConnectError("connection refused")

        client.connect = AsyncMock(side_effect=refuse)
        assert await starter.connect_with_retry(client, retry_interval=60, stop_event=stop) is False
        client.connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stopped_before_first_attempt(self):
        stop = asyncio.Event()
        stop.set()
        client = failing_client(0)
        assert await starter.connect_with_retry(client, stop_event=stop) is False
        client.connect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_nkey_errors_are_not_retried(self, no_wait):
        client = Mock()
        client.options = load_options({})
        client.connect = AsyncMock(side_effect=EventdNkeyError("not a valid nkey user seed"))
        with pytest.raises(EventdNkeyError):
            await starter.connect_with_retry(client)
        no_wait.assert_not_awaited()


class TestStartupAction:

    @pytest.fixture
    def client_class(self, monkeypatch):
        client_class = Mock()
        client_class.return_value.connect = AsyncMock()
        monkeypatch.setattr(starter, "EventdClient", client_class)
        return client_class

    @pytest.mark.asyncio
    async def test_disabled_makes_no_connection(self, client_class, capsys):
        host = HostApplication(configuration={"eventd": {"disabled": True}})
        action = starter.init_eventd_client_startup_action(host)

        assert await action.run() is None
        client_class.assert_not_called()
        assert get_global_client() is None
        assert "disabled" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_skipped_in_cli_mode(self, client_class):
        host = HostApplication(is_run_in_cli=True, configuration={"eventd": {}})
        await starter.init_eventd_client_startup_action(host).run()
        client_class.assert_not_called()
        assert get_global_client() is None

    @pytest.mark.asyncio
    async def test_sets_and_connects_global_client(self, client_class):
        host = HostApplication(configuration={"eventd": {"port": 4333}})
        client = await starter.init_eventd_client_startup_action(host).run()

        client_class.assert_called_once_with(host.options)
        assert client is client_class.return_value
        assert get_global_client() is client
        client.connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_register_with_host(self, client_class):
        host = HostApplication(configuration={"eventd": {}})
        starter.register(host)
        assert [action.name for action in host.startup_actions] == ["init eventd client"]

        await host.run_startup_actions()
        assert get_global_client() is client_class.return_value

    @pytest.mark.asyncio
    async def test_shutdown_stops_retry(self, client_class):
        client_class.return_value.connect = AsyncMock(side_effect=EventdConnectError("connection refused"))
        host = HostApplication(configuration={"eventd": {}})
        action = starter.init_eventd_client_startup_action(host, retry_interval=60)

        task = asyncio.create_task(action.run())
        await asyncio.sleep(0.01)
        host.request_shutdown()
        await asyncio.wait_for(task, timeout=1)
        client_class.return_value.connect.assert_awaited_once()
