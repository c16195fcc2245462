"""Tests for workdeck.dashboard.commands (command execution)."""

import json
from unittest.mock import MagicMock, patch

import pyperclip
import pytest
import requests

from workdeck.config import ClientConfig
from workdeck.dashboard.commands import (
    Connect,
    CopyToClipboard,
    CreateConsumer,
    DeleteConsumer,
    DeleteWork,
    LoadConsumers,
    LoadDetail,
    LoadWork,
    ScheduleTick,
    run_command,
)
from workdeck.dashboard.events import (
    ClipboardWritten,
    CommandFailed,
    Connected,
    ConsumerCreated,
    ConsumerDeleted,
    ConsumersLoaded,
    DetailLoaded,
    DetailOrigin,
    WatchTick,
    WorkDeleted,
    WorkLoaded,
)
from workdeck.exceptions import ClipboardError, NotFoundError
from workdeck.models import ConsumerRef, WorkSummary


class TestRunCommand:
    def test_connect_uses_factory_and_handshake(self, consumers):
        client = MagicMock()
        client.health.return_value = list(consumers)
        factory = MagicMock(return_value=client)
        config = ClientConfig(http_endpoint="http://api:8000")

        event = run_command(Connect(config, client_factory=factory))

        factory.assert_called_once_with(config)
        assert event == Connected(client=client, consumers=consumers)

    def test_load_consumers(self, mock_client, consumers):
        mock_client.consumers.list.return_value = list(consumers)
        assert run_command(LoadConsumers(mock_client)) == ConsumersLoaded(consumers)

    def test_load_work(self, mock_client, work_items):
        mock_client.bundles.list.return_value = list(work_items)
        event = run_command(LoadWork(mock_client, "cluster1"))
        mock_client.bundles.list.assert_called_once_with("cluster1")
        assert event == WorkLoaded("cluster1", work_items)

    def test_load_detail_builds_all_views(self, mock_client, wire_bundle):
        mock_client.bundles.get.return_value = wire_bundle
        summary = WorkSummary(id="b-1", name="nginx-work", consumer_name="cluster1")

        event = run_command(LoadDetail(mock_client, summary, DetailOrigin.WATCH))

        mock_client.bundles.get.assert_called_once_with("b-1")
        assert isinstance(event, DetailLoaded)
        assert event.origin is DetailOrigin.WATCH
        assert event.detail.name == "nginx-work"
        assert json.loads(event.raw_json)["kind"] == "ManifestWork"
        assert event.raw_yaml.startswith("apiVersion:")

    def test_create_consumer(self, mock_client):
        created = ConsumerRef("c-9", "edge-1")
        mock_client.consumers.create.return_value = created
        assert run_command(CreateConsumer(mock_client, "edge-1")) == ConsumerCreated(created)

    def test_delete_consumer(self, mock_client):
        event = run_command(DeleteConsumer(mock_client, "c-1", "cluster1"))
        mock_client.consumers.delete.assert_called_once_with("c-1")
        assert event == ConsumerDeleted("c-1", "cluster1")

    def test_delete_work(self, mock_client):
        event = run_command(DeleteWork(mock_client, "w-1", "nginx-a"))
        mock_client.bundles.delete.assert_called_once_with("w-1")
        assert event == WorkDeleted("w-1", "nginx-a")

    def test_backend_error_becomes_command_failed(self, mock_client):
        mock_client.consumers.list.side_effect = NotFoundError("gone")
        command = LoadConsumers(mock_client)
        event = run_command(command)
        assert isinstance(event, CommandFailed)
        assert event.command is command
        assert str(event.error) == "gone"

    def test_requests_error_becomes_command_failed(self, mock_client):
        mock_client.bundles.list.side_effect = requests.ConnectionError("refused")
        event = run_command(LoadWork(mock_client, "cluster1"))
        assert isinstance(event, CommandFailed)

    def test_programming_errors_propagate(self, mock_client):
        mock_client.consumers.list.side_effect = KeyError("bug")
        with pytest.raises(KeyError):
            run_command(LoadConsumers(mock_client))

    def test_driver_effects_are_not_executable(self):
        with pytest.raises(TypeError):
            run_command(ScheduleTick(WatchTick(), 5.0))


class TestClipboard:
    def test_copy(self):
        with patch("workdeck.dashboard.commands.pyperclip.copy") as copy:
            event = run_command(CopyToClipboard("hello"))
        copy.assert_called_once_with("hello")
        assert event == ClipboardWritten(chars=5)

    def test_unavailable_clipboard(self):
        with patch(
            "workdeck.dashboard.commands.pyperclip.copy",
            side_effect=pyperclip.PyperclipException("no copy mechanism"),
        ):
            event = run_command(CopyToClipboard("hello"))
        assert isinstance(event, CommandFailed)
        assert isinstance(event.error, ClipboardError)
        assert "no copy mechanism" in str(event.error)
