"""Shared test fixtures for workdeck tests."""

from unittest.mock import MagicMock

import pytest

from workdeck.config import ClientConfig
from workdeck.dashboard.layout import Panel
from workdeck.dashboard.state import AppState, Screen
from workdeck.dashboard.theme import Theme
from workdeck.models import Condition, ConsumerRef, WorkSummary


AVAILABLE = (
    Condition(type="Applied", status="True"),
    Condition(type="Available", status="True"),
)


def _bundle(
    name="nginx-work",
    consumer="cluster1",
    bundle_id="b-1",
    conditions=None,
    resources=None,
    manifests=None,
    version=3,
):
    if conditions is None:
        conditions = [
            {"type": "Applied", "status": "True", "reason": "AppliedManifestWorkComplete"},
            {"type": "Available", "status": "True", "message": "All resources are available"},
        ]
    if manifests is None:
        manifests = [
            {
                "apiVersion": "apps/v1",
                "kind": "Deployment",
                "metadata": {"name": "nginx", "namespace": "default"},
            }
        ]
    return {
        "id": bundle_id,
        "name": name,
        "consumer_name": consumer,
        "version": version,
        "created_at": "2024-05-01T10:00:00Z",
        "updated_at": "2024-05-01T10:05:00Z",
        "metadata": {"name": name, "labels": {"app": "nginx"}},
        "manifests": manifests,
        "status": {
            "conditions": conditions,
            "resourceStatus": resources or [],
        },
    }


@pytest.fixture
def bundle_factory():
    """Build wire resource-bundle dicts shaped like the backend's."""
    return _bundle


@pytest.fixture
def wire_bundle():
    return _bundle()


@pytest.fixture
def plain_theme():
    """Theme that renders no escape codes, for readable assertions."""
    return Theme(color_system=None)


@pytest.fixture
def mock_client():
    return MagicMock(name="WorkdeckClient")


@pytest.fixture
def consumers():
    return (
        ConsumerRef(id="c-1", name="cluster1"),
        ConsumerRef(id="c-2", name="cluster2"),
    )


@pytest.fixture
def work_items():
    return (
        WorkSummary(id="w-1", name="nginx-a", consumer_name="cluster1", conditions=AVAILABLE),
        WorkSummary(id="w-2", name="nginx-b", consumer_name="cluster1"),
        WorkSummary(id="w-3", name="redis-1", consumer_name="cluster1", conditions=AVAILABLE),
    )


@pytest.fixture
def main_state(plain_theme, mock_client, consumers, work_items):
    """Connected dashboard on a 100x31 terminal with cluster1's work loaded.

    Layout: left column 40 wide; consumers panel rows 0-11 (9 list rows);
    work panel rows 12-29 (14 list rows); detail viewport 25 rows.
    """
    return AppState(
        theme=plain_theme,
        config=ClientConfig(),
        width=100,
        height=31,
        screen=Screen.MAIN,
        client=mock_client,
        focus=Panel.WORK,
        consumers=consumers,
        active_consumer="cluster1",
        work=work_items,
    )
