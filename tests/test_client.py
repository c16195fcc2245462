"""Tests for workdeck.client (REST client with a mocked session)."""

from unittest.mock import MagicMock

import pytest
import requests

from workdeck.client import API_PREFIX, WorkdeckClient
from workdeck.config import ClientConfig
from workdeck.exceptions import APIError, AuthenticationError, NotFoundError
from workdeck.models import ConsumerRef


def _response(status_code=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.content = b"x" if body is not None or text else b""
    response.text = text
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    session = requests.Session()
    session.request = MagicMock(return_value=_response(body={"items": []}))
    return session


@pytest.fixture
def client(session):
    return WorkdeckClient(ClientConfig(http_endpoint="http://api:8000/"), session=session)


# ---------------------------------------------------------------------------
# Session setup
# ---------------------------------------------------------------------------


class TestSessionSetup:
    def test_bearer_token(self, session):
        WorkdeckClient(ClientConfig(token="s3cret"), session=session)
        assert session.headers["Authorization"] == "Bearer s3cret"

    def test_no_token_no_header(self, session):
        WorkdeckClient(ClientConfig(), session=session)
        assert "Authorization" not in session.headers

    def test_insecure_disables_verify(self, session):
        WorkdeckClient(ClientConfig(insecure=True, ca_file="/ca.pem"), session=session)
        assert session.verify is False

    def test_ca_file(self, session):
        WorkdeckClient(ClientConfig(ca_file="/ca.pem"), session=session)
        assert session.verify == "/ca.pem"

    def test_trailing_slash_stripped(self, client, session):
        client.consumers.list()
        url = session.request.call_args[0][1]
        assert url == f"http://api:8000{API_PREFIX}/consumers"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


class TestConsumers:
    def test_list(self, client, session):
        session.request.return_value = _response(body={"items": [
            {"id": "c-1", "name": "cluster1"},
            {"id": "c-2", "name": "cluster2"},
        ]})
        assert client.consumers.list() == [ConsumerRef("c-1", "cluster1"), ConsumerRef("c-2", "cluster2")]

    def test_get_by_name_searches(self, client, session):
        session.request.return_value = _response(body={"items": [{"id": "c-1", "name": "cluster1"}]})
        assert client.consumers.get_by_name("cluster1").id == "c-1"
        assert session.request.call_args[1]["params"] == {"search": "name='cluster1'"}

    def test_get_by_name_missing(self, client):
        with pytest.raises(NotFoundError):
            client.consumers.get_by_name("ghost")

    def test_create(self, client, session):
        session.request.return_value = _response(status_code=201, body={"id": "c-9", "name": "edge"})
        assert client.consumers.create("edge") == ConsumerRef("c-9", "edge")
        args, kwargs = session.request.call_args
        assert args[0] == "POST"
        assert kwargs["json"] == {"name": "edge"}

    def test_delete(self, client, session):
        session.request.return_value = _response(status_code=204)
        assert client.consumers.delete("c-1") is None
        assert session.request.call_args[0][:2] == ("DELETE", f"http://api:8000{API_PREFIX}/consumers/c-1")

    def test_health_lists_consumers(self, client, session):
        session.request.return_value = _response(body={"items": [{"id": "c-1", "name": "cluster1"}]})
        assert client.health() == [ConsumerRef("c-1", "cluster1")]


class TestBundles:
    def test_list_filters_by_consumer(self, client, session, wire_bundle):
        session.request.return_value = _response(body={"items": [wire_bundle]})
        work = client.bundles.list("cluster1")
        assert [w.name for w in work] == ["nginx-work"]
        assert session.request.call_args[1]["params"] == {"search": "consumer_name='cluster1'"}

    def test_get(self, client, session, wire_bundle):
        session.request.return_value = _response(body=wire_bundle)
        assert client.bundles.get("b-1")["id"] == "b-1"

    def test_get_non_object(self, client, session):
        session.request.return_value = _response(body=["unexpected"])
        with pytest.raises(APIError):
            client.bundles.get("b-1")

    def test_get_by_name(self, client, session, bundle_factory):
        session.request.return_value = _response(body={"items": [
            bundle_factory(name="a", bundle_id="b-1"),
            bundle_factory(name="b", bundle_id="b-2"),
        ]})
        assert client.bundles.get_by_name("cluster1", "b")["id"] == "b-2"

    def test_get_by_name_missing(self, client):
        with pytest.raises(NotFoundError, match="not found in consumer"):
            client.bundles.get_by_name("cluster1", "ghost")


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrorMapping:
    def test_404(self, client, session):
        session.request.return_value = _response(status_code=404, body={})
        with pytest.raises(NotFoundError) as exc_info:
            client.bundles.get("missing")
        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_failures(self, client, session, status):
        session.request.return_value = _response(status_code=status, body={})
        with pytest.raises(AuthenticationError) as exc_info:
            client.consumers.list()
        assert exc_info.value.status_code == status

    def test_server_error_includes_reason(self, client, session):
        session.request.return_value = _response(status_code=500, body={"reason": "database down"})
        with pytest.raises(APIError, match="database down") as exc_info:
            client.consumers.list()
        assert exc_info.value.status_code == 500

    def test_server_error_plain_text(self, client, session):
        session.request.return_value = _response(status_code=502, text="bad gateway")
        with pytest.raises(APIError, match="bad gateway"):
            client.consumers.list()

    def test_timeout(self, client, session):
        session.request.side_effect = requests.Timeout()
        with pytest.raises(APIError, match="timed out"):
            client.consumers.list()

    def test_connection_error(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(APIError, match="refused"):
            client.consumers.list()
