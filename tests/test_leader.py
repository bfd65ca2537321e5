"""
Tests for leader resolution.

These tests verify resolve_leader correctly:
- Trusts a single endpoint without probing
- Returns the first endpoint answering the leader check with 200
- Probes in configured order and stops at the first leader
- Raises NoLeaderFoundError naming all endpoints when none qualifies
"""

import httpx
import pytest

from conftest import RecordingTransport, json_response
from orchestrator_client.exceptions import NoLeaderFoundError
from orchestrator_client.leader import resolve_leader
from orchestrator_client.session import Session
from orchestrator_client.types import Credentials


def leader_at(*leaders: str):
    """Handler answering 200 on leader-check for the given hosts, 503 elsewhere."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host in leaders:
            return httpx.Response(200, text="OK")
        return httpx.Response(503, text="Not leader")

    return handler


class TestSingleEndpoint:
    """A single configured endpoint is trusted."""

    def test_no_probe_issued(self):
        transport = RecordingTransport(leader_at())
        with httpx.Client(transport=transport) as http:
            leader = resolve_leader(http, ("http://orc-1:3000/",))
        assert leader == "http://orc-1:3000/api"
        assert transport.requests == []

    def test_invalid_url_is_no_leader(self):
        transport = RecordingTransport(leader_at())
        with httpx.Client(transport=transport) as http:
            with pytest.raises(NoLeaderFoundError) as exc_info:
                resolve_leader(http, ("http://orc:abc",))
        assert exc_info.value.endpoints == ("http://orc:abc",)
        assert transport.requests == []


class TestMultipleEndpoints:
    """Multiple endpoints are probed in order."""

    def test_first_leader_in_order_wins(self):
        transport = RecordingTransport(leader_at("orc-2", "orc-3"))
        with httpx.Client(transport=transport) as http:
            leader = resolve_leader(
                http, ("http://orc-1:3000", "http://orc-2:3000", "http://orc-3:3000")
            )
        assert leader == "http://orc-2:3000/api"
        assert [r.url.host for r in transport.requests] == ["orc-1", "orc-2"]

    def test_probe_hits_leader_check_path(self):
        transport = RecordingTransport(leader_at("orc-1"))
        with httpx.Client(transport=transport) as http:
            resolve_leader(http, ("http://orc-1:3000", "http://orc-2:3000"))
        assert transport.paths == ["/api/leader-check"]

    def test_probe_sends_basic_auth(self):
        transport = RecordingTransport(leader_at("orc-1"))
        with httpx.Client(transport=transport) as http:
            resolve_leader(http, ("http://orc-1:3000", "http://orc-2:3000"), Credentials("u", "p"))
        assert transport.requests[0].headers["Authorization"] == "Basic dTpw"

    def test_only_200_counts(self):
        """Redirects and other 2xx are not a leader answer."""

        def handler(request):
            if request.url.host == "orc-1":
                return httpx.Response(204)
            return httpx.Response(200, text="OK")

        transport = RecordingTransport(handler)
        with httpx.Client(transport=transport) as http:
            leader = resolve_leader(http, ("http://orc-1:3000", "http://orc-2:3000"))
        assert leader == "http://orc-2:3000/api"

    def test_transport_error_skips_endpoint(self):
        def handler(request):
            if request.url.host == "orc-1":
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, text="OK")

        transport = RecordingTransport(handler)
        with httpx.Client(transport=transport) as http:
            leader = resolve_leader(http, ("http://orc-1:3000", "http://orc-2:3000"))
        assert leader == "http://orc-2:3000/api"

    def test_invalid_url_skips_endpoint(self):
        transport = RecordingTransport(lambda request: httpx.Response(200, text="OK"))
        with httpx.Client(transport=transport) as http:
            leader = resolve_leader(http, ("http://orc:abc", "http://orc-2:3000"))
        assert leader == "http://orc-2:3000/api"
        assert [r.url.host for r in transport.requests] == ["orc-2"]

    def test_no_leader_raises_with_all_endpoints(self):
        transport = RecordingTransport(leader_at())
        endpoints = ("http://orc-1:3000", "http://orc-2:3000")
        with httpx.Client(transport=transport) as http:
            with pytest.raises(NoLeaderFoundError) as exc_info:
                resolve_leader(http, endpoints)
        assert exc_info.value.endpoints == endpoints
        assert "orc-1" in str(exc_info.value)
        assert "orc-2" in str(exc_info.value)
        assert len(transport.requests) == 2


class TestEmptyEndpoints:
    """An empty endpoint set is a configuration error."""

    def test_raises(self):
        with httpx.Client(transport=RecordingTransport(leader_at())) as http:
            with pytest.raises(NoLeaderFoundError, match="no API endpoints"):
                resolve_leader(http, ())


class TestSessionCachesLeader:
    """The leader is resolved once per session."""

    def test_resolved_once(self):
        def handler(request):
            if request.url.path.endswith("leader-check"):
                return httpx.Response(200, text="OK")
            return json_response(["c1"])

        transport = RecordingTransport(handler)
        session = Session(
            http=httpx.Client(transport=transport),
            endpoints=("http://orc-1:3000", "http://orc-2:3000"),
        )
        assert session.get_leader() == "http://orc-1:3000/api"
        assert session.get_leader() == "http://orc-1:3000/api"
        assert transport.paths == ["/api/leader-check"]

    def test_injected_leader_skips_resolution(self):
        transport = RecordingTransport(leader_at())
        session = Session(http=httpx.Client(transport=transport), leader="http://fake/api")
        assert session.get_leader() == "http://fake/api"
        assert transport.requests == []
