"""
Per-invocation session context.

A Session carries everything an API call needs: the HTTP client, the
configured endpoints, credentials, timeouts and the resolved leader. The
leader is resolved on first use and cached for the rest of the process,
so chained calls (e.g. raft-state then raft-leader) all go to the same node.

Tests inject a fixed leader by constructing Session(leader=...) directly,
which skips resolution entirely.
"""

from dataclasses import dataclass, field

import httpx

from orchestrator_client.config import Settings
from orchestrator_client.leader import DEFAULT_PROBE_TIMEOUT, resolve_leader
from orchestrator_client.types import DEFAULT_MYSQL_PORT, DEFAULT_TIMEOUT, Credentials, Endpoint, EndpointSet


@dataclass
class Session:
    """
    Session context threaded through the dispatcher and command driver.

    Attributes:
        http: Pre-configured httpx.Client used for every request.
        endpoints: Configured endpoints in leader-check order.
        credentials: Basic auth applied to every request.
        timeout: Transport timeout for API calls, in seconds.
        probe_timeout: Timeout for leader-check probes, in seconds.
        default_port: Port used when an instance is given without one.
        leader: Resolved leader. None until first needed.
    """

    http: httpx.Client
    endpoints: EndpointSet = ()
    credentials: Credentials = field(default_factory=Credentials)
    timeout: float = DEFAULT_TIMEOUT
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    default_port: int = DEFAULT_MYSQL_PORT
    leader: Endpoint | None = None

    @classmethod
    def from_settings(cls, settings: Settings, http: httpx.Client) -> "Session":
        """Build a session from resolved settings."""
        return cls(
            http=http,
            endpoints=settings.endpoint_set(),
            credentials=settings.credentials(),
            timeout=settings.timeout,
            probe_timeout=settings.probe_timeout,
            default_port=settings.default_port,
        )

    def get_leader(self) -> Endpoint:
        """
        Return the leader, resolving it on first call.

        Raises:
            NoLeaderFoundError: If resolution fails.
        """
        if self.leader is None:
            self.leader = resolve_leader(
                self.http,
                self.endpoints,
                self.credentials,
                self.probe_timeout,
            )
        return self.leader
