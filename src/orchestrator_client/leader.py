"""
Leader resolution across a set of orchestrator API endpoints.

In a raft deployment only the leader serves API requests. Each node exposes
a leader-check path that answers HTTP 200 on the leader and an error status
everywhere else.

Resolution rules:
- A single configured endpoint is trusted without a probe.
- Otherwise endpoints are probed in configured order and the first one
  answering 200 wins. The scan is sequential and short-circuits; listed
  order is the tie-break.
- If nothing answers 200, NoLeaderFoundError names every configured endpoint.

Example:
    ```python
    with httpx.Client() as http:
        leader = resolve_leader(http, ("http://orc-1:3000", "http://orc-2:3000"))
    ```
"""

import logging

import httpx

from orchestrator_client.endpoints import normalize_endpoint
from orchestrator_client.exceptions import NoLeaderFoundError
from orchestrator_client.types import Credentials, Endpoint, EndpointSet

logger = logging.getLogger(__name__)

LEADER_CHECK_PATH = "leader-check"
DEFAULT_PROBE_TIMEOUT = 1.0


def probe_leader(
    http: httpx.Client,
    endpoint: Endpoint,
    credentials: Credentials,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> bool:
    """
    Check whether a normalized endpoint is the leader.

    Returns:
        True only for HTTP 200. Any other status, transport failure or
        unparseable URL counts as "not the leader".
    """
    url = f"{endpoint}/{LEADER_CHECK_PATH}"
    try:
        response = http.get(url, auth=credentials.as_tuple(), timeout=timeout)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.debug("Leader check failed for %s: %s", endpoint, e)
        return False
    logger.debug("Leader check %s -> %d", endpoint, response.status_code)
    return response.status_code == 200


def resolve_leader(
    http: httpx.Client,
    endpoints: EndpointSet,
    credentials: Credentials | None = None,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> Endpoint:
    """
    Pick the leader endpoint for this invocation.

    Args:
        http: Client used for probes.
        endpoints: Configured endpoints, in preference order.
        credentials: Basic auth sent with each probe.
        probe_timeout: Per-probe timeout in seconds.

    Returns:
        The normalized leader endpoint.

    Raises:
        NoLeaderFoundError: If endpoints is empty, the only endpoint is not a
            valid URL, or no probe returns 200.
    """
    credentials = credentials or Credentials()
    if not endpoints:
        raise NoLeaderFoundError(endpoints)

    if len(endpoints) == 1:
        leader = normalize_endpoint(endpoints[0])
        try:
            httpx.URL(leader)
        except httpx.InvalidURL as e:
            logger.debug("Single endpoint %s is not a valid URL: %s", leader, e)
            raise NoLeaderFoundError(endpoints) from e
        logger.debug("Single endpoint configured, using %s without leader check", leader)
        return leader

    for raw in endpoints:
        endpoint = normalize_endpoint(raw)
        if probe_leader(http, endpoint, credentials, probe_timeout):
            logger.info("Leader is %s", endpoint)
            return endpoint

    raise NoLeaderFoundError(endpoints)
