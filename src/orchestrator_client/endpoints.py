"""Endpoint normalization: turn a base URL into an API root."""

from orchestrator_client.types import Endpoint

API_ROOT = "/api"


def normalize_endpoint(raw: str) -> Endpoint:
    """
    Canonicalize a base URL into an API root ending in /api.

    Strips trailing slashes, then appends /api unless already present.
    Idempotent: normalize_endpoint(normalize_endpoint(x)) == normalize_endpoint(x).

    Example:
        normalize_endpoint("http://orc:3000/")     # "http://orc:3000/api"
        normalize_endpoint("http://orc:3000/api/") # "http://orc:3000/api"
    """
    endpoint = raw.strip().rstrip("/")
    if not endpoint.endswith(API_ROOT):
        endpoint = f"{endpoint}{API_ROOT}"
    return endpoint
