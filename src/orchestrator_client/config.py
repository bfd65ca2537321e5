"""Environment-based configuration for the orchestrator client."""

from pydantic_settings import BaseSettings

from orchestrator_client.leader import DEFAULT_PROBE_TIMEOUT
from orchestrator_client.types import DEFAULT_MYSQL_PORT, DEFAULT_TIMEOUT, Credentials, EndpointSet


class Settings(BaseSettings):
    """Orchestrator client configuration.

    All settings can be overridden via environment variables with
    ORCHESTRATOR_ prefix, and again per invocation by CLI flags. For example:
        ORCHESTRATOR_API="http://orc-1:3000/api http://orc-2:3000/api"
        ORCHESTRATOR_AUTH_USER=admin
    """

    # Whitespace separated list of API endpoints, in leader-check order
    api: str = "http://localhost:3000/api"

    # Basic auth, always sent even when empty
    auth_user: str = ""
    auth_password: str = ""

    default_port: int = DEFAULT_MYSQL_PORT

    # Seconds
    timeout: float = DEFAULT_TIMEOUT
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT

    model_config = {"env_prefix": "ORCHESTRATOR_"}

    def endpoint_set(self) -> EndpointSet:
        """Split the api setting into an ordered tuple of endpoints."""
        return tuple(self.api.split())

    def credentials(self) -> Credentials:
        return Credentials(user=self.auth_user, password=self.auth_password)
