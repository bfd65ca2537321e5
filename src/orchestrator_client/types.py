"""
Shared data types for the orchestrator client.

These are internal values passed between the resolver, dispatcher and
command driver - not API models. API response shapes live in
orchestrator_client.envelope.

All types use @dataclass for simplicity. Pydantic models are reserved for
configuration parsing, the command table and API responses.
"""

from dataclasses import dataclass

# Type aliases for common patterns
Endpoint = str
"""An API root URL, normalized to end in /api (e.g. "http://orc-1:3000/api")."""

EndpointSet = tuple[Endpoint, ...]
"""Ordered endpoints configured at startup. Order is leader-check preference."""

DEFAULT_MYSQL_PORT = 3306
DEFAULT_TIMEOUT = 10.0
"""Seconds allowed for one API call."""


@dataclass(frozen=True)
class InstanceKey:
    """
    Identity of a managed MySQL instance.

    Attributes:
        hostname: Host name exactly as given, no case or DNS normalization.
        port: MySQL port.
    """

    hostname: str
    port: int

    def __str__(self) -> str:
        return f"{self.hostname}:{self.port}"

    @property
    def hostport(self) -> str:
        """The key as a "host:port" path segment."""
        return str(self)


@dataclass(frozen=True)
class Credentials:
    """
    HTTP basic-auth credentials.

    Empty credentials are still sent; the service decides whether it
    requires authentication.
    """

    user: str = ""
    password: str = ""

    @classmethod
    def parse(cls, auth: str) -> "Credentials":
        """
        Parse a "user:password" string.

        Splits on the first colon only, so passwords may contain colons.
        A value with no colon is taken as a user with an empty password.
        """
        user, _, password = auth.partition(":")
        return cls(user=user, password=password)

    def as_tuple(self) -> tuple[str, str]:
        return (self.user, self.password)


def parse_instance_key(raw: str | None, default_port: int = DEFAULT_MYSQL_PORT) -> InstanceKey | None:
    """
    Normalize a user-supplied "host" or "host:port" into an InstanceKey.

    Args:
        raw: The user input. Surrounding whitespace is ignored.
        default_port: Port to use when the input carries none.

    Returns:
        InstanceKey, or None for empty input.

    Raises:
        ValueError: If an embedded port is not an integer.

    Example:
        parse_instance_key("db-1.example.com")       # db-1.example.com:3306
        parse_instance_key("db-1.example.com:3307")  # db-1.example.com:3307
    """
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    if ":" not in raw:
        return InstanceKey(hostname=raw, port=default_port)
    hostname, _, port = raw.rpartition(":")
    try:
        return InstanceKey(hostname=hostname, port=int(port))
    except ValueError:
        raise ValueError(f"Invalid port in instance '{raw}'") from None


def format_key(key: dict) -> str:
    """
    Render an API key object ({"Hostname": ..., "Port": ...}) as host:port.

    The hostname is passed through verbatim.
    """
    return f"{key['Hostname']}:{key['Port']}"
