"""
Command driver: from a command name and user parameters to output lines.

The driver:
1. Looks the command up in the registry (legacy names rewritten)
2. Validates required parameters - before any network call
3. Resolves free parameters: instance/destination hostport normalization,
   cluster name from alias or instance, percent-encoding of free text
4. Builds the path and dispatches it
5. Projects the response with the command's extractor

Commands with a handler (help, which-api, raft-leader-hostname) bypass
steps 3-5 and run their own logic against the same dispatcher.

Example:
    ```python
    driver = CommandDriver(RequestDispatcher(session))
    for line in driver.run("relocate", CommandParams(instance="db-2", destination="db-3")):
        print(line)
    ```
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote, urlencode

from orchestrator_client.dispatcher import RequestDispatcher
from orchestrator_client.envelope import payload_of
from orchestrator_client.exceptions import InvalidParameterError, MissingParameterError
from orchestrator_client.projector import project, render_value
from orchestrator_client.registry import (
    Arity,
    CommandSpec,
    Extractor,
    ParamEncoding,
    commands_by_section,
    encoding_for,
    lookup,
)
from orchestrator_client.types import InstanceKey, parse_instance_key

logger = logging.getLogger(__name__)

CLUSTER_PARAM = "cluster"


@dataclass
class CommandParams:
    """
    Free parameters supplied by the user.

    Empty strings are treated as absent. The cluster a command operates on
    is not a field: it comes from alias, or from the cluster of instance.
    """

    instance: str | None = None
    destination: str | None = None
    alias: str | None = None
    owner: str | None = None
    reason: str | None = None
    duration: str | None = None
    promotion_rule: str | None = None
    pool: str | None = None
    instances: str | None = None
    hostname: str | None = None
    tag: str | None = None
    query: str | None = None
    binlog: str | None = None
    path: str | None = None

    def get(self, name: str) -> str | None:
        value = getattr(self, name, None)
        if value is None:
            return None
        value = value.strip()
        return value or None


class CommandDriver:
    """
    Runs commands through a dispatcher.

    Attributes:
        dispatcher: Dispatcher bound to the invocation session
    """

    def __init__(self, dispatcher: RequestDispatcher) -> None:
        self.dispatcher = dispatcher
        self._handlers = {
            "help": self._help,
            "which_api": self._which_api,
            "raft_leader_hostname": self._raft_leader_hostname,
        }

    @property
    def default_port(self) -> int:
        return self.dispatcher.session.default_port

    def run(self, command: str, params: CommandParams | None = None) -> list[str]:
        """
        Execute one command.

        Args:
            command: Command name, legacy synonyms accepted.
            params: User parameters.

        Returns:
            Output lines.

        Raises:
            UnsupportedCommandError: Unknown command.
            MissingParameterError: A required parameter is absent.
            InvalidParameterError: A parameter cannot be parsed.
            NoLeaderFoundError, ApiUnreachableError, ApplicationError,
            ProjectionError: From dispatch and projection.
        """
        params = params or CommandParams()
        spec = lookup(command)

        if spec.handler is not None:
            return self._handlers[spec.handler](spec, params)

        self.validate(spec, params)
        if spec.arity == Arity.SINGULAR and params.get("destination"):
            logger.warning("%s takes no destination, ignoring %s", spec.name, params.get("destination"))

        path = self.build_path(spec, params)
        logger.debug("Running %s as %s", spec.name, path)
        result = self.dispatcher.request(path)
        return project(spec.extractor, result, spec.field)

    def validate(self, spec: CommandSpec, params: CommandParams) -> None:
        """
        Check required parameters and instance keys. Makes no network calls.

        Raises:
            MissingParameterError: On the first absent required parameter.
            InvalidParameterError: If an instance key cannot be parsed.
        """
        for name in spec.required_params():
            if name == CLUSTER_PARAM:
                if params.get("alias") is None and params.get("instance") is None:
                    raise MissingParameterError(spec.name, "alias")
            elif params.get(name) is None:
                raise MissingParameterError(spec.name, name)

        for name in spec.all_params():
            value = params.get(name)
            if value is None:
                continue
            if encoding_for(name) == ParamEncoding.HOSTPORT:
                self._instance_key(spec, name, value)
            elif encoding_for(name) == ParamEncoding.HOSTPORT_LIST:
                self._hostport_list(spec, name, value)

    def build_path(self, spec: CommandSpec, params: CommandParams) -> str:
        """
        Fill the path template, optional segments and query string.

        May call the API once to find the cluster of an instance.
        """
        segments = {
            name: self._encode_segment(spec, name, self._value(spec, name, params))
            for name in spec.path_params()
        }
        path = spec.path.format(**segments)

        for name in spec.optional:
            value = self._optional_value(spec, name, params)
            if value is not None:
                path = f"{path}/{self._encode_segment(spec, name, value)}"

        if spec.query:
            query = {
                key: self._encode_query_value(spec, name, self._value(spec, name, params))
                for key, name in spec.query.items()
            }
            path = f"{path}?{urlencode(query, quote_via=quote)}"
        return path

    def resolve_cluster(self, spec: CommandSpec, params: CommandParams) -> str:
        """
        Cluster name for a command: the alias if given, else the cluster of instance.

        The service accepts aliases wherever a cluster name is expected, so
        an alias is passed as is.
        """
        alias = params.get("alias")
        if alias is not None:
            return alias
        instance = params.get("instance")
        if instance is None:
            raise MissingParameterError(spec.name, "alias")
        key = self._instance_key(spec, "instance", instance)
        result = self.dispatcher.request(f"cluster-info/{quote(key.hostname, safe='')}/{key.port}")
        lines = project(Extractor.FIELD, result, "ClusterName")
        if not lines:
            raise InvalidParameterError(spec.name, "instance", f"cannot find cluster of {key}")
        logger.debug("Instance %s belongs to cluster %s", key, lines[0])
        return lines[0]

    # -------------------------------------------------------------------------
    # Parameter encoding
    # -------------------------------------------------------------------------

    def _value(self, spec: CommandSpec, name: str, params: CommandParams) -> str:
        if name == CLUSTER_PARAM:
            return self.resolve_cluster(spec, params)
        value = params.get(name)
        if value is None:
            raise MissingParameterError(spec.name, name)
        return value

    def _optional_value(self, spec: CommandSpec, name: str, params: CommandParams) -> str | None:
        if name == CLUSTER_PARAM:
            return params.get("alias")
        return params.get(name)

    def _instance_key(self, spec: CommandSpec, name: str, value: str) -> InstanceKey:
        try:
            return parse_instance_key(value, self.default_port)
        except ValueError as e:
            raise InvalidParameterError(spec.name, name, str(e)) from e

    def _encode_segment(self, spec: CommandSpec, name: str, value: str) -> str:
        encoding = encoding_for(name)
        if encoding == ParamEncoding.HOSTPORT:
            key = self._instance_key(spec, name, value)
            return f"{quote(key.hostname, safe='')}/{key.port}"
        if encoding == ParamEncoding.PASSTHROUGH:
            return value.lstrip("/")
        if encoding == ParamEncoding.HOSTPORT_LIST:
            return quote(self._hostport_list(spec, name, value), safe="")
        return quote(value, safe="")

    def _encode_query_value(self, spec: CommandSpec, name: str, value: str) -> str:
        """Query values stay unencoded here; urlencode() encodes them."""
        encoding = encoding_for(name)
        if encoding == ParamEncoding.HOSTPORT:
            return str(self._instance_key(spec, name, value))
        if encoding == ParamEncoding.HOSTPORT_LIST:
            return self._hostport_list(spec, name, value)
        return value

    def _hostport_list(self, spec: CommandSpec, name: str, value: str) -> str:
        keys = [
            self._instance_key(spec, name, item)
            for item in value.split(",")
            if item.strip()
        ]
        return ",".join(str(key) for key in keys)

    # -------------------------------------------------------------------------
    # Handlers - commands that are not a single GET
    # -------------------------------------------------------------------------

    def _help(self, spec: CommandSpec, params: CommandParams) -> list[str]:
        lines = ["Usage: orchestrator-client -c <command> [options]", ""]
        for section, specs in commands_by_section().items():
            lines.append(f"{section.title()}:")
            width = max(len(s.name) for s in specs)
            for s in specs:
                lines.append(f"  {s.name.ljust(width)}  {s.description}")
            lines.append("")
        return lines

    def _which_api(self, spec: CommandSpec, params: CommandParams) -> list[str]:
        return [self.dispatcher.session.get_leader()]

    def _raft_leader_hostname(self, spec: CommandSpec, params: CommandParams) -> list[str]:
        state = self.dispatcher.request("raft-state")
        logger.debug("Raft state of serving node: %s", payload_of(state))
        leader = render_value(payload_of(self.dispatcher.request("raft-leader")))
        if not leader:
            return []
        hostname, _, _ = leader[0].rpartition(":")
        return [hostname or leader[0]]
