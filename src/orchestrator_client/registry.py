"""
Command registry: the static command table.

This module provides:
- Extractor: How a successful response is turned into output lines
- Arity: Relocation shape (singular or pairwise)
- ParamEncoding: How a parameter value is written into a path or query
- CommandSpec: Complete declarative description of one command
- COMMANDS: The command table, keyed by name
- lookup: Name-to-spec resolution with legacy synonym rewriting

Each command is one row. Adding a command is a data change: no branching
code needs to know about it.

Example:
    ```python
    spec = lookup("start-slave")    # same as lookup("start-replica")
    spec.path                       # "start-replica/{instance}"
    spec.required_params()          # ("instance",)
    ```
"""

import string
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from orchestrator_client.exceptions import UnsupportedCommandError

LEGACY_TOKENS: dict[str, str] = {
    "slave": "replica",
}
"""Deprecated token -> current token, applied to command names before lookup."""


class Extractor(str, Enum):
    """Response extraction strategies."""

    KEY = "key"
    MASTER_KEY = "master_key"
    KEYS_LIST = "keys_list"
    COMPOSITE = "composite"
    RAW = "raw"
    DETAILS = "details"
    STRINGS = "strings"
    FIELD = "field"
    CLUSTER_ALIASES = "cluster_aliases"
    ANALYSIS = "analysis"
    SUCCESSOR_KEY = "successor_key"
    NONE = "none"


class Arity(str, Enum):
    """
    Relocation shape.

    SINGULAR commands take one instance; the destination is implied by
    the instance's current position and resolved server side. PAIRWISE
    commands take an explicit destination.
    """

    NONE = "none"
    SINGULAR = "singular"
    PAIRWISE = "pairwise"


class ParamEncoding(str, Enum):
    """How a parameter is written into a request."""

    HOSTPORT = "hostport"  # instance key, written as host/port segments
    HOSTPORT_LIST = "hostport_list"  # comma separated instance keys
    TEXT = "text"  # free text, percent-encoded
    PASSTHROUGH = "passthrough"  # written verbatim


PARAM_ENCODINGS: dict[str, ParamEncoding] = {
    "instance": ParamEncoding.HOSTPORT,
    "destination": ParamEncoding.HOSTPORT,
    "instances": ParamEncoding.HOSTPORT_LIST,
    "path": ParamEncoding.PASSTHROUGH,
}
"""Encoding per parameter name. Anything not listed is TEXT."""


class CommandSpec(BaseModel):
    """
    Complete definition of one command.

    Attributes:
        name: Command name as typed by the user
        path: Path template relative to the API root, with {param} placeholders
        optional: Params appended as extra path segments only when given
        query: Query string key -> param name. Query params are required.
        extractor: How to render a successful response
        field: Field name for Extractor.FIELD
        arity: Relocation shape, PAIRWISE requires a destination in the path
        section: Help section
        description: Human-readable description for help output
        handler: Name of a driver handler for commands that are not a
            single GET (local commands and call chains)
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Command name")
    path: str = Field(default="", description="Path template")
    optional: tuple[str, ...] = Field(default=(), description="Optional trailing segments")
    query: dict[str, str] = Field(default_factory=dict, description="Query key to param")
    extractor: Extractor = Field(default=Extractor.DETAILS)
    field: str | None = Field(default=None, description="Field for FIELD extraction")
    arity: Arity = Field(default=Arity.NONE)
    section: str = Field(default="general")
    description: str = Field(default="")
    handler: str | None = Field(default=None)

    @model_validator(mode="after")
    def check_shape(self) -> "CommandSpec":
        placeholders = self.path_params()
        if self.arity == Arity.PAIRWISE and "destination" not in placeholders:
            raise ValueError(f"{self.name}: pairwise command needs {{destination}} in path")
        if self.arity == Arity.SINGULAR and "destination" in placeholders:
            raise ValueError(f"{self.name}: singular command cannot take a destination")
        if self.extractor == Extractor.FIELD and not self.field:
            raise ValueError(f"{self.name}: field extractor needs a field name")
        if not self.path and self.handler is None:
            raise ValueError(f"{self.name}: needs a path or a handler")
        return self

    def path_params(self) -> tuple[str, ...]:
        """Placeholder names in the path template, in order."""
        return tuple(
            name for _, name, _, _ in string.Formatter().parse(self.path) if name
        )

    def required_params(self) -> tuple[str, ...]:
        """Every param that must be present: path placeholders then query params."""
        params = list(self.path_params())
        for param in self.query.values():
            if param not in params:
                params.append(param)
        return tuple(params)

    def all_params(self) -> tuple[str, ...]:
        return self.required_params() + tuple(
            p for p in self.optional if p not in self.required_params()
        )


def encoding_for(param: str) -> ParamEncoding:
    return PARAM_ENCODINGS.get(param, ParamEncoding.TEXT)


def _cmd(name: str, path: str = "", **kwargs) -> CommandSpec:
    return CommandSpec(name=name, path=path, **kwargs)


def _instance(name: str, extractor: Extractor = Extractor.KEY, section: str = "replication", **kwargs) -> CommandSpec:
    """A command whose path is "{name}/{instance}"."""
    return CommandSpec(
        name=name,
        path=f"{name}/{{instance}}",
        extractor=extractor,
        section=section,
        **kwargs,
    )


def _singular(name: str, extractor: Extractor = Extractor.COMPOSITE, **kwargs) -> CommandSpec:
    return CommandSpec(
        name=name,
        path=f"{name}/{{instance}}",
        arity=Arity.SINGULAR,
        extractor=extractor,
        section="relocation",
        **kwargs,
    )


def _pairwise(name: str, extractor: Extractor = Extractor.COMPOSITE, api: str | None = None, **kwargs) -> CommandSpec:
    return CommandSpec(
        name=name,
        path=f"{api or name}/{{instance}}/{{destination}}",
        arity=Arity.PAIRWISE,
        extractor=extractor,
        section="relocation",
        **kwargs,
    )


_TABLE: list[CommandSpec] = [
    # Local and generic
    _cmd("help", handler="help", section="general", description="Show available commands"),
    _cmd("which-api", handler="which_api", section="general",
         description="Output the API endpoint currently serving as leader"),
    _cmd("api", "{path}", extractor=Extractor.RAW, section="general",
         description="Invoke any API path, e.g. -p 'instance/db-1/3306'"),

    # Discovery
    _instance("discover", section="discovery", description="Discover an instance and its topology"),
    _instance("async-discover", Extractor.NONE, section="discovery",
              description="Discover an instance without waiting for the result"),
    _instance("forget", section="discovery", description="Forget an instance"),
    _cmd("forget-cluster", "forget-cluster/{cluster}", section="discovery",
         description="Forget all instances of a cluster"),

    # Information
    _cmd("clusters", "clusters", extractor=Extractor.STRINGS, section="information",
         description="List all known clusters"),
    _cmd("clusters-alias", "clusters-info", extractor=Extractor.CLUSTER_ALIASES, section="information",
         description="List clusters as name,alias"),
    _cmd("all-clusters-masters", "masters", extractor=Extractor.KEYS_LIST, section="information",
         description="List the writeable master of each cluster"),
    _cmd("all-instances", "all-instances", extractor=Extractor.KEYS_LIST, section="information",
         description="List all known instances"),
    _cmd("search", "search", query={"s": "query"}, extractor=Extractor.KEYS_LIST, section="information",
         description="Search instances by name substring"),
    _cmd("instance", "instance/{instance}", extractor=Extractor.KEY, section="information",
         description="Read an instance"),
    _cmd("which-cluster", "cluster-info/{instance}", extractor=Extractor.FIELD, field="ClusterName",
         section="information", description="Output the cluster name an instance belongs to"),
    _cmd("which-cluster-alias", "cluster-info/{cluster}", extractor=Extractor.FIELD, field="ClusterAlias",
         section="information", description="Output the alias of a cluster"),
    _cmd("which-cluster-domain", "cluster-info/{cluster}", extractor=Extractor.FIELD, field="ClusterDomain",
         section="information", description="Output the domain name of a cluster"),
    _cmd("which-cluster-master", "master/{cluster}", extractor=Extractor.KEY, section="information",
         description="Output the writeable master of a cluster"),
    _cmd("which-cluster-instances", "cluster/{cluster}", extractor=Extractor.KEYS_LIST, section="information",
         description="List instances of a cluster"),
    _cmd("which-cluster-osc-replicas", "cluster-osc-replicas/{cluster}", extractor=Extractor.KEYS_LIST,
         section="information", description="List replicas suitable for online schema changes"),
    _cmd("which-master", "instance/{instance}", extractor=Extractor.MASTER_KEY, section="information",
         description="Output the master of an instance"),
    _cmd("which-replicas", "instance-replicas/{instance}", extractor=Extractor.KEYS_LIST,
         section="information", description="List direct replicas of an instance"),
    _cmd("which-downtimed-instances", "downtimed", optional=("cluster",), extractor=Extractor.KEYS_LIST,
         section="information", description="List downtimed instances, optionally of one cluster"),
    _cmd("problems", "problems", optional=("cluster",), extractor=Extractor.KEYS_LIST,
         section="information", description="List instances with known problems"),
    _cmd("which-gtid-errant", "instance/{instance}", extractor=Extractor.FIELD, field="GtidErrant",
         section="information", description="Output the errant GTID set of an instance"),
    _instance("locate-gtid-errant", Extractor.STRINGS, section="information",
              description="List binary logs containing errant GTIDs"),

    # Topology
    _cmd("topology", "topology/{cluster}", extractor=Extractor.DETAILS, section="topology",
         description="Show an ascii graph of a cluster topology"),
    _cmd("topology-tabulated", "topology-tabulated/{cluster}", extractor=Extractor.DETAILS,
         section="topology", description="Show a tabulated cluster topology"),
    _cmd("topology-tags", "topology-tags/{cluster}", extractor=Extractor.DETAILS, section="topology",
         description="Show a cluster topology with instance tags"),

    # Relocation, classic
    _pairwise("relocate", description="Relocate an instance below another"),
    _pairwise("relocate-replicas", Extractor.KEYS_LIST,
              description="Relocate all replicas of an instance below another"),
    _singular("move-up", description="Move an instance one level up, below its grandparent"),
    _singular("move-up-replicas", Extractor.KEYS_LIST,
              description="Move all replicas of an instance up one level"),
    _pairwise("move-below", description="Move an instance below its sibling"),
    _pairwise("move-equivalent", description="Move an instance using equivalence coordinates"),
    _pairwise("repoint", description="Point an instance at a destination without coordinate checks"),
    _singular("repoint-replicas", Extractor.KEYS_LIST,
              description="Repoint all replicas of an instance to it"),
    _singular("take-siblings", description="Turn all siblings of an instance into its replicas"),
    _singular("take-master", description="Swap an instance with its master"),
    _singular("make-co-master", description="Make an instance co-master with its master"),
    _singular("get-candidate-replica", Extractor.KEY,
              description="Output the best replica to promote among an instance's replicas"),
    _singular("regroup-replicas", Extractor.KEY,
              description="Promote one replica and move its siblings below it"),

    # Relocation, GTID
    _pairwise("move-gtid", api="move-below-gtid", description="Move an instance below another via GTID"),
    _pairwise("move-replicas-gtid", Extractor.KEYS_LIST,
              description="Move replicas of an instance below another via GTID"),
    _singular("regroup-replicas-gtid", Extractor.KEY, description="Regroup replicas via GTID"),

    # Relocation, Pseudo-GTID
    _pairwise("match", api="match-below", description="Match an instance below another via Pseudo-GTID"),
    _pairwise("match-below", description="Match an instance below another via Pseudo-GTID"),
    _singular("match-up", description="Match an instance one level up via Pseudo-GTID"),
    _singular("match-up-replicas", Extractor.KEYS_LIST,
              description="Match replicas of an instance one level up via Pseudo-GTID"),
    _pairwise("match-replicas", Extractor.KEYS_LIST, api="multi-match-replicas",
              description="Match replicas of an instance below another via Pseudo-GTID"),
    _singular("regroup-replicas-pgtid", Extractor.KEY, description="Regroup replicas via Pseudo-GTID"),
    _instance("last-pseudo-gtid", Extractor.DETAILS, description="Output the last Pseudo-GTID entry"),

    # GTID
    _instance("enable-gtid", description="Switch an instance to GTID replication"),
    _instance("disable-gtid", description="Switch an instance to file based replication"),
    _instance("gtid-errant-reset-master", description="Remove errant GTIDs by resetting master"),
    _instance("gtid-errant-inject-empty", description="Inject empty transactions for errant GTIDs"),

    # Replication control
    _instance("start-replica", description="Start replication"),
    _instance("restart-replica", description="Stop and start replication"),
    _instance("stop-replica", description="Stop replication"),
    _instance("stop-replica-nice", description="Stop replication after IO thread catches up"),
    _instance("reset-replica", description="Reset replication"),
    _instance("detach-replica", description="Break replication by corrupting coordinates"),
    _instance("reattach-replica", description="Undo detach-replica"),
    _instance("detach-replica-master-host", description="Break replication by renaming the master host"),
    _instance("reattach-replica-master-host", description="Undo detach-replica-master-host"),
    _instance("skip-query", description="Skip a single statement on a replica"),
    _instance("restart-replica-statements", Extractor.STRINGS,
              description="Output statements that restart replication"),

    # Binlogs and read-only
    _instance("set-read-only", section="binlogs", description="Turn an instance read-only"),
    _instance("set-writeable", section="binlogs", description="Turn an instance writeable"),
    _instance("flush-binary-logs", section="binlogs", description="Flush binary logs"),
    _cmd("purge-binary-logs", "purge-binary-logs/{instance}/{binlog}", extractor=Extractor.KEY,
         section="binlogs", description="Purge binary logs up to a given log"),

    # Semi-sync
    _instance("enable-semi-sync-master", section="semi-sync", description="Enable semi-sync on a master"),
    _instance("disable-semi-sync-master", section="semi-sync", description="Disable semi-sync on a master"),
    _instance("enable-semi-sync-replica", section="semi-sync", description="Enable semi-sync on a replica"),
    _instance("disable-semi-sync-replica", section="semi-sync", description="Disable semi-sync on a replica"),

    # Maintenance and downtime
    _cmd("begin-maintenance", "begin-maintenance/{instance}/{owner}/{reason}", extractor=Extractor.KEY,
         section="maintenance", description="Request a maintenance lock on an instance"),
    _instance("end-maintenance", section="maintenance", description="Release a maintenance lock"),
    _cmd("begin-downtime", "begin-downtime/{instance}/{owner}/{reason}", optional=("duration",),
         extractor=Extractor.KEY, section="maintenance",
         description="Mark an instance as downtimed, optionally for a duration such as 10m"),
    _instance("end-downtime", section="maintenance", description="End an instance downtime"),

    # Registration
    _cmd("register-candidate", "register-candidate/{instance}/{promotion_rule}", extractor=Extractor.KEY,
         section="registration", description="Set the promotion rule of an instance"),
    _cmd("register-hostname-unresolve", "register-hostname-unresolve/{instance}/{hostname}",
         extractor=Extractor.KEY, section="registration",
         description="Map an instance to an unresolved hostname"),
    _instance("deregister-hostname-unresolve", section="registration",
              description="Remove an unresolved hostname mapping"),

    # Tags
    _instance("tags", Extractor.STRINGS, section="tags", description="List tags of an instance"),
    _cmd("tag-value", "tag-value/{instance}", query={"tag": "tag"}, extractor=Extractor.DETAILS,
         section="tags", description="Output the value of a tag on an instance"),
    _cmd("tag", "tag/{instance}", query={"tag": "tag"}, extractor=Extractor.KEY, section="tags",
         description="Add a tag (name or name=value) to an instance"),
    _cmd("untag", "untag/{instance}", query={"tag": "tag"}, extractor=Extractor.KEYS_LIST, section="tags",
         description="Remove a tag from an instance"),
    _cmd("untag-all", "untag-all", query={"tag": "tag"}, extractor=Extractor.KEYS_LIST, section="tags",
         description="Remove a tag from all instances"),
    _cmd("tagged", "tagged", query={"tag": "tag"}, extractor=Extractor.KEYS_LIST, section="tags",
         description="List instances matching a tag expression"),

    # Pools
    _cmd("submit-pool-instances", "submit-pool-instances/{pool}", query={"instances": "instances"},
         extractor=Extractor.NONE, section="pools", description="Submit the instances of a pool"),
    _cmd("which-heuristic-cluster-pool-instances", "heuristic-cluster-pool-instances/{cluster}",
         optional=("pool",), extractor=Extractor.KEYS_LIST, section="pools",
         description="List cluster instances belonging to a pool"),

    # Recovery
    _instance("recover", section="recovery", description="Run recovery on a failed instance"),
    _instance("recover-lite", section="recovery", description="Run recovery without external hooks"),
    _cmd("force-master-failover", "force-master-failover/{cluster}", extractor=Extractor.SUCCESSOR_KEY,
         section="recovery", description="Force a failover of a cluster master"),
    _cmd("force-master-takeover", "force-master-takeover/{cluster}/{destination}",
         extractor=Extractor.SUCCESSOR_KEY, section="recovery",
         description="Force a designated replica to take over as master"),
    _cmd("graceful-master-takeover", "graceful-master-takeover/{cluster}", optional=("destination",),
         extractor=Extractor.SUCCESSOR_KEY, section="recovery",
         description="Gracefully promote a replica, demoted master replicates from it"),
    _cmd("graceful-master-takeover-auto", "graceful-master-takeover-auto/{cluster}",
         optional=("destination",), extractor=Extractor.SUCCESSOR_KEY, section="recovery",
         description="Gracefully promote a replica, picked automatically when not given"),
    _cmd("ack-cluster-recoveries", "ack-recovery/cluster/{cluster}", query={"comment": "reason"},
         section="recovery", description="Acknowledge recoveries of a cluster"),
    _cmd("ack-instance-recoveries", "ack-recovery/instance/{instance}", query={"comment": "reason"},
         section="recovery", description="Acknowledge recoveries of an instance"),
    _cmd("ack-all-recoveries", "ack-all-recoveries", query={"comment": "reason"}, section="recovery",
         description="Acknowledge all recoveries"),
    _cmd("blocked-recoveries", "blocked-recoveries", optional=("cluster",), extractor=Extractor.RAW,
         section="recovery", description="Show recoveries blocked by anti-flapping"),
    _cmd("disable-global-recoveries", "disable-global-recoveries", section="recovery",
         description="Disable automated recoveries globally"),
    _cmd("enable-global-recoveries", "enable-global-recoveries", section="recovery",
         description="Enable automated recoveries globally"),
    _cmd("check-global-recoveries", "check-global-recoveries", section="recovery",
         description="Show whether automated recoveries are enabled"),
    _cmd("replication-analysis", "replication-analysis", extractor=Extractor.ANALYSIS, section="recovery",
         description="Show replication failure analysis"),
    _cmd("submit-masters-to-kv-stores", "submit-masters-to-kv-stores", optional=("cluster",),
         extractor=Extractor.RAW, section="recovery",
         description="Write cluster masters to configured key-value stores"),

    # Raft
    _cmd("raft-leader", "raft-leader", extractor=Extractor.RAW, section="raft",
         description="Output the raft leader address"),
    _cmd("raft-health", "raft-health", extractor=Extractor.RAW, section="raft",
         description="Output raft health"),
    _cmd("raft-state", "raft-state", extractor=Extractor.RAW, section="raft",
         description="Output the raft state of the serving node"),
    _cmd("raft-elect-leader", "raft-yield-hint/{hostname}", extractor=Extractor.RAW, section="raft",
         description="Ask the raft group to elect the given host as leader"),
    _cmd("raft-leader-hostname", handler="raft_leader_hostname", section="raft",
         description="Output the host of the raft leader"),
]

COMMANDS: dict[str, CommandSpec] = {spec.name: spec for spec in _TABLE}


def rewrite_legacy_name(name: str) -> str:
    """Substitute deprecated tokens in a command name with their current form."""
    for old, new in LEGACY_TOKENS.items():
        name = name.replace(old, new)
    return name


def lookup(name: str) -> CommandSpec:
    """
    Find a command by name, after legacy synonym rewriting.

    Raises:
        UnsupportedCommandError: If no command has that name.
    """
    spec = COMMANDS.get(rewrite_legacy_name(name))
    if spec is None:
        raise UnsupportedCommandError(name)
    return spec


def list_command_names() -> list[str]:
    return list(COMMANDS.keys())


def commands_by_section() -> dict[str, list[CommandSpec]]:
    """Group commands by help section, preserving table order."""
    sections: dict[str, list[CommandSpec]] = {}
    for spec in _TABLE:
        sections.setdefault(spec.section, []).append(spec)
    return sections
