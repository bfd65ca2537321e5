"""
Orchestrator client - command line access to an orchestrator cluster.

This package provides the pieces behind the orchestrator-client CLI:
- normalize_endpoint: Endpoint normalization to an API root
- resolve_leader: Leader resolution across configured endpoints
- lookup / CommandSpec: The declarative command table
- RequestDispatcher: GET with a fixed retry schedule
- project: Response projection into output lines
- CommandDriver / CommandParams: Parameter resolution and execution
- Session: Per-invocation context holding the cached leader

Exports:
    Settings: Environment-driven configuration
    Session: Per-invocation context
    CommandDriver: Command execution
    CommandParams: User-supplied parameters
    RequestDispatcher: Retrying API caller
    RetrySchedule: Fixed backoff schedule
    CommandSpec: Command table row
    lookup: Command lookup with legacy names
    normalize_endpoint: Endpoint normalization
    resolve_leader: Leader resolution
    project: Response projection
    OrchestratorClientError: Base of all client errors
"""

from orchestrator_client.config import Settings
from orchestrator_client.dispatcher import RequestDispatcher, RetrySchedule
from orchestrator_client.driver import CommandDriver, CommandParams
from orchestrator_client.endpoints import normalize_endpoint
from orchestrator_client.exceptions import OrchestratorClientError
from orchestrator_client.leader import resolve_leader
from orchestrator_client.projector import project
from orchestrator_client.registry import CommandSpec, lookup
from orchestrator_client.session import Session

__all__ = [
    "CommandDriver",
    "CommandParams",
    "CommandSpec",
    "OrchestratorClientError",
    "RequestDispatcher",
    "RetrySchedule",
    "Session",
    "Settings",
    "lookup",
    "normalize_endpoint",
    "project",
    "resolve_leader",
]
