"""
Response projection: turn a successful response into output lines.

Each Extractor maps to one pure function from a decoded response to a list
of lines. Key objects ({"Hostname": ..., "Port": ...}) render as host:port
with the hostname passed through verbatim.

Example:
    ```python
    lines = project(Extractor.KEYS_LIST, RawArray([{"Key": {"Hostname": "db-1", "Port": 3306}}]))
    # ["db-1:3306"]
    ```
"""

import json
from typing import Any, Callable

from orchestrator_client.envelope import ApiResponse, Envelope, RawArray, RawScalar, payload_of
from orchestrator_client.exceptions import ProjectionError
from orchestrator_client.registry import Extractor
from orchestrator_client.types import format_key

NO_PROBLEM = "NoProblem"


def render_value(value: Any) -> list[str]:
    """Render any JSON value as text lines. Strings are emitted unquoted."""
    if value is None:
        return []
    if isinstance(value, str):
        return value.splitlines() if value else []
    return json.dumps(value, indent=2).splitlines()


def _is_key(obj: Any) -> bool:
    return isinstance(obj, dict) and "Hostname" in obj and "Port" in obj


def _key_of(obj: Any, field: str = "Key") -> str:
    """Find and render a key, either nested under field or the object itself."""
    if isinstance(obj, dict):
        if _is_key(obj.get(field)):
            return format_key(obj[field])
        if _is_key(obj):
            return format_key(obj)
    raise ProjectionError(f"expected an object with {field}, got {type(obj).__name__}")


def _as_list(payload: Any) -> list:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ProjectionError(f"expected a list, got {type(payload).__name__}")
    return payload


def _objects(payload: Any) -> list[dict]:
    items = _as_list(payload)
    for item in items:
        if not isinstance(item, dict):
            raise ProjectionError(f"expected a list of objects, got an item of type {type(item).__name__}")
    return items


def _project_key(result: ApiResponse, field: str | None) -> list[str]:
    payload = payload_of(result)
    if payload is None:
        return []
    return [_key_of(payload, "Key")]


def _project_master_key(result: ApiResponse, field: str | None) -> list[str]:
    payload = payload_of(result)
    if payload is None:
        return []
    return [_key_of(payload, "MasterKey")]


def _project_keys_list(result: ApiResponse, field: str | None) -> list[str]:
    return [_key_of(item) for item in _as_list(payload_of(result))]


def _project_composite(result: ApiResponse, field: str | None) -> list[str]:
    payload = payload_of(result)
    if payload is None:
        return []
    return [f"{_key_of(payload, 'Key')}<{_key_of(payload, 'MasterKey')}"]


def _project_raw(result: ApiResponse, field: str | None) -> list[str]:
    if isinstance(result, Envelope):
        return render_value({"Code": result.code, "Message": result.message, "Details": result.details})
    if isinstance(result, RawScalar):
        return render_value(result.value)
    if isinstance(result, RawArray):
        return render_value(result.items)
    return render_value(result.data)


def _project_details(result: ApiResponse, field: str | None) -> list[str]:
    return render_value(payload_of(result))


def _project_strings(result: ApiResponse, field: str | None) -> list[str]:
    return [str(item) for item in _as_list(payload_of(result))]


def _project_field(result: ApiResponse, field: str | None) -> list[str]:
    payload = payload_of(result)
    if not isinstance(payload, dict):
        raise ProjectionError(f"expected an object with {field}")
    return render_value(payload.get(field))


def _project_cluster_aliases(result: ApiResponse, field: str | None) -> list[str]:
    return [
        f"{item.get('ClusterName', '')},{item.get('ClusterAlias', '')}"
        for item in _objects(payload_of(result))
    ]


def _project_analysis(result: ApiResponse, field: str | None) -> list[str]:
    lines = []
    for entry in _objects(payload_of(result)):
        analysis = entry.get("Analysis", "")
        if analysis == NO_PROBLEM:
            continue
        details = entry.get("ClusterDetails")
        if not isinstance(details, dict):
            details = {}
        cluster = details.get("ClusterName") or entry.get("ClusterName", "")
        key = _key_of(entry, "AnalyzedInstanceKey")
        lines.append(f"{key} (cluster {cluster}): {analysis}")
    return lines


def _project_successor_key(result: ApiResponse, field: str | None) -> list[str]:
    payload = payload_of(result)
    if payload is None:
        return []
    return [_key_of(payload, "SuccessorKey")]


def _project_none(result: ApiResponse, field: str | None) -> list[str]:
    return []


PROJECTORS: dict[Extractor, Callable[[ApiResponse, str | None], list[str]]] = {
    Extractor.KEY: _project_key,
    Extractor.MASTER_KEY: _project_master_key,
    Extractor.KEYS_LIST: _project_keys_list,
    Extractor.COMPOSITE: _project_composite,
    Extractor.RAW: _project_raw,
    Extractor.DETAILS: _project_details,
    Extractor.STRINGS: _project_strings,
    Extractor.FIELD: _project_field,
    Extractor.CLUSTER_ALIASES: _project_cluster_aliases,
    Extractor.ANALYSIS: _project_analysis,
    Extractor.SUCCESSOR_KEY: _project_successor_key,
    Extractor.NONE: _project_none,
}


def project(extractor: Extractor, result: ApiResponse, field: str | None = None) -> list[str]:
    """
    Render a successful response with the given strategy.

    Args:
        extractor: Extraction strategy.
        result: Decoded, successful response.
        field: Field name, used by Extractor.FIELD only.

    Returns:
        Output lines, possibly empty.

    Raises:
        ProjectionError: If the payload shape does not fit the strategy.
    """
    return PROJECTORS[extractor](result, field)
