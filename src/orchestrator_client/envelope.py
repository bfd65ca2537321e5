"""
Response envelope decoding.

The orchestrator API answers in one of these shapes:
- A bare JSON array (list results, no envelope)
- A bare JSON scalar (usually a string)
- A JSON object without "Code" (a plain record, e.g. an instance)
- A JSON object with "Code", "Message" and "Details" (the generic envelope)

decode_response() inspects the shape once, at the boundary, and returns a
tagged value. Downstream code dispatches on the type and never sniffs JSON
shapes again.

Example:
    ```python
    result = decode_response(response.text)
    if isinstance(result, Envelope) and result.is_error:
        raise ApplicationError(result.normalized_message(), result.details)
    ```
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

ERROR_CODE = "ERROR"
"""Envelope Code value that marks an application failure."""

OK_CODE = "OK"


class EnvelopeModel(BaseModel):
    """
    Wire model of the generic envelope.

    Example response:
    {"Code": "ERROR", "Message": "Cannot read instance", "Details": null}
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    code: Any = Field(alias="Code")
    message: Any = Field(default=None, alias="Message")
    details: Any = Field(default=None, alias="Details")


@dataclass(frozen=True)
class RawArray:
    """A bare JSON array."""

    items: list


@dataclass(frozen=True)
class RawScalar:
    """A bare JSON scalar (string, number, boolean or null)."""

    value: Any


@dataclass(frozen=True)
class RawObject:
    """A JSON object with no Code field."""

    data: dict


@dataclass(frozen=True)
class Envelope:
    """
    The generic Code/Message/Details envelope.

    Attributes:
        code: Code field as sent ("OK", "ERROR", null, ...)
        message: Message field, raw
        details: Details field, None when null or absent
    """

    code: Any
    message: str
    details: Any

    @property
    def is_error(self) -> bool:
        return str(self.code) == ERROR_CODE

    def normalized_message(self) -> str:
        """Message with quotes removed and whitespace collapsed to single spaces."""
        return normalize_message(self.message)


ApiResponse = Union[RawArray, RawScalar, RawObject, Envelope]


def normalize_message(message: str) -> str:
    """Strip double quotes and collapse whitespace runs."""
    return re.sub(r"\s+", " ", message.replace('"', "")).strip()


def decode_response(body: str) -> ApiResponse:
    """
    Decode a response body into its tagged variant.

    Args:
        body: Raw response text.

    Returns:
        RawArray, RawScalar, RawObject or Envelope.

    Raises:
        ValueError: If the body is not valid JSON.
    """
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(f"malformed response body: {e}") from e

    if isinstance(data, list):
        return RawArray(items=data)
    if not isinstance(data, dict):
        return RawScalar(value=data)
    if "Code" not in data:
        return RawObject(data=data)

    model = EnvelopeModel.model_validate(data)
    message = "" if model.message is None else str(model.message)
    return Envelope(code=model.code, message=message, details=model.details)


def payload_of(result: ApiResponse) -> Any:
    """
    The JSON value a successful response carries.

    For an envelope this is Details; for raw shapes it is the value itself.
    """
    if isinstance(result, Envelope):
        return result.details
    if isinstance(result, RawArray):
        return result.items
    if isinstance(result, RawObject):
        return result.data
    return result.value
