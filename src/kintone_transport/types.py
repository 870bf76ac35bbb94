"""
Type definitions for kintone_transport.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Literal, Mapping, Sequence, Union


# HTTP methods accepted by the kintone REST API
HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

# Query/body payloads: whatever the API path builders hand over
Body = Union[Mapping[str, Any], Sequence[Any], bytes, str, None]


@dataclass(frozen=True)
class HeaderEntry:
    """A single HTTP header. Identity is by key."""

    key: str
    value: str

    def get_key(self) -> str:
        return self.key

    def get_value(self) -> str:
        return self.value


class ResponseType(str, Enum):
    """How a response payload is handed back to the caller."""

    JSON = "json"
    BINARY = "binary"


HeaderDict = Dict[str, str]
