"""
Request assembly for kintone_transport.

Turns (method, url, body) plus the connection's options into a fresh
RequestDescriptor. GET bodies become the query string; every other method
sends the body as the payload.
"""
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import quote

from .agent import NoAgent, TransportAgent
from .config import TimeoutConfig, DEFAULT_TIMEOUT
from .constants import USER_AGENT
from .headers import HeaderConfig, merge_headers
from .types import Body, HeaderDict, HeaderEntry, ResponseType

logger = logging.getLogger("kintone_transport.request_builder")

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "!*'()"


@dataclass
class RequestOptions:
    """Per-connection request configuration."""

    domain: str
    guest_space_id: Optional[int] = None
    headers: HeaderConfig = field(default_factory=HeaderConfig)
    agent: TransportAgent = field(default_factory=NoAgent)
    timeout: TimeoutConfig = field(default_factory=lambda: DEFAULT_TIMEOUT)

    def copy(self) -> "RequestOptions":
        """Independent copy; agents are immutable and shared."""
        return RequestOptions(
            domain=self.domain,
            guest_space_id=self.guest_space_id,
            headers=copy.deepcopy(self.headers),
            agent=self.agent,
            timeout=self.timeout,
        )


@dataclass
class RequestDescriptor:
    """Everything needed to dispatch one request."""

    method: str
    url: str
    headers: HeaderDict
    params: Optional[Body] = None
    data: Optional[Body] = None
    response_type: ResponseType = ResponseType.JSON
    agent: TransportAgent = field(default_factory=NoAgent)
    user_agent: Optional[str] = None

    @property
    def full_url(self) -> str:
        """URL with the serialized query string appended (GET only)."""
        query = serialize_params(self.params)
        if not query:
            return self.url
        separator = "&" if "?" in self.url else "?"
        return f"{self.url}{separator}{query}"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flatten(value: Any, prefix: str, pairs: List[Tuple[str, str]]) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            _flatten(item, f"{prefix}[{key}]" if prefix else str(key), pairs)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(item, f"{prefix}[{index}]" if prefix else str(index), pairs)
    else:
        pairs.append((prefix, _format_value(value)))


def serialize_params(params: Optional[Body]) -> str:
    """
    Serialize query parameters the way the kintone REST API reads them.

    Order-preserving. Nested mappings become ``a[b]=v``, sequences become
    ``a[0]=v``, booleans ``true``/``false``; None leaves are skipped.

    Example:
        >>> serialize_params({"app": 1, "fields": ["$id", "name"]})
        'app=1&fields%5B0%5D=%24id&fields%5B1%5D=name'
    """
    if params is None:
        return ""
    if isinstance(params, (str, bytes)):
        return params.decode("utf-8") if isinstance(params, bytes) else params

    pairs: List[Tuple[str, str]] = []
    _flatten(params, "", pairs)
    return "&".join(
        f"{quote(key, safe=_URI_COMPONENT_SAFE)}={quote(value, safe=_URI_COMPONENT_SAFE)}"
        for key, value in pairs
    )


def assemble_request(
    options: RequestOptions,
    method: str,
    url: str,
    credential_headers: Iterable[HeaderEntry],
    body: Optional[Body] = None,
    headers: Optional[Mapping[str, str]] = None,
    response_type: ResponseType = ResponseType.JSON,
) -> RequestDescriptor:
    """
    Build a request descriptor.

    Args:
        options: Connection options; only read, never mutated.
        method: HTTP method, any case.
        url: Absolute URL of the API.
        credential_headers: Headers from the Auth.
        body: Query parameters for GET, payload otherwise.
        headers: Headers for this call only, applied after the connection's.
        response_type: How the response payload should be returned.

    Returns:
        A new RequestDescriptor.
    """
    normalized_method = str(method).upper()

    caller_headers = list(options.headers)
    if headers:
        caller_headers.extend(HeaderEntry(key, value) for key, value in headers.items())
    merged = merge_headers(credential_headers, caller_headers, accumulate_key=USER_AGENT)

    descriptor = RequestDescriptor(
        method=normalized_method,
        url=url,
        headers=merged.headers,
        response_type=response_type,
        agent=options.agent,
        user_agent=merged.user_agent,
    )
    if normalized_method == "GET":
        descriptor.params = body
    else:
        descriptor.data = body

    logger.debug(
        f"assemble_request: method={descriptor.method}, url={descriptor.url}, "
        f"params={descriptor.params is not None}, data={descriptor.data is not None}, "
        f"response_type={descriptor.response_type.value}"
    )
    return descriptor
