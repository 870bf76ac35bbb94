"""
kintone connections.

BaseConnection owns the per-instance configuration (domain, headers,
request options). Connection adds transport agents and executes requests:

- request(): JSON exchange; transport errors propagate unchanged
- request_file(): binary transfer; every failure is a KintoneAPIException
- upload(): multipart upload to the file endpoint
"""
import dataclasses
import logging
import ssl
from typing import Any, Mapping, Optional, Union

import httpx

from . import constants
from .agent import (
    TransportAgent,
    client_cert_agent,
    http_proxy_agent,
    https_proxy_agent,
    httpx_client_kwargs,
)
from .auth import Auth
from .config import ProxySettings, TimeoutConfig, normalize_timeout
from .errors import KintoneAPIException
from .headers import HeaderConfig
from .multipart import encode_file_body
from .printing import print_request, print_response
from .request_builder import RequestDescriptor, RequestOptions, assemble_request
from .tls import preflight
from .types import Body, HeaderEntry, ResponseType

logger = logging.getLogger("kintone_transport.connection")

_OPTION_FIELDS = {option.name for option in dataclasses.fields(RequestOptions)}


class BaseConnection:
    """Domain, headers and request options for one kintone environment."""

    def __init__(
        self,
        domain: str,
        auth: Auth,
        guest_space_id: Optional[int] = None,
        timeout: Union[TimeoutConfig, float, None] = None,
    ):
        if not domain:
            raise ValueError("domain is required")
        if auth is None:
            raise ValueError("auth is required")

        self.domain = domain.split("://", 1)[-1].rstrip("/")
        self.auth = auth
        self.headers = HeaderConfig(HeaderEntry(constants.USER_AGENT, constants.DEFAULT_USER_AGENT))
        self.options = RequestOptions(
            domain=self.domain,
            headers=self.headers,
            timeout=normalize_timeout(timeout),
        )
        self.user_agent: Optional[str] = None
        self.set_guest_space_id(guest_space_id)

    def set_guest_space_id(self, guest_space_id: Optional[int]) -> "BaseConnection":
        if guest_space_id is not None and int(guest_space_id) <= 0:
            raise ValueError(f"Invalid guest_space_id: {guest_space_id}")
        self.options.guest_space_id = int(guest_space_id) if guest_space_id is not None else None
        return self

    def set_header(self, key: str, value: Any) -> "BaseConnection":
        """Add a header to the next request. Cleared once that request finishes."""
        self.headers.add(key, value)
        return self

    def refresh_header(self) -> "BaseConnection":
        """Restore the base headers, dropping anything added with set_header."""
        self.headers.reset()
        return self

    def add_request_option(self, key: str, value: Any) -> "BaseConnection":
        """Set one of the RequestOptions fields."""
        if key not in _OPTION_FIELDS:
            raise ValueError(f"Unknown request option: {key}. Must be one of: {sorted(_OPTION_FIELDS)}")
        setattr(self.options, key, value)
        logger.debug(f"add_request_option: {key}={value!r}")
        return self

    def get_uri(self, api_name: str) -> str:
        """Absolute URL for a logical API name (e.g. FILE) or a raw API path."""
        api_path = constants.API_PATHS.get(str(api_name).upper(), api_name).strip("/")
        if self.options.guest_space_id:
            path = constants.BASE_GUEST_URL.format(
                guest_space_id=self.options.guest_space_id, api_path=api_path
            )
        else:
            path = constants.BASE_URL.format(api_path=api_path)
        return f"{constants.SCHEME}://{self.domain}{path}"


class Connection(BaseConnection):
    """Executes kintone REST requests over httpx."""

    def __init__(
        self,
        domain: str,
        auth: Auth,
        guest_space_id: Optional[int] = None,
        timeout: Union[TimeoutConfig, float, None] = None,
        httpx_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(domain, auth, guest_space_id=guest_space_id, timeout=timeout)
        self._client = httpx_client
        self._owns_client = httpx_client is None
        self._client_agent: Optional[TransportAgent] = None
        self.set_client_cert()

    @property
    def agent(self) -> TransportAgent:
        return self.options.agent

    # ------------------------------------------------------------------
    # Transport agents
    # ------------------------------------------------------------------

    def set_client_cert(self) -> "Connection":
        """Present the Auth's client certificate on direct connections."""
        agent = client_cert_agent(self.auth.get_client_cert_data(), self.auth.get_password_cert())
        if agent is not None:
            self.add_request_option("agent", agent)
        return self

    def set_proxy(
        self,
        proxy_host: str,
        proxy_port: Union[int, str],
        proxy_username: Optional[str] = None,
        proxy_password: Optional[str] = None,
    ) -> "Connection":
        """Tunnel requests through an HTTP proxy."""
        settings = ProxySettings(
            proxy_host=proxy_host,
            proxy_port=proxy_port,
            proxy_username=proxy_username,
            proxy_password=proxy_password,
        )
        agent = http_proxy_agent(settings, self.auth.get_client_cert_data(), self.auth.get_password_cert())
        self.add_request_option("agent", agent)
        return self

    def set_https_proxy(
        self,
        proxy_host: str,
        proxy_port: Union[int, str],
        proxy_username: Optional[str] = None,
        proxy_password: Optional[str] = None,
    ) -> "Connection":
        """Tunnel requests through a proxy reached over TLS."""
        settings = ProxySettings(
            proxy_host=proxy_host,
            proxy_port=proxy_port,
            proxy_username=proxy_username,
            proxy_password=proxy_password,
        )
        agent = https_proxy_agent(settings, self.auth.get_client_cert_data(), self.auth.get_password_cert())
        self.add_request_option("agent", agent)
        return self

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def build_request(
        self,
        method: str,
        api_name: str,
        body: Optional[Body] = None,
        headers: Optional[Mapping[str, str]] = None,
        response_type: ResponseType = ResponseType.JSON,
    ) -> RequestDescriptor:
        """Assemble a descriptor from a copy of the current options."""
        options = self.options.copy()
        descriptor = assemble_request(
            options,
            method,
            self.get_uri(api_name),
            self.auth.create_header_credentials(),
            body=body,
            headers=headers,
            response_type=response_type,
        )
        self.user_agent = descriptor.user_agent
        return descriptor

    async def request(
        self,
        method: str,
        api_name: str,
        body: Optional[Body] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """
        Send a JSON request and return the decoded payload.

        Raises:
            httpx.HTTPStatusError: non-2xx response
            httpx.HTTPError: transport failure
            ValueError / ssl.SSLError: unusable client certificate
        """
        try:
            descriptor = self.build_request(method, api_name, body, headers, ResponseType.JSON)

            check = preflight(descriptor.agent)
            if not check.ok:
                raise check.error

            response = await self._dispatch(descriptor, check.ssl_context)
            return self._decode(response)
        finally:
            self.refresh_header()

    async def request_file(
        self,
        method: str,
        api_name: str,
        body: Optional[Body] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> bytes:
        """
        Send a file request and return the raw response bytes.

        Raises:
            KintoneAPIException: any failure, wrapping the original error
        """
        try:
            descriptor = self.build_request(method, api_name, body, headers, ResponseType.BINARY)

            check = preflight(descriptor.agent)
            if not check.ok:
                raise check.error

            response = await self._dispatch(descriptor, check.ssl_context)
            return response.content
        except Exception as e:
            raise KintoneAPIException(e) from e
        finally:
            self.refresh_header()

    async def upload(self, file_name: str, file_content: Union[bytes, str]) -> bytes:
        """Upload a file to the kintone file endpoint."""
        body = encode_file_body(file_name, file_content)
        return await self.request_file(
            "POST",
            "FILE",
            body.content,
            headers={constants.CONTENT_TYPE: body.content_type},
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get_client(
        self, agent: TransportAgent, ssl_context: Optional[ssl.SSLContext]
    ) -> httpx.AsyncClient:
        if not self._owns_client and self._client is not None:
            return self._client

        if self._client is not None and self._client_agent == agent:
            return self._client

        previous = self._client
        timeout = self.options.timeout
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout.connect,
                read=timeout.read,
                write=timeout.write,
                pool=timeout.connect,
            ),
            **httpx_client_kwargs(agent, ssl_context),
        )
        self._client_agent = agent
        logger.debug(f"_get_client: created httpx.AsyncClient for {agent!r}")

        if previous is not None:
            await previous.aclose()
        return self._client

    async def _dispatch(
        self, descriptor: RequestDescriptor, ssl_context: Optional[ssl.SSLContext]
    ) -> httpx.Response:
        client = await self._get_client(descriptor.agent, ssl_context)
        url = descriptor.full_url

        kwargs: dict = {}
        if isinstance(descriptor.data, (bytes, bytearray, str)):
            kwargs["content"] = descriptor.data
        elif descriptor.data is not None:
            kwargs["json"] = descriptor.data

        debug = logger.isEnabledFor(logging.DEBUG)
        if debug:
            print_request(descriptor.method, url, descriptor.headers, descriptor.data)

        response = await client.request(
            descriptor.method,
            url,
            headers=descriptor.headers,
            **kwargs,
        )
        logger.debug(f"_dispatch: {descriptor.method} {url} -> {response.status_code}")

        if debug:
            shown = (
                response.content
                if descriptor.response_type is ResponseType.BINARY
                else self._decode(response)
            )
            print_response(url, response.status_code, response.reason_phrase, shown)

        response.raise_for_status()
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the httpx client if this connection created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
            self._client_agent = None

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
