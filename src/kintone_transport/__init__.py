"""
HTTP transport for kintone REST clients.

Builds authenticated requests, tunnels them through HTTP/HTTPS proxies,
presents PKCS#12 client certificates, and normalizes JSON and file
responses. Built on httpx.
"""
from .types import HeaderEntry, HttpMethod, ResponseType
from .config import ProxySettings, TimeoutConfig, is_ssl_verify_disabled_by_env
from .errors import KintoneAPIException, KintoneErrorResponse
from .auth import Auth
from .headers import HeaderConfig, MergedHeaders, merge_headers
from .agent import (
    ClientCertAgent,
    NoAgent,
    ProxyAgent,
    TlsMode,
    TransportAgent,
    client_cert_agent,
    http_proxy_agent,
    https_proxy_agent,
)
from .tls import PreflightResult, build_ssl_context, preflight
from .request_builder import (
    RequestDescriptor,
    RequestOptions,
    assemble_request,
    serialize_params,
)
from .multipart import MultipartBody, encode_file_body
from .connection import BaseConnection, Connection

__all__ = [
    # Types
    "HeaderEntry",
    "HttpMethod",
    "ResponseType",
    # Config
    "ProxySettings",
    "TimeoutConfig",
    "is_ssl_verify_disabled_by_env",
    # Errors
    "KintoneAPIException",
    "KintoneErrorResponse",
    # Auth
    "Auth",
    # Headers
    "HeaderConfig",
    "MergedHeaders",
    "merge_headers",
    # Agents
    "ClientCertAgent",
    "NoAgent",
    "ProxyAgent",
    "TlsMode",
    "TransportAgent",
    "client_cert_agent",
    "http_proxy_agent",
    "https_proxy_agent",
    # TLS
    "PreflightResult",
    "build_ssl_context",
    "preflight",
    # Requests
    "RequestDescriptor",
    "RequestOptions",
    "assemble_request",
    "serialize_params",
    "MultipartBody",
    "encode_file_body",
    # Connections
    "BaseConnection",
    "Connection",
]

__version__ = "0.1.0"
