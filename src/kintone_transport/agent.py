"""
Transport agents for kintone connections.

A connection has exactly one active agent. Agents are plain values built by
the constructor functions below; the last one configured replaces the
previous one.

- NoAgent: direct connection, default TLS settings
- ClientCertAgent: direct connection presenting a PKCS#12 client certificate
- ProxyAgent(PLAIN): HTTPS tunneled through an HTTP proxy (CONNECT)
- ProxyAgent(SECURE): HTTPS tunneled through a TLS connection to the proxy
"""
import logging
import ssl
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

import httpx

from .config import (
    ProxySettings,
    create_ssl_context,
    is_ssl_verify_disabled_by_env,
    mask_sensitive,
)

logger = logging.getLogger("kintone_transport.agent")


class TlsMode(str, Enum):
    """Connection to the proxy itself."""

    PLAIN = "http"
    SECURE = "https"


@dataclass(frozen=True)
class NoAgent:
    """No agent configured."""


@dataclass(frozen=True)
class ClientCertAgent:
    """Direct connection with a client certificate."""

    cert_data: bytes
    passphrase: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"ClientCertAgent(cert_data=<{len(self.cert_data)} bytes>, "
            f"passphrase={mask_sensitive(self.passphrase)!r})"
        )


@dataclass(frozen=True)
class ProxyAgent:
    """Proxy tunnel, optionally presenting a client certificate to the target."""

    host: str
    port: int
    tls_mode: TlsMode = TlsMode.PLAIN
    proxy_auth: Optional[str] = None
    cert_data: Optional[bytes] = None
    passphrase: Optional[str] = None

    @property
    def proxy_url(self) -> str:
        return f"{self.tls_mode.value}://{self.host}:{self.port}"

    def __repr__(self) -> str:
        return (
            f"ProxyAgent(proxy_url={self.proxy_url!r}, "
            f"proxy_auth={mask_proxy_auth(self.proxy_auth)!r}, "
            f"has_cert={self.cert_data is not None})"
        )


TransportAgent = Union[NoAgent, ClientCertAgent, ProxyAgent]


def mask_proxy_auth(proxy_auth: Optional[str]) -> str:
    """Mask the password half of a 'user:pass' proxy credential."""
    if not proxy_auth:
        return "None"
    username, _, _ = proxy_auth.partition(":")
    return f"{username}:***"


def client_cert_agent(
    cert_data: Optional[bytes], passphrase: Optional[str] = None
) -> Optional[ClientCertAgent]:
    """Client-certificate agent, or None when there is no certificate."""
    if not cert_data:
        logger.debug("client_cert_agent: no certificate data, skipping")
        return None
    agent = ClientCertAgent(cert_data=cert_data, passphrase=passphrase)
    logger.debug(f"client_cert_agent: {agent!r}")
    return agent


def _proxy_agent(
    settings: ProxySettings,
    tls_mode: TlsMode,
    cert_data: Optional[bytes],
    passphrase: Optional[str],
) -> ProxyAgent:
    agent = ProxyAgent(
        host=settings.proxy_host,
        port=settings.proxy_port,
        tls_mode=tls_mode,
        proxy_auth=settings.proxy_auth,
        cert_data=cert_data or None,
        passphrase=passphrase if cert_data else None,
    )
    logger.debug(f"_proxy_agent: {agent!r}")
    return agent


def http_proxy_agent(
    settings: ProxySettings,
    cert_data: Optional[bytes] = None,
    passphrase: Optional[str] = None,
) -> ProxyAgent:
    """HTTPS over a plain HTTP proxy connection."""
    return _proxy_agent(settings, TlsMode.PLAIN, cert_data, passphrase)


def https_proxy_agent(
    settings: ProxySettings,
    cert_data: Optional[bytes] = None,
    passphrase: Optional[str] = None,
) -> ProxyAgent:
    """HTTPS over a TLS connection to the proxy."""
    return _proxy_agent(settings, TlsMode.SECURE, cert_data, passphrase)


def build_proxy(agent: ProxyAgent) -> httpx.Proxy:
    """
    httpx.Proxy for a proxy agent.

    The TLS leg to a secure proxy gets its own context; the client
    certificate is only presented to the kintone host.
    """
    auth = None
    if agent.proxy_auth:
        username, _, password = agent.proxy_auth.partition(":")
        auth = (username, password)

    if agent.tls_mode is TlsMode.SECURE:
        return httpx.Proxy(agent.proxy_url, auth=auth, ssl_context=create_ssl_context())
    return httpx.Proxy(agent.proxy_url, auth=auth)


def httpx_client_kwargs(
    agent: TransportAgent,
    ssl_context: Optional[ssl.SSLContext],
) -> Dict[str, Any]:
    """
    Build kwargs for httpx.AsyncClient from the active agent.

    Args:
        agent: Active transport agent.
        ssl_context: Context produced by the TLS preflight, or None for NoAgent.

    Returns:
        Dictionary of kwargs for the httpx client constructor.
    """
    kwargs: Dict[str, Any] = {"trust_env": False}

    if ssl_context is not None:
        kwargs["verify"] = ssl_context
    else:
        kwargs["verify"] = not is_ssl_verify_disabled_by_env()

    if isinstance(agent, ProxyAgent):
        kwargs["proxy"] = build_proxy(agent)

    logger.debug(
        f"httpx_client_kwargs: agent={agent!r}, "
        f"verify={'ssl_context' if ssl_context is not None else kwargs['verify']}, "
        f"proxy={'proxy' in kwargs}"
    )
    return kwargs
