"""
Configuration for kintone_transport.

Environment overrides, timeout settings and the validated proxy settings
model used by the transport agent builder.
"""
import logging
import os
import ssl
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("kintone_transport.config")


def mask_sensitive(value: Optional[str], visible_chars: int = 4) -> str:
    """Mask sensitive value for safe logging."""
    if value is None:
        return "<None>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def is_ssl_verify_disabled_by_env() -> bool:
    """
    Check if SSL verification is disabled via environment variables.

    Returns True if any of these are set:
    - NODE_TLS_REJECT_UNAUTHORIZED=0
    - SSL_CERT_VERIFY=0
    """
    node_tls = os.environ.get("NODE_TLS_REJECT_UNAUTHORIZED", "")
    ssl_cert_verify = os.environ.get("SSL_CERT_VERIFY", "")
    result = node_tls == "0" or ssl_cert_verify == "0"
    logger.debug(
        f"is_ssl_verify_disabled_by_env: NODE_TLS_REJECT_UNAUTHORIZED={node_tls!r}, "
        f"SSL_CERT_VERIFY={ssl_cert_verify!r}, result={result}"
    )
    return result


def create_ssl_context() -> ssl.SSLContext:
    """Default client context, honouring the SSL verify environment override."""
    context = ssl.create_default_context()
    if is_ssl_verify_disabled_by_env():
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


@dataclass
class TimeoutConfig:
    """Timeout configuration in seconds."""

    connect: float = 5.0
    read: float = 60.0
    write: float = 60.0


DEFAULT_TIMEOUT = TimeoutConfig()


def normalize_timeout(timeout: Union[TimeoutConfig, float, None]) -> TimeoutConfig:
    """Normalize timeout config."""
    if timeout is None:
        return DEFAULT_TIMEOUT
    if isinstance(timeout, (int, float)):
        return TimeoutConfig(connect=timeout, read=timeout, write=timeout)
    return timeout


class ProxySettings(BaseModel):
    """Proxy parameters accepted by set_proxy / set_https_proxy."""

    proxy_host: str = Field(min_length=1)
    proxy_port: int = Field(gt=0, le=65535)
    proxy_username: Optional[str] = None
    proxy_password: Optional[str] = None

    @field_validator("proxy_host")
    @classmethod
    def strip_scheme(cls, value: str) -> str:
        # host only; the agent decides the scheme
        for prefix in ("http://", "https://"):
            if value.startswith(prefix):
                value = value[len(prefix):]
        return value.rstrip("/")

    @property
    def proxy_auth(self) -> Optional[str]:
        """Combined 'user:pass' credential, only when both parts are set."""
        if self.proxy_username and self.proxy_password:
            return f"{self.proxy_username}:{self.proxy_password}"
        return None

    def __repr__(self) -> str:
        return (
            f"ProxySettings(proxy_host={self.proxy_host!r}, "
            f"proxy_port={self.proxy_port!r}, "
            f"proxy_username={self.proxy_username!r}, "
            f"proxy_password={mask_sensitive(self.proxy_password)!r})"
        )
