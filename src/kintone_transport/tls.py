"""
TLS context construction and the pre-dispatch TLS check.

A malformed certificate or a wrong passphrase is caught here, before the
request reaches httpx.
"""
import logging
import os
import secrets
import ssl
import tempfile
from dataclasses import dataclass
from typing import Optional, Tuple

from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    NoEncryption,
    PrivateFormat,
    pkcs12,
)

from .agent import ClientCertAgent, NoAgent, ProxyAgent, TransportAgent
from .config import create_ssl_context, mask_sensitive

logger = logging.getLogger("kintone_transport.tls")


@dataclass
class PreflightResult:
    """
    Outcome of the TLS check for one request.

    Attributes:
        ssl_context: Context built from the agent (None for NoAgent or on failure)
        error: The underlying exception when the context could not be built
    """

    ssl_context: Optional[ssl.SSLContext] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_pkcs12(
    cert_data: bytes,
    passphrase: Optional[str],
    key_password: Optional[bytes] = None,
) -> Tuple[bytes, bytes]:
    """
    Decode a PKCS#12 bundle.

    Returns:
        (certificate chain PEM, private key PEM). The key is encrypted with
        key_password when one is given.

    Raises:
        ValueError: bad bytes, wrong passphrase, or no key/certificate inside.
    """
    password = passphrase.encode("utf-8") if passphrase else None
    key, cert, additional_certs = pkcs12.load_key_and_certificates(cert_data, password)
    if key is None or cert is None:
        raise ValueError("PKCS#12 bundle must contain a private key and a certificate")

    chain_pem = cert.public_bytes(Encoding.PEM) + b"".join(
        extra.public_bytes(Encoding.PEM) for extra in additional_certs
    )
    encryption = BestAvailableEncryption(key_password) if key_password else NoEncryption()
    key_pem = key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, encryption)
    return chain_pem, key_pem


def _load_client_cert(context: ssl.SSLContext, cert_data: bytes, passphrase: Optional[str]) -> None:
    key_password = secrets.token_urlsafe(32).encode("ascii")
    chain_pem, key_pem = load_pkcs12(cert_data, passphrase, key_password)

    # load_cert_chain only reads from disk; the key is never written in the clear
    handle = tempfile.NamedTemporaryFile(suffix=".pem", delete=False)
    try:
        with handle:
            handle.write(key_pem)
            handle.write(chain_pem)
        context.load_cert_chain(certfile=handle.name, password=key_password)
    finally:
        os.unlink(handle.name)


def build_ssl_context(agent: TransportAgent) -> Optional[ssl.SSLContext]:
    """
    Build the SSL context an agent needs.

    Returns None for NoAgent. Errors from cryptography or ssl propagate
    unchanged.
    """
    if isinstance(agent, NoAgent):
        return None

    context = create_ssl_context()
    if isinstance(agent, (ClientCertAgent, ProxyAgent)) and agent.cert_data:
        logger.debug(
            f"build_ssl_context: loading client certificate "
            f"({len(agent.cert_data)} bytes, passphrase={mask_sensitive(agent.passphrase)})"
        )
        _load_client_cert(context, agent.cert_data, agent.passphrase)
    return context


def preflight(agent: TransportAgent) -> PreflightResult:
    """Check that a secure context can be built for the agent."""
    try:
        ssl_context = build_ssl_context(agent)
    except (ValueError, TypeError, ssl.SSLError, OSError) as e:
        logger.warning(f"preflight: TLS configuration rejected for {agent!r}: {e}")
        return PreflightResult(error=e)

    logger.debug(f"preflight: ok for {agent!r}")
    return PreflightResult(ssl_context=ssl_context)
