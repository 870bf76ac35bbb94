"""
Shared fixtures for kintone_transport tests.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest import mock

import httpx
import pytest
import respx
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import pkcs12
from cryptography.x509.oid import NameOID

from kintone_transport.auth import Auth
from kintone_transport.connection import Connection

DOMAIN = "example.cybozu.com"
CERT_PASSWORD = "cert-pass"


def make_pfx(passphrase: Optional[str] = CERT_PASSWORD) -> bytes:
    """Self-signed client certificate bundled as PKCS#12."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "kintone-client")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    if passphrase:
        encryption = serialization.BestAvailableEncryption(passphrase.encode("utf-8"))
    else:
        encryption = serialization.NoEncryption()
    return pkcs12.serialize_key_and_certificates(b"client", key, cert, None, encryption)


@pytest.fixture(scope="session")
def pfx_data():
    """Valid PKCS#12 bytes protected by CERT_PASSWORD."""
    return make_pfx()


@pytest.fixture
def clean_env():
    with mock.patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def password_auth():
    return Auth().set_password_auth("user", "secret")


@pytest.fixture
def cert_auth(pfx_data):
    return Auth().set_api_token("token-1").set_client_cert(pfx_data, CERT_PASSWORD)


@pytest.fixture
def router():
    """respx router used as the transport of an injected httpx client."""
    return respx.MockRouter(assert_all_called=False)


@pytest.fixture
def make_connection(router):
    """Factory for connections whose traffic goes to the respx router."""

    def _make(auth: Auth, **kwargs) -> Connection:
        transport = httpx.MockTransport(router.async_handler)
        client = httpx.AsyncClient(transport=transport)
        return Connection(domain=DOMAIN, auth=auth, httpx_client=client, **kwargs)

    return _make
