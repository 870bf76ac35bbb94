"""
Credentials for kintone requests.

Auth produces the credential headers merged into every request and holds
the optional PKCS#12 client certificate used by the transport agent.
"""
import base64
import logging
from pathlib import Path
from typing import List, Optional, Union

from . import constants
from .config import mask_sensitive
from .types import HeaderEntry

logger = logging.getLogger("kintone_transport.auth")


def _base64_encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("utf-8")


class Auth:
    """Authentication settings for a kintone domain."""

    def __init__(self) -> None:
        self._username: Optional[str] = None
        self._password: Optional[str] = None
        self._api_tokens: List[str] = []
        self._basic_username: Optional[str] = None
        self._basic_password: Optional[str] = None
        self._cert_data: Optional[bytes] = None
        self._cert_password: Optional[str] = None

    def set_password_auth(self, username: str, password: str) -> "Auth":
        if not username or not password:
            raise ValueError("password auth requires username and password")
        self._username = username
        self._password = password
        return self

    def set_api_token(self, api_token: Union[str, List[str]]) -> "Auth":
        """Add one or more API tokens. Tokens for several apps are sent comma-joined."""
        tokens = [api_token] if isinstance(api_token, str) else list(api_token)
        for token in tokens:
            if not token:
                raise ValueError("api_token must not be empty")
            if token not in self._api_tokens:
                self._api_tokens.append(token)
        return self

    def set_basic_auth(self, username: str, password: str) -> "Auth":
        if not username or not password:
            raise ValueError("basic auth requires username and password")
        self._basic_username = username
        self._basic_password = password
        return self

    def set_client_cert(self, cert_data: bytes, password: Optional[str] = None) -> "Auth":
        """Set a PKCS#12 (.pfx/.p12) client certificate from bytes."""
        self._cert_data = bytes(cert_data)
        self._cert_password = password
        logger.debug(
            f"set_client_cert: {len(self._cert_data)} bytes, "
            f"password={mask_sensitive(password)}"
        )
        return self

    def set_client_cert_by_path(
        self, file_path: Union[str, Path], password: Optional[str] = None
    ) -> "Auth":
        """Set a PKCS#12 client certificate from a file."""
        return self.set_client_cert(Path(file_path).read_bytes(), password)

    def get_client_cert_data(self) -> Optional[bytes]:
        return self._cert_data

    def get_password_cert(self) -> Optional[str]:
        return self._cert_password

    def create_header_credentials(self) -> List[HeaderEntry]:
        """Build credential headers in a stable order."""
        headers: List[HeaderEntry] = []

        if self._basic_username and self._basic_password:
            credentials = _base64_encode(f"{self._basic_username}:{self._basic_password}")
            headers.append(HeaderEntry(constants.AUTHORIZATION, f"Basic {credentials}"))

        # Password auth wins over API tokens; kintone rejects requests carrying both
        if self._username and self._password:
            credentials = _base64_encode(f"{self._username}:{self._password}")
            headers.append(HeaderEntry(constants.HEADER_PASSWORD_AUTH, credentials))
        elif self._api_tokens:
            headers.append(HeaderEntry(constants.HEADER_API_TOKEN, ",".join(self._api_tokens)))

        logger.debug(
            f"create_header_credentials: keys={[header.key for header in headers]}"
        )
        return headers

    def __repr__(self) -> str:
        return (
            f"Auth(username={self._username!r}, "
            f"password={mask_sensitive(self._password)!r}, "
            f"api_tokens={len(self._api_tokens)}, "
            f"basic_username={self._basic_username!r}, "
            f"has_client_cert={self._cert_data is not None})"
        )
