"""
Error types for kintone_transport.

KintoneAPIException is the single error shape surfaced by the binary
(file transfer) path. The JSON path lets transport errors through as-is.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("kintone_transport.errors")


@dataclass
class KintoneErrorResponse:
    """Error body returned by the kintone REST API."""

    id: Optional[str] = None
    code: Optional[str] = None
    message: Optional[str] = None
    errors: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "KintoneErrorResponse":
        """Parse an error body; non-JSON bodies become the message."""
        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return cls(message=response.text or response.reason_phrase)

        if not isinstance(payload, dict):
            return cls(message=str(payload))

        return cls(
            id=payload.get("id"),
            code=payload.get("code"),
            message=payload.get("message"),
            errors=payload.get("errors") or {},
        )


class KintoneAPIException(Exception):
    """Wraps a transport, HTTP status or TLS configuration failure."""

    def __init__(self, error: BaseException):
        self.error = error
        self.http_error_code: Optional[int] = None
        self.error_response: Optional[KintoneErrorResponse] = None

        if isinstance(error, httpx.HTTPStatusError):
            self.http_error_code = error.response.status_code
            self.error_response = KintoneErrorResponse.from_response(error.response)
            message = self.error_response.message or str(error)
        else:
            message = str(error) if any(error.args) else type(error).__name__

        logger.debug(
            f"KintoneAPIException: wrapped {type(error).__name__}, "
            f"http_error_code={self.http_error_code}"
        )
        super().__init__(message)

    def get_http_error_code(self) -> Optional[int]:
        return self.http_error_code

    def get_error_response(self) -> Optional[KintoneErrorResponse]:
        return self.error_response
