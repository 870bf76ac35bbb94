"""
Debug rendering of requests and responses with Rich.

Used by the connection when its logger is enabled for DEBUG.
"""
import json
from typing import Any, Dict, Mapping

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from . import constants

console = Console(stderr=True)

_MASKED_HEADERS = {
    constants.AUTHORIZATION.lower(),
    constants.HEADER_PASSWORD_AUTH.lower(),
    constants.HEADER_API_TOKEN.lower(),
    "proxy-authorization",
}


def mask_auth_header(value: str, visible_chars: int = 15) -> str:
    """Keep the scheme and a prefix, mask the rest."""
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def mask_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Copy of headers with credential values masked."""
    return {
        key: mask_auth_header(value) if key.lower() in _MASKED_HEADERS else value
        for key, value in headers.items()
    }


def format_body(body: Any) -> str:
    """Format body for pretty printing."""
    if body is None:
        return ""
    if isinstance(body, (dict, list)):
        return json.dumps(body, indent=2, ensure_ascii=False)
    if isinstance(body, bytes):
        return f"<binary data: {len(body)} bytes>"
    return str(body)


def print_request(method: str, url: str, headers: Mapping[str, str], body: Any = None) -> None:
    console.print(Panel(f"[bold cyan]{method}[/bold cyan] {url}", title="[bold blue]Request[/bold blue]"))
    console.print("[bold]Headers:[/bold]", mask_headers(headers))
    if isinstance(body, (dict, list)):
        console.print(Panel(Syntax(format_body(body), "json", theme="monokai"), title="[bold]Request Body[/bold]"))
    elif body is not None:
        console.print("[bold]Request Body:[/bold]", format_body(body))


def print_response(url: str, status_code: int, reason_phrase: str, data: Any = None) -> None:
    status_color = "green" if 200 <= status_code < 300 else "red"
    console.print(
        Panel(
            f"[bold {status_color}]{status_code}[/bold {status_color}] {reason_phrase or ''}",
            title=f"[bold blue]Response[/bold blue] ({url})",
        )
    )
    if isinstance(data, (dict, list)):
        console.print(Panel(Syntax(format_body(data), "json", theme="monokai"), title="[bold]Response Body[/bold]"))
    elif data:
        console.print("[bold]Response Body:[/bold]", format_body(data))
