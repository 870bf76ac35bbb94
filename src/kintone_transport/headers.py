"""
Header merging for kintone requests.

Credential headers are seeded first, caller headers are laid on top.
Only User-Agent accumulates; every other key is overwritten.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .constants import USER_AGENT
from .types import HeaderDict, HeaderEntry

logger = logging.getLogger("kintone_transport.headers")


@dataclass
class MergedHeaders:
    """Result of a header merge."""

    headers: HeaderDict
    user_agent: Optional[str] = None


def merge_headers(
    credential_headers: Iterable[HeaderEntry],
    caller_headers: Iterable[HeaderEntry],
    accumulate_key: str = USER_AGENT,
) -> MergedHeaders:
    """Merge credential and caller headers into a fresh mapping."""
    result: HeaderDict = {}
    for entry in credential_headers:
        result[entry.key] = str(entry.value)

    for entry in caller_headers:
        if entry.key in result and entry.key == accumulate_key:
            result[entry.key] = f"{result[entry.key]} {entry.value}"
        else:
            result[entry.key] = str(entry.value)

    logger.debug(f"merge_headers: keys={list(result)}")
    return MergedHeaders(headers=result, user_agent=result.get(accumulate_key))


class HeaderConfig:
    """Ordered, persistent caller headers owned by a connection."""

    def __init__(self, *entries: HeaderEntry):
        self._base = list(entries)
        self._headers = list(entries)

    def add(self, key: str, value: object) -> None:
        """Append an entry. Earlier entries for the key are kept; the merge decides."""
        self._headers.append(HeaderEntry(key, str(value)))

    def get(self, key: str) -> Optional[str]:
        """Last value set for a key."""
        for entry in reversed(self._headers):
            if entry.key == key:
                return entry.value
        return None

    def reset(self) -> None:
        """Restore the headers the config was created with."""
        self._headers = list(self._base)

    def __iter__(self):
        return iter(list(self._headers))

    def __len__(self) -> int:
        return len(self._headers)
