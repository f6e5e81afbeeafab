"""Mapping from logical calendar resources to cache keys and upstream URLs.

A resource key is the fully-qualified upstream URL of the resource, so two
requests share a cache entry exactly when they would hit the same origin URL.
"""

import re
from dataclasses import dataclass
from typing import Any

from ..constants import (
    UPSTREAM_EVENT_PATH_PREFIX,
    UPSTREAM_EVENTS_PATH,
    UPSTREAM_GENRES_PATH,
)
from ..domain.exceptions import InvalidKeyError

# ASCII digits only; \d would also accept other Unicode decimal digits.
EVENT_ID_PATTERN = re.compile(r"[0-9]+")


def validate_event_id(raw: Any) -> str:
    """Return ``raw`` unchanged if it is one or more ASCII digits.

    Raises:
        InvalidKeyError: For anything else, including the empty string
    """
    if not isinstance(raw, str) or EVENT_ID_PATTERN.fullmatch(raw) is None:
        raise InvalidKeyError("Invalid event id", key=repr(raw))
    return raw


@dataclass(frozen=True)
class ResourceRequest:
    """Everything the fetcher needs to serve one logical resource."""

    key: str
    upstream_url: str


class CalendarResources:
    """Builds :class:`ResourceRequest` values against one origin base URL."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def _request(self, path: str) -> ResourceRequest:
        url = self.base_url + path
        return ResourceRequest(key=url, upstream_url=url)

    def events(self) -> ResourceRequest:
        """All events, past ones included."""
        return self._request(UPSTREAM_EVENTS_PATH)

    def genres(self) -> ResourceRequest:
        return self._request(UPSTREAM_GENRES_PATH)

    def event(self, event_id: str) -> ResourceRequest:
        """A single event; ``event_id`` is validated before the URL is built."""
        return self._request(UPSTREAM_EVENT_PATH_PREFIX + validate_event_id(event_id))
