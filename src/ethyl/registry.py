"""
Ordered, append-only store of named RPC endpoints.

Registration order is dispatch priority. Readers take lock-free snapshots; the
whole tuple is swapped under a lock on every add, so a concurrent reader sees
an endpoint either completely or not at all.
"""

import logging
import threading
from typing import Any, Tuple
from urllib.parse import urlsplit

from .errors import DuplicateNameError, InvalidEndpointError
from .models import Endpoint

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")


def validate_url(url: Any) -> str:
    if not isinstance(url, str) or not url.strip():
        raise InvalidEndpointError(url, "url must be a non-empty string")

    url = url.strip()
    parts = urlsplit(url)
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidEndpointError(url, f"scheme must be one of {', '.join(ALLOWED_SCHEMES)}")
    if not parts.hostname:
        raise InvalidEndpointError(url, "missing host")
    try:
        parts.port
    except ValueError:
        raise InvalidEndpointError(url, "invalid port") from None
    return url


class EndpointRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._endpoints: Tuple[Endpoint, ...] = ()

    def add(self, name: str, url: str) -> Endpoint:
        if not isinstance(name, str) or not name.strip():
            raise InvalidEndpointError(name, "name must be a non-empty string")
        url = validate_url(url)

        with self._lock:
            if any(endpoint.name == name for endpoint in self._endpoints):
                raise DuplicateNameError(name)
            endpoint = Endpoint(name=name, url=url)
            priority = len(self._endpoints)
            self._endpoints = self._endpoints + (endpoint,)

        logger.info(f"[registry] Added endpoint {name!r} -> {url} (priority={priority})")
        return endpoint

    def list(self) -> Tuple[Endpoint, ...]:
        return self._endpoints

    def __contains__(self, name: object) -> bool:
        return any(endpoint.name == name for endpoint in self._endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)
