"""
In-memory cookie store keyed by domain and path.

Used both as the short-lived per-request jar and as the client-lifetime jar
shared by every request of one HttpClient. Each read or write holds a lock
for the duration of that single operation only, so concurrent requests see
last-write-wins per cookie without any cross-request coordination.
"""

import threading
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Union

import httpx
import structlog

from cloud_service_client.cookies.parsing import parse_set_cookie
from cloud_service_client.cookies.record import (
    CookieRecord,
    default_path,
    domain_matches,
    utcnow,
)

logger = structlog.get_logger(__name__)


class CookieStore:
    """
    Cookie jar holding the latest record per (domain, path, name).

    Writes are additive: a newer cookie with the same name, domain and path
    replaces the old one, and a cookie that arrives already expired
    (``Max-Age=0``, past ``Expires``) deletes it.
    """

    def __init__(self) -> None:
        self._cookies: dict[tuple[str, str], dict[str, CookieRecord]] = {}
        self._lock = threading.Lock()

    def set_cookie(
        self,
        cookie: Union[str, CookieRecord],
        url: str,
        now: Optional[datetime] = None,
    ) -> Optional[CookieRecord]:
        """
        Store a cookie received from ``url``.

        Args:
            cookie: Raw Set-Cookie value or an unresolved CookieRecord
            url: URL the cookie was received from (scopes Domain/Path defaults)
            now: Clock override

        Returns:
            The stored record, or None if it was rejected or was a deletion
        """
        now = now or utcnow()
        record = parse_set_cookie(cookie, now) if isinstance(cookie, str) else cookie
        if record is None:
            return None

        target = httpx.URL(url)
        host = target.host.lower()
        if not host:
            logger.debug("Rejecting cookie for URL without host", cookie=record.key, url=url)
            return None

        if record.domain is None or record.host_only:
            domain = host
            host_only = True
        elif domain_matches(host, record.domain):
            domain = record.domain
            host_only = False
        else:
            logger.debug(
                "Rejecting cookie for foreign domain",
                cookie=record.key,
                domain=record.domain,
                host=host,
            )
            return None

        record = replace(
            record,
            domain=domain,
            host_only=host_only,
            path=record.path or default_path(target.path),
        )
        key = (record.domain, record.path)

        with self._lock:
            if record.is_expired(now):
                bucket = self._cookies.get(key)
                if bucket is not None:
                    bucket.pop(record.key, None)
                    if not bucket:
                        del self._cookies[key]
                return None
            self._cookies.setdefault(key, {})[record.key] = record
        return record

    def set_cookies(self, cookies: Iterable[Union[str, CookieRecord]], url: str) -> int:
        """Store several cookies for ``url``; returns how many were kept."""
        return sum(1 for cookie in cookies if self.set_cookie(cookie, url) is not None)

    def get_cookies(self, url: str, now: Optional[datetime] = None) -> list[CookieRecord]:
        """
        Cookies applicable to ``url``, longest path first.

        Dead cookies met along the way are evicted.
        """
        now = now or utcnow()
        target = httpx.URL(url)
        scheme, host, path = target.scheme, target.host, target.path or "/"

        matches: list[CookieRecord] = []
        with self._lock:
            for key in list(self._cookies):
                bucket = self._cookies[key]
                for name in list(bucket):
                    record = bucket[name]
                    if record.is_expired(now):
                        del bucket[name]
                        continue
                    if record.matches(scheme, host, path, now):
                        matches.append(record)
                if not bucket:
                    del self._cookies[key]

        matches.sort(key=lambda record: len(record.path or ""), reverse=True)
        return matches

    def get_cookie_string(self, url: str) -> str:
        """Cookie request header value for ``url`` ("" when nothing applies)."""
        return "; ".join(record.to_pair() for record in self.get_cookies(url))

    def remove_all(self) -> None:
        """Drop every cookie."""
        with self._lock:
            self._cookies.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(bucket) for bucket in self._cookies.values())
