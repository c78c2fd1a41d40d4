"""
Cookie record and the matching rules applied to it.

Matching follows the parts of RFC 6265 that matter server-side: domain
suffix matching, path prefix matching, expiry and the Secure flag.
HttpOnly and SameSite are kept on the record but never enforced, since no
browser security context exists here.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional

from cloud_service_client.models.enums import SameSite


def utcnow() -> datetime:
    """Timezone-aware current time, patched in tests that need a fixed clock."""
    return datetime.now(timezone.utc)


def default_path(request_path: str) -> str:
    """Directory of a request path, used when a cookie has no usable Path."""
    if not request_path or not request_path.startswith("/"):
        return "/"
    if request_path.count("/") == 1:
        return "/"
    return request_path[: request_path.rindex("/")]


def domain_matches(host: str, domain: str) -> bool:
    """True if ``host`` equals ``domain`` or is a subdomain of it."""
    host = host.lower()
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)


def path_matches(request_path: str, cookie_path: str) -> bool:
    """True if ``cookie_path`` is a prefix of ``request_path`` on a segment boundary."""
    request_path = request_path or "/"
    if request_path == cookie_path:
        return True
    if not request_path.startswith(cookie_path):
        return False
    return cookie_path.endswith("/") or request_path[len(cookie_path)] == "/"


@dataclass(frozen=True)
class CookieRecord:
    """
    One cookie as stored in a CookieStore.

    A record with ``expires_at`` in the past is dead: stores drop it on
    write and evict it on read. ``expires_at=None`` marks a session cookie,
    which lives as long as the store holding it.

    Attributes:
        key: Cookie name
        value: Cookie value, verbatim
        domain: Normalized domain (lower-case, no leading dot); None until resolved against a URL
        path: Path scope; None until resolved against a URL
        expires_at: Absolute expiry (aware datetime) or None for session cookies
        secure: Only sent over https
        http_only: Stored, not enforced
        same_site: Stored, not enforced
        host_only: True when the cookie had no Domain attribute (exact host match only)
    """

    key: str
    value: str
    domain: Optional[str] = None
    path: Optional[str] = None
    expires_at: Optional[datetime] = None
    secure: bool = False
    http_only: bool = False
    same_site: SameSite = SameSite.UNSET
    host_only: bool = True
    created_at: datetime = field(default_factory=utcnow, compare=False)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Dead once the expiry is in the past. Session cookies never expire here."""
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or utcnow())

    def matches(self, scheme: str, host: str, path: str, now: Optional[datetime] = None) -> bool:
        """Whether the cookie should be attached to a request for the given URL parts."""
        if self.is_expired(now):
            return False
        if self.secure and scheme.lower() != "https":
            return False
        if self.domain is None or self.path is None:
            return False
        if self.host_only:
            if host.lower() != self.domain:
                return False
        elif not domain_matches(host, self.domain):
            return False
        return path_matches(path, self.path)

    def to_pair(self) -> str:
        """``key=value`` as sent in a Cookie request header."""
        return f"{self.key}={self.value}"

    def __str__(self) -> str:
        parts = [self.to_pair()]
        if self.expires_at is not None:
            parts.append(f"Expires={format_datetime(self.expires_at, usegmt=True)}")
        if self.domain and not self.host_only:
            parts.append(f"Domain={self.domain}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.secure:
            parts.append("Secure")
        if self.http_only:
            parts.append("HttpOnly")
        if self.same_site is not SameSite.UNSET:
            parts.append(f"SameSite={self.same_site.value.capitalize()}")
        return "; ".join(parts)
