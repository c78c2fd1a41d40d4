"""
Parsing of Cookie and Set-Cookie header values.

Some transports fold several Set-Cookie headers into one comma-joined
string. Cookie attributes may themselves contain ", " (the Expires date),
so ``split_set_cookie_header`` re-assembles folded values heuristically
before each one is parsed on its own.
"""

import re
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import structlog

from cloud_service_client.cookies.record import CookieRecord, utcnow
from cloud_service_client.models.enums import SameSite

logger = structlog.get_logger(__name__)

# A folded segment starts a new cookie only if it begins with "token="
_COOKIE_START = re.compile(r"^[^ ]+=")

_EPOCH = datetime.fromtimestamp(0, timezone.utc)


def split_set_cookie_header(header_value: str) -> list[str]:
    """
    Split a possibly comma-folded Set-Cookie value into individual cookies.

    Examples:
        >>> split_set_cookie_header("cookie=value; Expires=Wed, 12345, cookie2=value2")
        ['cookie=value; Expires=Wed, 12345', 'cookie2=value2']

    Note:
        Assumes cookie structure; do not use it on other headers.
    """
    values: list[str] = []
    current = ""
    for segment in (header_value or "").split(", "):
        if not segment:
            continue
        if _COOKIE_START.match(segment):
            if current:
                values.append(current)
            current = segment
        elif current:
            current += f", {segment}"
        else:
            current = segment
    if current:
        values.append(current)
    return values


def parse_cookie_header(header_value: str) -> list[tuple[str, str]]:
    """
    Parse a Cookie request header into ``(name, value)`` pairs, in order.

    Pairs without a name are skipped.
    """
    pairs: list[tuple[str, str]] = []
    for chunk in str(header_value or "").split(";"):
        name, sep, value = chunk.strip().partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        pairs.append((name, value.strip()))
    return pairs


def parse_cookie_date(value: str) -> Optional[datetime]:
    """Parse an Expires attribute (RFC 1123 date, or ISO 8601 as some servers send)."""
    value = value.strip()
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_set_cookie(header_value: str, now: Optional[datetime] = None) -> Optional[CookieRecord]:
    """
    Parse a single Set-Cookie value into an unresolved CookieRecord.

    Domain and Path are left as sent (or None); a CookieStore resolves them
    against the URL the cookie came from. Max-Age wins over Expires, and
    Max-Age <= 0 yields a record that is already dead.

    Returns:
        The parsed record, or None if the value has no ``name=value`` pair
    """
    now = now or utcnow()
    name_value, *attributes = str(header_value).split(";")
    name, sep, value = name_value.partition("=")
    name = name.strip()
    if not sep or not name:
        logger.debug("Ignoring Set-Cookie without name=value", header=header_value)
        return None

    expires_at: Optional[datetime] = None
    max_age_expiry: Optional[datetime] = None
    domain: Optional[str] = None
    path: Optional[str] = None
    secure = False
    http_only = False
    same_site = SameSite.UNSET

    for attribute in attributes:
        attr_name, _, attr_value = attribute.strip().partition("=")
        attr_name = attr_name.strip().lower()
        attr_value = attr_value.strip()

        if attr_name == "expires":
            expires_at = parse_cookie_date(attr_value) or expires_at
        elif attr_name == "max-age":
            try:
                seconds = int(attr_value)
            except ValueError:
                continue
            max_age_expiry = _EPOCH if seconds <= 0 else now + timedelta(seconds=seconds)
        elif attr_name == "domain":
            if attr_value:
                domain = attr_value.lstrip(".").lower()
        elif attr_name == "path":
            path = attr_value if attr_value.startswith("/") else None
        elif attr_name == "secure":
            secure = True
        elif attr_name == "httponly":
            http_only = True
        elif attr_name == "samesite":
            same_site = SameSite.parse(attr_value)

    return CookieRecord(
        key=name,
        value=value.strip(),
        domain=domain,
        path=path,
        expires_at=max_age_expiry if max_age_expiry is not None else expires_at,
        secure=secure,
        http_only=http_only,
        same_site=same_site,
        host_only=domain is None,
        created_at=now,
    )
