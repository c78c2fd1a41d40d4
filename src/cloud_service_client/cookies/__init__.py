"""
Cookie session bridge.

Components:
- CookieRecord: One cookie plus the domain/path/expiry matching rules
- CookieStore: Lock-guarded jar keyed by domain and path
- parsing: Cookie / Set-Cookie header parsing, including folded Set-Cookie values
"""

from cloud_service_client.cookies.parsing import (
    parse_cookie_header,
    parse_set_cookie,
    split_set_cookie_header,
)
from cloud_service_client.cookies.record import CookieRecord
from cloud_service_client.cookies.store import CookieStore

__all__ = [
    "CookieRecord",
    "CookieStore",
    "parse_cookie_header",
    "parse_set_cookie",
    "split_set_cookie_header",
]
