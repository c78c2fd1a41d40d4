"""
Unit tests for Cookie / Set-Cookie parsing.
"""

from datetime import datetime, timedelta, timezone

import pytest

from cloud_service_client.cookies.parsing import (
    parse_cookie_date,
    parse_cookie_header,
    parse_set_cookie,
    split_set_cookie_header,
)
from cloud_service_client.models.enums import SameSite

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# split_set_cookie_header Tests
# ============================================================================


def test_split_folded_values():
    """Test a comma inside an attribute does not start a new cookie."""
    assert split_set_cookie_header("cookie=value; Expires=Wed, 12345, cookie2=value2") == [
        "cookie=value; Expires=Wed, 12345",
        "cookie2=value2",
    ]


def test_split_real_expires_date():
    """Test an RFC 1123 Expires date survives folding."""
    header = "id=1; Expires=Wed, 21 Oct 2015 07:28:00 GMT; Path=/, theme=dark"

    assert split_set_cookie_header(header) == [
        "id=1; Expires=Wed, 21 Oct 2015 07:28:00 GMT; Path=/",
        "theme=dark",
    ]


@pytest.mark.parametrize("header", ["", None])
def test_split_empty(header):
    """Test empty input yields no cookies."""
    assert split_set_cookie_header(header) == []


def test_split_single_value():
    """Test an unfolded value is returned unchanged."""
    assert split_set_cookie_header("a=1; Path=/") == ["a=1; Path=/"]


# ============================================================================
# parse_cookie_header Tests
# ============================================================================


def test_parse_cookie_header_pairs():
    """Test pairs keep their order and malformed chunks are skipped."""
    assert parse_cookie_header("a=1; b=2;  ; =x; c; d=") == [("a", "1"), ("b", "2"), ("d", "")]


def test_parse_cookie_header_keeps_equals_in_value():
    """Test only the first '=' separates name and value."""
    assert parse_cookie_header("token=abc==") == [("token", "abc==")]


# ============================================================================
# parse_cookie_date Tests
# ============================================================================


def test_parse_cookie_date_rfc1123():
    """Test the standard Expires format."""
    assert parse_cookie_date("Wed, 21 Oct 2015 07:28:00 GMT") == datetime(
        2015, 10, 21, 7, 28, tzinfo=timezone.utc
    )


def test_parse_cookie_date_iso():
    """Test ISO 8601 dates are accepted and normalized to UTC."""
    assert parse_cookie_date("2030-01-01T02:00:00+02:00") == datetime(2030, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", ["", "tomorrow", "32/13/2020"])
def test_parse_cookie_date_invalid(value):
    """Test unparseable dates are ignored."""
    assert parse_cookie_date(value) is None


# ============================================================================
# parse_set_cookie Tests
# ============================================================================


def test_parse_set_cookie_attributes():
    """Test every supported attribute is captured."""
    record = parse_set_cookie(
        "session=abc123; Domain=.Example.COM; Path=/api; Secure; HttpOnly; SameSite=Lax",
        NOW,
    )

    assert record.key == "session"
    assert record.value == "abc123"
    assert record.domain == "example.com"
    assert record.host_only is False
    assert record.path == "/api"
    assert record.secure is True
    assert record.http_only is True
    assert record.same_site is SameSite.LAX
    assert record.expires_at is None


def test_parse_set_cookie_defaults():
    """Test a bare cookie is a host-only session cookie with unresolved scope."""
    record = parse_set_cookie("a=1", NOW)

    assert record.domain is None
    assert record.path is None
    assert record.host_only is True
    assert record.secure is False
    assert record.same_site is SameSite.UNSET


def test_parse_set_cookie_max_age_wins_over_expires():
    """Test Max-Age takes precedence regardless of attribute order."""
    record = parse_set_cookie("a=1; Max-Age=60; Expires=Wed, 21 Oct 2015 07:28:00 GMT", NOW)

    assert record.expires_at == NOW + timedelta(seconds=60)


def test_parse_set_cookie_non_positive_max_age_is_dead():
    """Test Max-Age=0 produces an already expired record."""
    record = parse_set_cookie("a=1; Max-Age=0", NOW)

    assert record.is_expired(NOW)


def test_parse_set_cookie_invalid_max_age_ignored():
    """Test a non-numeric Max-Age falls back to Expires."""
    record = parse_set_cookie("a=1; Max-Age=soon; Expires=Wed, 21 Oct 2015 07:28:00 GMT", NOW)

    assert record.expires_at == datetime(2015, 10, 21, 7, 28, tzinfo=timezone.utc)


def test_parse_set_cookie_relative_path_ignored():
    """Test a Path not starting with '/' is left for the store to default."""
    assert parse_set_cookie("a=1; Path=relative", NOW).path is None


@pytest.mark.parametrize("header", ["novalue", "=value", ""])
def test_parse_set_cookie_rejects_missing_name(header):
    """Test values without a name=value pair are ignored."""
    assert parse_set_cookie(header, NOW) is None
