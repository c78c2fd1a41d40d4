"""
Redaction and JSON-snapshot helpers for request and response metadata.

Everything the client attaches to a result (request options, retry history,
response summaries) passes through here so that credentials never leave the
process in logs or provenance data.
"""

from collections.abc import Mapping
from typing import Any

REDACTED = "<redacted>"

SENSITIVE_HEADERS = frozenset({"authorization", "cookie"})


def redact_headers(
    headers: Mapping[str, Any] | None,
    sensitive: frozenset[str] = SENSITIVE_HEADERS,
) -> dict[str, Any]:
    """
    Copy headers with sensitive values replaced by a marker.

    Header names are compared case-insensitively but kept as given, so
    ``Authorization`` and ``authorization`` are both redacted in place.

    Examples:
        >>> redact_headers({"Authorization": "Bearer abc", "x-request-id": "id"})
        {'Authorization': '<redacted>', 'x-request-id': 'id'}
    """
    if not headers:
        return {}

    redacted: dict[str, Any] = {}
    for name, value in headers.items():
        if str(name).lower() in sensitive:
            redacted[name] = REDACTED
        else:
            redacted[name] = value
    return redacted


def object_to_json(value: Any) -> Any:
    """
    Reduce a value to a JSON-friendly snapshot.

    - Mappings: keys with None or callable values are dropped, others converted
    - Lists/tuples: converted element-wise (callables dropped)
    - Objects exposing ``to_json()`` or pydantic ``model_dump()``: converted
    - Anything else: returned unchanged
    """
    if isinstance(value, Mapping):
        return {
            key: object_to_json(item)
            for key, item in value.items()
            if item is not None and not callable(item)
        }
    if isinstance(value, (list, tuple)):
        return [object_to_json(item) for item in value if not callable(item)]
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return to_json()
    model_dump = getattr(value, "model_dump", None)
    if callable(model_dump):
        return model_dump()
    return value
