"""
Per-request state and response normalization.

Main Components:
    - RequestState: Options, retry record and cookies of one logical request
    - RetryRecord: Retry counters and the summaries of retried attempts
    - ResponseEnvelope: Uniform view over a transport response or error
    - redact_headers / object_to_json: Snapshot helpers used for provenance
"""

from cloud_service_client.session.redactor import object_to_json, redact_headers
from cloud_service_client.session.request_state import RequestState, RetryRecord
from cloud_service_client.session.response import ResponseEnvelope

__all__ = [
    "RequestState",
    "RetryRecord",
    "ResponseEnvelope",
    "object_to_json",
    "redact_headers",
]
