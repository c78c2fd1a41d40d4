"""
Integration tests for the cloud service client.

Test components together against an in-process fake service:
- HttpClient + HttpxTransport over httpx.MockTransport
- Eventually consistent create, update and delete polling
- Transient network failures, timeouts and Retry-After
- Cookie sessions carried across requests
"""
