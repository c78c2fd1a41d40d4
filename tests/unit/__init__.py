"""
Unit tests for the cloud service client.

Test individual components in isolation:
- Cookie parsing and the cookie store
- Retry strategies, strategy chain and coordinator
- Request state, response envelope and redaction
- httpx transport adapter
- Client facade and settings
"""
