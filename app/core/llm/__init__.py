"""LLM integration layer.

This package is intentionally small and conservative:
- No prompt/output logging (check-ins and intake are personal wellness data).
- Configurable via environment variables.
- One outbound call per `complete()`; no retries, no caching.
"""
