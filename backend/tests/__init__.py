"""
Storefront backend test suite.

Test categories:
- Unit tests: validators, rate limiter, auth tokens, blob client
- Integration tests: services against in-memory / file-backed SQLite
- API tests: the FastAPI app through httpx's ASGI transport
"""
