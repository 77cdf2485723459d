"""API module for Kore.

HTTP layer over the journal:
- Validates inputs and resolves the caller from X-User-Id
- Translates journal errors to HTTP status codes
- Returns payloads for the UI; no trading logic lives here
"""
