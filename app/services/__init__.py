"""
Services Package

Business logic kept apart from HTTP handling (routers), so each piece can
be tested with plain objects.

Current services:
- cache.py: Redis wrapper returning explicit hit/miss/error lookups
- listing.py: Cache-aside recipe listing and its invalidation
- recipe_store.py: Recipe persistence (insert, query, update, delete)
- rate_limiter.py: Rate limiting with slowapi
- security.py: Password hashing and session token encoding
- sessions.py: Sign-in, refresh, sign-out and the authentication gate
"""
