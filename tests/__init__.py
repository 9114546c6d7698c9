"""
Test Suite for Recipes API

Test Organization:
- conftest.py: Shared fixtures (test database, FakeRedis, client, users)
- test_recipes.py: /recipes endpoints, including write/invalidate ordering
- test_listing.py: Cache-aside listing against the store and cache directly
- test_cache.py: Redis wrapper hit/miss/error results
- test_sessions.py: SessionManager state machine
- test_auth.py: /signin, /refresh, /signout and the gate over HTTP

Running Tests:
    pytest
    pytest tests/test_sessions.py -v
"""
