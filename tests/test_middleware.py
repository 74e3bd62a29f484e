"""Tests for the request-id middleware.

Learn: Transport policy (CORS, security headers, rate limits) lives in
the deployment in front of the app, so the only middleware to test is
the one that tags every request with an id.
"""

import pytest


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/api/v1/health")
    r2 = await client.get("/api/v1/health")
    assert "X-Request-ID" in r1.headers
    assert "X-Request-ID" in r2.headers
    # Each request gets a unique ID
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    """Incoming X-Request-ID is propagated through the response."""
    custom_id = "test-trace-12345"
    r = await client.get(
        "/api/v1/health",
        headers={"X-Request-ID": custom_id},
    )
    assert r.headers["X-Request-ID"] == custom_id


@pytest.mark.asyncio
async def test_request_id_on_error_responses(client):
    """Failed requests are tagged too, so they can be traced in the logs."""
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert "X-Request-ID" in r.headers
