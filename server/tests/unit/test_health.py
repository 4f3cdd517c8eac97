"""Unit tests for health and metrics endpoints."""

import pytest

from studio import __version__


@pytest.mark.asyncio
async def test_health_ping_rpc(test_client):
    """Test the RPC-style health ping endpoint."""
    response = await test_client.post("/v1/health/ping", json={})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == __version__
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_metrics_expose_booking_counters(test_client, member_headers, schedule_class):
    """Business counters show up in the Prometheus exposition."""
    scheduled_class = await schedule_class()
    await test_client.post(
        "/api/bookings", json={"scheduled_class_id": str(scheduled_class.id)}, headers=member_headers
    )

    response = await test_client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "studio_bookings_created_total" in response.text
    assert "studio_booking_rejections_total" in response.text
