import pytest
from httpx import AsyncClient

from authgate import __version__


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test that health check endpoint returns OK."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == __version__


@pytest.mark.asyncio
async def test_health_check_needs_no_token(client: AsyncClient, identity_provider):
    """Test that health check skips auth and the provider."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert identity_provider.calls == []
