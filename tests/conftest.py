import pytest
from unittest.mock import AsyncMock, patch
from httpx import ASGITransport, AsyncClient
from fastapi.testclient import TestClient
from opsconsole.main import app
from opsconsole.client.api import OpsApiClient
from opsconsole.core.config import Settings
from tests.fakes import ManualScheduler

@pytest.fixture
def client():
    """Sync test client for basic API testing"""
    return TestClient(app)

@pytest.fixture
def test_client():
    """Test client that renders unhandled errors as responses instead of raising"""
    return TestClient(app, raise_server_exceptions=False)

@pytest.fixture
async def async_client():
    """Async test client for async endpoint testing"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

@pytest.fixture
def mock_azure_service():
    with patch("opsconsole.routers.vms.azure_service") as service:
        yield service

@pytest.fixture
def mock_dev_template_service():
    with patch("opsconsole.routers.templates.dev_template_service") as service:
        yield service

@pytest.fixture
def azure_settings():
    return Settings(
        _env_file=None,
        azure_tenant_id="tenant-test",
        azure_client_id="client-test",
        azure_client_secret="secret-test",
        azure_subscription_id="sub-test-123",
        azure_resource_group="rg-dev",
        azure_location="westeurope",
        azure_vnet_name="vnet-dev",
        azure_subnet_name="snet-dev",
        vm_admin_username="devadmin",
        vm_admin_password="S3cret-Passw0rd!",
    )

@pytest.fixture
def scheduler():
    return ManualScheduler()

@pytest.fixture
def mock_api():
    return AsyncMock(spec=OpsApiClient)
