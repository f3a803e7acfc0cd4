import pytest
from fastapi.testclient import TestClient

from launchpad.core.config import DashboardConfig
from launchpad.server import create_app
from launchpad.services.github_service import GitHubService
from launchpad.services.hosting_service import HostingService
from tests.fakes import FakeGitHub, FakeVercel, combined_transport


@pytest.fixture
def config() -> DashboardConfig:
    return DashboardConfig(vercel_token="vercel-test-token", github_token="github-test-token")


@pytest.fixture
def vercel() -> FakeVercel:
    return FakeVercel()


@pytest.fixture
def gh() -> FakeGitHub:
    fake = FakeGitHub()
    fake.add_repo("acme/site", description="Marketing site", stargazers_count=3)
    return fake


@pytest.fixture
def hosting(config: DashboardConfig, vercel: FakeVercel) -> HostingService:
    return HostingService(config, transport=vercel.transport())


@pytest.fixture
def github(config: DashboardConfig, gh: FakeGitHub) -> GitHubService:
    return GitHubService(config, transport=gh.transport())


@pytest.fixture
def client(config: DashboardConfig, vercel: FakeVercel, gh: FakeGitHub) -> TestClient:
    app = create_app(config, transport=combined_transport(vercel, gh))
    return TestClient(app)
