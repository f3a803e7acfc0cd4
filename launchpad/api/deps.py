# FILE: launchpad/api/deps.py

from fastapi import Depends, Request

from launchpad.core.config import DashboardConfig
from launchpad.services.github_service import GitHubService
from launchpad.services.hosting_service import HostingService


def get_config(request: Request) -> DashboardConfig:
    return request.app.state.config


def _transport(request: Request):
    return getattr(request.app.state, "upstream_transport", None)


def get_hosting_service(
        request: Request,
        config: DashboardConfig = Depends(get_config),
) -> HostingService:
    return HostingService(config, transport=_transport(request))


def get_github_service(
        request: Request,
        config: DashboardConfig = Depends(get_config),
) -> GitHubService:
    return GitHubService(config, transport=_transport(request))
