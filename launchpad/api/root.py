from typing import List

from fastapi import APIRouter, Depends

from launchpad.api.deps import get_config
from launchpad.core.config import DashboardConfig
from launchpad.schemas.hosting import ConfigStatus, FrameworkPreset
from launchpad.services.frameworks import list_presets

router = APIRouter(prefix="/api", tags=["root"])


@router.get("/")
async def api_root():
    return {"message": "Launchpad Dashboard API"}


@router.get("/status", response_model=ConfigStatus)
async def api_status(config: DashboardConfig = Depends(get_config)):
    """Which upstreams have credentials, so the UI can flag missing setup."""
    return ConfigStatus(
        hosting_configured=config.hosting_configured,
        github_configured=config.github_configured,
        team_scoped=bool(config.vercel_team_id),
    )


@router.get("/frameworks", response_model=List[FrameworkPreset])
async def frameworks():
    return [FrameworkPreset(**p) for p in list_presets()]
