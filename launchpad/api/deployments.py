# FILE: launchpad/api/deployments.py
import logging

from fastapi import APIRouter, Depends

from launchpad.api.deps import get_hosting_service
from launchpad.schemas.hosting import Deployment, DeploymentCreate
from launchpad.services.hosting_service import HostingService

logger = logging.getLogger("launchpad.deployments")

router = APIRouter(prefix="/api/deployments", tags=["deployments"])


@router.post("", response_model=Deployment)
async def trigger_deployment(
    data: DeploymentCreate,
    hosting: HostingService = Depends(get_hosting_service),
):
    """Queue a deployment; returns immediately without waiting for the build."""
    deployment = await hosting.create_deployment(data)
    logger.info(f"Deployment {deployment.id} queued for project {deployment.project_id} ({deployment.state})")
    return deployment


@router.post("/{deployment_id}/cancel", response_model=Deployment)
async def cancel_deployment(
    deployment_id: str,
    hosting: HostingService = Depends(get_hosting_service),
):
    """Cancel a queued or building deployment. Finished deployments answer 409."""
    return await hosting.cancel_deployment(deployment_id)
