# =========================================================
# FILE: launchpad/api/projects.py
# =========================================================

from fastapi import APIRouter, Depends, Query, Response

from launchpad.api.deps import get_hosting_service
from launchpad.schemas.hosting import (
    DeploymentListResponse,
    Project,
    ProjectCreate,
    ProjectDetail,
    ProjectListResponse,
    ProjectUpdate,
)
from launchpad.services.hosting_service import (
    DEFAULT_DEPLOYMENT_LIMIT,
    MAX_DEPLOYMENT_LIMIT,
    HostingService,
)

router = APIRouter(prefix="/api", tags=["projects"])


@router.get("/projects", response_model=ProjectListResponse)
async def projects(hosting: HostingService = Depends(get_hosting_service)):
    """All projects, each with its latest deployment (null when unavailable)."""
    return ProjectListResponse(projects=await hosting.list_projects())


@router.post("/projects", response_model=Project)
async def create_project(
        data: ProjectCreate,
        hosting: HostingService = Depends(get_hosting_service),
):
    return await hosting.create_project(data)


@router.get("/projects/{pid}", response_model=ProjectDetail)
async def project(
        pid: str,
        hosting: HostingService = Depends(get_hosting_service),
):
    return await hosting.get_project(pid)


@router.patch("/projects/{pid}", response_model=Project)
@router.put("/projects/{pid}", response_model=Project)
async def update_project(
        pid: str,
        data: ProjectUpdate,
        hosting: HostingService = Depends(get_hosting_service),
):
    return await hosting.update_project(pid, data)


@router.delete("/projects/{pid}", status_code=204)
async def delete_project(
        pid: str,
        hosting: HostingService = Depends(get_hosting_service),
):
    await hosting.delete_project(pid)
    return Response(status_code=204)


@router.get("/projects/{pid}/deployments", response_model=DeploymentListResponse)
async def project_deployments(
        pid: str,
        limit: int = Query(DEFAULT_DEPLOYMENT_LIMIT, ge=1, le=MAX_DEPLOYMENT_LIMIT),
        hosting: HostingService = Depends(get_hosting_service),
):
    return DeploymentListResponse(deployments=await hosting.list_deployments(pid, limit))
