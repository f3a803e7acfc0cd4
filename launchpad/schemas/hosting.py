# FILE: launchpad/schemas/hosting.py
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialized with camelCase keys; accepts either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ================== RESPONSES ==================

class RepositoryLink(CamelModel):
    type: str = "github"
    repo: str
    url: Optional[str] = None


class CommitInfo(CamelModel):
    message: Optional[str] = None
    sha: Optional[str] = None
    short_sha: Optional[str] = None
    ref: Optional[str] = None
    author: Optional[str] = None


class Deployment(CamelModel):
    id: str
    project_id: Optional[str] = None
    name: Optional[str] = None
    state: str  # queued | building | ready | error | canceled
    target: Optional[str] = None
    url: Optional[str] = None
    created_at: Optional[str] = None
    ready_at: Optional[str] = None
    commit: Optional[CommitInfo] = None


class Project(CamelModel):
    id: str
    name: str
    framework: str = ""
    build_command: str = ""
    install_command: str = ""
    output_directory: str = ""
    root_directory: str = ""
    repository: Optional[RepositoryLink] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    latest_deployment: Optional[Deployment] = None


class ProjectDetail(Project):
    deployments: List[Deployment] = Field(default_factory=list)


class ProjectListResponse(CamelModel):
    projects: List[Project]


class DeploymentListResponse(CamelModel):
    deployments: List[Deployment]


class FrameworkPreset(CamelModel):
    id: str
    name: str
    build_command: str
    install_command: str
    output_directory: str


class ConfigStatus(CamelModel):
    hosting_configured: bool
    github_configured: bool
    team_scoped: bool


# ================== REQUESTS ==================

class GitRepositoryRef(CamelModel):
    type: str = "github"
    repo: str = Field(..., description="Repository full name, e.g. owner/name")


class ProjectCreate(CamelModel):
    name: Optional[str] = None
    framework: Optional[str] = None
    git_repository: Optional[GitRepositoryRef] = None
    build_command: Optional[str] = None
    install_command: Optional[str] = None
    output_directory: Optional[str] = None
    root_directory: Optional[str] = None


class ProjectUpdate(CamelModel):
    name: Optional[str] = None
    framework: Optional[str] = None
    build_command: Optional[str] = None
    install_command: Optional[str] = None
    output_directory: Optional[str] = None
    root_directory: Optional[str] = None
    # Accepted only so they can be refused explicitly.
    git_repository: Optional[Any] = None
    environment_variables: Optional[Any] = None


class GitSource(CamelModel):
    type: str = "github"
    ref: str
    repo: Optional[str] = None
    org: Optional[str] = None
    repo_id: Optional[int] = None
    sha: Optional[str] = None


class DeploymentCreate(CamelModel):
    project_id: Optional[str] = None
    name: Optional[str] = None
    target: Optional[str] = Field(None, description="Target environment (defaults to production)")
    git_source: Optional[GitSource] = None
