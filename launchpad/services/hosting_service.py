# FILE: launchpad/services/hosting_service.py
import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from launchpad.core.config import DashboardConfig
from launchpad.core.errors import Conflict, UpstreamError, ValidationError
from launchpad.schemas.hosting import (
    CommitInfo,
    Deployment,
    DeploymentCreate,
    Project,
    ProjectCreate,
    ProjectDetail,
    ProjectUpdate,
    RepositoryLink,
)
from launchpad.services.fanout import enrich_each
from launchpad.services.frameworks import get_preset
from launchpad.services.upstream import build_client, request_json

logger = logging.getLogger("launchpad.hosting")

# Upstream naming rules: lowercase letters, digits and hyphens.
PROJECT_NAME_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")
MAX_PROJECT_NAME_LENGTH = 100

DEFAULT_DEPLOYMENT_LIMIT = 20
MAX_DEPLOYMENT_LIMIT = 100
DEFAULT_TARGET = "production"

STATE_MAP = {
    "QUEUED": "queued",
    "INITIALIZING": "queued",
    "BUILDING": "building",
    "READY": "ready",
    "ERROR": "error",
    "CANCELED": "canceled",
}
TERMINAL_STATES = {"ready", "error", "canceled"}

# Fields PATCH may reset to the upstream default by sending null.
_RESETTABLE_FIELDS = ("buildCommand", "installCommand", "outputDirectory", "rootDirectory")


# ================== NORMALIZATION ==================

def _ms_to_iso(value: Any) -> Optional[str]:
    """Upstream timestamps are epoch milliseconds."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat()
        except (OSError, OverflowError, ValueError):
            raise UpstreamError(f"Malformed timestamp {value!r} in upstream response")
    return str(value)


def _created_ms(raw: Dict[str, Any]) -> float:
    value = raw.get("createdAt", raw.get("created"))
    return float(value) if isinstance(value, (int, float)) else 0.0


def _https(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    return url if url.startswith(("http://", "https://")) else f"https://{url}"


def normalize_state(raw_state: Any) -> str:
    tag = str(raw_state or "").strip()
    state = STATE_MAP.get(tag.upper())
    if state is None:
        logger.warning(f"Unknown upstream deployment state {tag!r}")
        return tag.lower()
    return state


def normalize_deployment(raw: Any, project_id: Optional[str] = None) -> Deployment:
    if not isinstance(raw, dict) or not (raw.get("uid") or raw.get("id")):
        raise UpstreamError("Malformed deployment in upstream response")

    meta = raw.get("meta") or {}
    commit = None
    sha = meta.get("githubCommitSha")
    if sha or meta.get("githubCommitMessage"):
        commit = CommitInfo(
            message=meta.get("githubCommitMessage"),
            sha=sha,
            short_sha=sha[:7] if sha else None,
            ref=meta.get("githubCommitRef"),
            author=meta.get("githubCommitAuthorName"),
        )

    return Deployment(
        id=str(raw.get("uid") or raw.get("id")),
        project_id=raw.get("projectId") or project_id,
        name=raw.get("name"),
        state=normalize_state(raw.get("readyState") or raw.get("state")),
        target=raw.get("target"),
        url=_https(raw.get("url")),
        created_at=_ms_to_iso(raw.get("createdAt", raw.get("created"))),
        ready_at=_ms_to_iso(raw.get("ready")),
        commit=commit,
    )


def normalize_project(raw: Any) -> Project:
    if not isinstance(raw, dict) or not raw.get("id") or not raw.get("name"):
        raise UpstreamError("Malformed project in upstream response")

    repository = None
    link = raw.get("link")
    if isinstance(link, dict) and link.get("repo"):
        org = link.get("org")
        full_name = f"{org}/{link['repo']}" if org else str(link["repo"])
        link_type = link.get("type") or "github"
        repository = RepositoryLink(
            type=link_type,
            repo=full_name,
            url=f"https://github.com/{full_name}" if link_type == "github" else None,
        )

    return Project(
        id=str(raw["id"]),
        name=str(raw["name"]),
        framework=raw.get("framework") or "",
        build_command=raw.get("buildCommand") or "",
        install_command=raw.get("installCommand") or "",
        output_directory=raw.get("outputDirectory") or "",
        root_directory=raw.get("rootDirectory") or "",
        repository=repository,
        created_at=_ms_to_iso(raw.get("createdAt")),
        updated_at=_ms_to_iso(raw.get("updatedAt")),
    )


def _items(data: Any, key: str, what: str) -> List[Any]:
    if not isinstance(data, dict):
        raise UpstreamError(f"{what}: malformed upstream response")
    items = data.get(key) or []
    if not isinstance(items, list):
        raise UpstreamError(f"{what}: malformed upstream response")
    return items


# ================== VALIDATION ==================

def validate_project_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Project name is required")
    if len(name) > MAX_PROJECT_NAME_LENGTH:
        raise ValidationError(f"Project name must be at most {MAX_PROJECT_NAME_LENGTH} characters")
    if not PROJECT_NAME_PATTERN.match(name):
        raise ValidationError(
            "Project name may only contain lowercase letters, digits and hyphens, "
            "and must start with a letter or digit"
        )
    return name


def _require_id(value: Optional[str], label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{label} is required")
    return value


def _seg(value: str) -> str:
    return quote(value, safe="")


# ================== SERVICE ==================

class HostingService:
    """
    Proxy over the hosting platform's versioned REST API.

    Stateless: every call re-reads from upstream. Construct one per request
    with the process configuration; ``transport`` is for tests.
    """

    def __init__(
        self,
        config: DashboardConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        token = self.config.require_vercel_token()
        params = {"teamId": self.config.vercel_team_id} if self.config.vercel_team_id else None
        return build_client(
            self.config.vercel_api_base,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=self.config.http_timeout,
            params=params,
            transport=self._transport,
        )

    async def _fetch_deployments(
        self, client: httpx.AsyncClient, project_id: str, limit: int
    ) -> List[Dict[str, Any]]:
        data = await request_json(
            client,
            "GET",
            "/v6/deployments",
            "List deployments",
            params={"projectId": project_id, "limit": limit},
        )
        return _items(data, "deployments", "List deployments")

    async def _latest_deployment(
        self, client: httpx.AsyncClient, project_id: str
    ) -> Optional[Deployment]:
        raw = await self._fetch_deployments(client, project_id, 1)
        own = [
            d for d in raw
            if isinstance(d, dict) and d.get("projectId") in (None, project_id)
        ]
        if not own:
            return None
        return normalize_deployment(max(own, key=_created_ms), project_id)

    # ---------- projects ----------

    async def list_projects(self) -> List[Project]:
        async with self._client() as client:
            data = await request_json(client, "GET", "/v9/projects", "List projects")
            projects = [normalize_project(p) for p in _items(data, "projects", "List projects")]

            async def _latest(project: Project) -> Optional[Deployment]:
                return await self._latest_deployment(client, project.id)

            latest = await enrich_each(
                projects,
                _latest,
                limit=self.config.enrichment_concurrency,
                label=lambda p: f"project {p.id}",
            )

        for project, deployment in zip(projects, latest):
            project.latest_deployment = deployment
        return projects

    async def get_project(self, project_id: str) -> ProjectDetail:
        project_id = _require_id(project_id, "Project ID")
        async with self._client() as client:
            project_res, deployments_res = await asyncio.gather(
                request_json(client, "GET", f"/v9/projects/{_seg(project_id)}", "Get project"),
                self._fetch_deployments(client, project_id, self.config.recent_deployments),
                return_exceptions=True,
            )

        # The project's own failure (e.g. unknown id) wins over the history's.
        if isinstance(project_res, BaseException):
            raise project_res
        if isinstance(deployments_res, BaseException):
            raise deployments_res

        project = normalize_project(project_res)
        return ProjectDetail(
            **project.model_dump(),
            deployments=[normalize_deployment(d, project.id) for d in deployments_res],
        )

    async def create_project(self, payload: ProjectCreate) -> Project:
        name = validate_project_name(payload.name)
        body: Dict[str, Any] = {"name": name}

        framework = (payload.framework or "").strip()
        if framework:
            body["framework"] = framework

        preset = get_preset(framework) or {}
        for key, value, preset_key in (
            ("buildCommand", payload.build_command, "build"),
            ("installCommand", payload.install_command, "install"),
            ("outputDirectory", payload.output_directory, "output"),
        ):
            if value is None:
                value = preset.get(preset_key)
            if value:
                body[key] = value
        if payload.root_directory:
            body["rootDirectory"] = payload.root_directory

        if payload.git_repository is not None:
            repo = payload.git_repository.repo.strip()
            if repo.count("/") != 1 or not all(repo.split("/")):
                raise ValidationError("Repository must be given as owner/name")
            body["gitRepository"] = {"type": payload.git_repository.type, "repo": repo}

        logger.info(f"Creating project {name}")
        async with self._client() as client:
            data = await request_json(client, "POST", "/v9/projects", "Create project", json=body)
        return normalize_project(data)

    async def update_project(self, project_id: str, payload: ProjectUpdate) -> Project:
        project_id = _require_id(project_id, "Project ID")
        if payload.git_repository is not None:
            raise ValidationError(
                "The linked repository cannot be changed through project update; "
                "relink it from the hosting dashboard"
            )
        if payload.environment_variables is not None:
            raise ValidationError(
                "Environment variables are not managed by this dashboard; "
                "edit them in the hosting dashboard"
            )

        changes = payload.model_dump(
            by_alias=True,
            exclude_unset=True,
            exclude={"git_repository", "environment_variables"},
        )
        if not changes:
            raise ValidationError("No project fields to update")
        if "name" in changes:
            changes["name"] = validate_project_name(changes["name"])
        for key in _RESETTABLE_FIELDS:
            if key in changes and changes[key] == "":
                changes[key] = None

        logger.info(f"Updating project {project_id}: {', '.join(sorted(changes))}")
        async with self._client() as client:
            data = await request_json(
                client, "PATCH", f"/v9/projects/{_seg(project_id)}", "Update project", json=changes
            )
        return normalize_project(data)

    async def delete_project(self, project_id: str) -> None:
        project_id = _require_id(project_id, "Project ID")
        logger.info(f"Deleting project {project_id}")
        async with self._client() as client:
            await request_json(client, "DELETE", f"/v9/projects/{_seg(project_id)}", "Delete project")

    # ---------- deployments ----------

    async def list_deployments(
        self, project_id: str, limit: int = DEFAULT_DEPLOYMENT_LIMIT
    ) -> List[Deployment]:
        project_id = _require_id(project_id, "Project ID")
        if not 1 <= limit <= MAX_DEPLOYMENT_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_DEPLOYMENT_LIMIT}")
        async with self._client() as client:
            raw = await self._fetch_deployments(client, project_id, limit)
        return [normalize_deployment(d, project_id) for d in raw]

    async def create_deployment(self, payload: DeploymentCreate) -> Deployment:
        project_id = _require_id(payload.project_id, "Project ID")
        target = (payload.target or "").strip() or DEFAULT_TARGET

        async with self._client() as client:
            name = (payload.name or "").strip()
            if not name:
                project = normalize_project(
                    await request_json(
                        client, "GET", f"/v9/projects/{_seg(project_id)}", "Get project"
                    )
                )
                name = project.name

            body: Dict[str, Any] = {"name": name, "project": project_id}
            # Preview deployments are requested by leaving the target out.
            if target != "preview":
                body["target"] = target
            if payload.git_source is not None:
                body["gitSource"] = payload.git_source.model_dump(by_alias=True, exclude_none=True)

            logger.info(f"Triggering {target} deployment for project {project_id}")
            data = await request_json(client, "POST", "/v13/deployments", "Create deployment", json=body)
        return normalize_deployment(data, project_id)

    async def cancel_deployment(self, deployment_id: str) -> Deployment:
        deployment_id = _require_id(deployment_id, "Deployment ID")
        async with self._client() as client:
            current = normalize_deployment(
                await request_json(
                    client, "GET", f"/v13/deployments/{_seg(deployment_id)}", "Get deployment"
                )
            )
            if current.state in TERMINAL_STATES:
                raise Conflict(
                    f"Deployment {deployment_id} is already {current.state} and cannot be canceled"
                )

            logger.info(f"Canceling deployment {deployment_id} ({current.state})")
            try:
                data = await request_json(
                    client,
                    "PATCH",
                    f"/v12/deployments/{_seg(deployment_id)}/cancel",
                    "Cancel deployment",
                )
            except ValidationError as e:
                # Finished between our read and the cancel.
                raise Conflict(e.message)

        if data is None:
            return current.model_copy(update={"state": "canceled"})
        return normalize_deployment(data, current.project_id)
