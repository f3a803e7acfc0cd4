# FILE: launchpad/services/github_service.py
import base64
import binascii
import logging
import os
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from launchpad.core.config import DashboardConfig
from launchpad.core.errors import Conflict, NotFound, UpstreamError, ValidationError
from launchpad.schemas.github import (
    GitHubCommitResult,
    GitHubContentEntry,
    GitHubFileContent,
    GitHubRepoInfo,
)
from launchpad.services.upstream import (
    build_client,
    decode_json,
    error_message,
    raise_for_upstream,
    request_json,
    send,
)

logger = logging.getLogger("launchpad.github")

GITHUB_API_VERSION = "2022-11-28"
REPOS_PAGE_SIZE = 100

# The contents API has no directory objects: a directory exists only while it
# holds a file, so "create directory" writes this empty placeholder into it.
DIRECTORY_MARKER_FILE_NAME = ".gitkeep"

_FULL_NAME = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


def check_safe_path(path: str) -> bool:
    """Prevent path traversal out of the repository root."""
    if ".." in path.split("/") or path.startswith("/") or path.startswith("\\"):
        return False
    # Normalize and check
    normalized = os.path.normpath(path)
    if normalized.startswith(".."):
        return False
    return True


def parse_repo_full_name(repo: str) -> str:
    """Validate an ``owner/name`` repository reference."""
    repo = (repo or "").strip()
    if not _FULL_NAME.match(repo) or any(part in (".", "..") for part in repo.split("/")):
        raise ValidationError(f"Invalid repository {repo!r}; expected owner/name")
    return repo


def normalize_path(path: Optional[str], *, allow_root: bool = False) -> str:
    path = (path or "").strip().strip("/")
    if not path:
        if allow_root:
            return ""
        raise ValidationError("Path is required")
    if not check_safe_path(path):
        raise ValidationError(f"Unsafe path: {path}")
    return path


def validate_base64(content: str) -> str:
    """Contents bodies travel as base64; reject anything that isn't."""
    compact = re.sub(r"\s+", "", content or "")
    try:
        base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("File content must be base64-encoded")
    return compact


def commit_message(message: Optional[str], default: str) -> str:
    """Upstream rejects empty commit messages."""
    message = (message or "").strip()
    return message or default


def _is_hash_conflict(resp: httpx.Response) -> bool:
    if resp.status_code == 409:
        return True
    if resp.status_code == 422:
        return "sha" in (error_message(resp) or "").lower()
    return False


def _entry(raw: Dict[str, Any]) -> GitHubContentEntry:
    return GitHubContentEntry(
        name=raw.get("name", ""),
        path=raw.get("path", ""),
        type=raw.get("type", "file"),
        size=raw.get("size") or 0,
        sha=raw.get("sha", ""),
        html_url=raw.get("html_url"),
        download_url=raw.get("download_url"),
    )


def _repo_info(r: Dict[str, Any]) -> GitHubRepoInfo:
    private = bool(r.get("private"))
    return GitHubRepoInfo(
        id=r["id"],
        name=r["name"],
        full_name=r["full_name"],
        description=r.get("description"),
        private=private,
        visibility=r.get("visibility") or ("private" if private else "public"),
        fork=bool(r.get("fork")),
        default_branch=r.get("default_branch", "main"),
        html_url=r["html_url"],
        updated_at=r.get("updated_at"),
        stargazers_count=r.get("stargazers_count", 0),
    )


class GitHubService:
    """
    File-explorer operations over the GitHub contents API.

    Every write threads the content hash (``sha``) the caller last observed;
    upstream rejects a stale one, and this service reports that as Conflict.
    """

    def __init__(
        self,
        config: DashboardConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        token = self.config.require_github_token()
        return build_client(
            self.config.github_api_base,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
            timeout=self.config.http_timeout,
            transport=self._transport,
        )

    @staticmethod
    def _contents_url(repo: str, path: str) -> str:
        if not path:
            return f"/repos/{repo}/contents"
        return f"/repos/{repo}/contents/{quote(path, safe='/')}"

    async def _get_contents(self, client: httpx.AsyncClient, repo: str, path: str, what: str) -> Any:
        return await request_json(client, "GET", self._contents_url(repo, path), what)

    async def _put_contents(
        self, client: httpx.AsyncClient, repo: str, path: str, body: Dict[str, Any], what: str
    ) -> GitHubCommitResult:
        resp = await send(client, "PUT", self._contents_url(repo, path), what, json=body)
        if _is_hash_conflict(resp):
            raise Conflict(error_message(resp) or f"{path} was changed upstream; re-read it and retry")
        raise_for_upstream(resp, what)
        data = decode_json(resp, what)
        content = (data or {}).get("content") or {}
        commit = (data or {}).get("commit") or {}
        return GitHubCommitResult(
            path=content.get("path", path),
            sha=content.get("sha"),
            commit_sha=commit.get("sha"),
            commit_message=body["message"],
        )

    async def _exists(self, client: httpx.AsyncClient, repo: str, path: str) -> bool:
        try:
            await self._get_contents(client, repo, path, "Check path")
        except NotFound:
            return False
        return True

    # ---------- reads ----------

    async def list_repos(self) -> List[GitHubRepoInfo]:
        """Repositories of the configured account, most recently updated first."""
        async with self._client() as client:
            data = await request_json(
                client,
                "GET",
                "/user/repos",
                "List repositories",
                params={"per_page": REPOS_PAGE_SIZE, "sort": "updated"},
            )
        if not isinstance(data, list):
            raise UpstreamError("List repositories: malformed upstream response")
        try:
            return [_repo_info(r) for r in data]
        except (KeyError, TypeError) as e:
            raise UpstreamError(f"List repositories: malformed upstream response ({e})")

    async def list_directory(self, repo: str, path: str = "") -> List[GitHubContentEntry]:
        repo = parse_repo_full_name(repo)
        path = normalize_path(path, allow_root=True)
        async with self._client() as client:
            data = await self._get_contents(client, repo, path, "List directory")
        entries = data if isinstance(data, list) else [data]
        if not all(isinstance(e, dict) for e in entries):
            raise UpstreamError("List directory: malformed upstream response")
        return [_entry(e) for e in entries]

    async def read_file(self, repo: str, path: str) -> GitHubFileContent:
        repo = parse_repo_full_name(repo)
        path = normalize_path(path)
        async with self._client() as client:
            data = await self._get_contents(client, repo, path, "Read file")
            if isinstance(data, list):
                raise ValidationError(f"{path} is a directory")
            if not isinstance(data, dict) or "sha" not in data:
                raise UpstreamError("Read file: malformed upstream response")
            if data.get("type", "file") != "file":
                raise ValidationError(f"{path} is not a regular file")

            encoding = data.get("encoding") or "base64"
            content = data.get("content") or ""
            if encoding != "base64":
                # Files over 1 MB come back with encoding "none" and no body.
                logger.info(f"{repo}:{path} too large for the contents API, reading blob {data['sha']}")
                blob = await request_json(
                    client, "GET", f"/repos/{repo}/git/blobs/{data['sha']}", "Read file blob"
                )
                if not isinstance(blob, dict) or blob.get("encoding") != "base64":
                    raise UpstreamError(f"Read file: no base64 body available for {path}")
                content = blob.get("content") or ""

        return GitHubFileContent(
            name=data.get("name", path.rsplit("/", 1)[-1]),
            path=data.get("path", path),
            size=data.get("size") or 0,
            sha=data["sha"],
            encoding="base64",
            content=re.sub(r"\s+", "", content),
        )
    # ---------- writes ----------

    async def create_file(
        self, repo: str, path: str, content: str, message: Optional[str] = None
    ) -> GitHubCommitResult:
        repo = parse_repo_full_name(repo)
        path = normalize_path(path)
        content = validate_base64(content)
        body = {"message": commit_message(message, f"Create {path}"), "content": content}

        async with self._client() as client:
            # A PUT without sha would silently overwrite an existing file.
            if await self._exists(client, repo, path):
                raise Conflict(f"{path} already exists")
            logger.info(f"Creating {repo}:{path}")
            return await self._put_contents(client, repo, path, body, "Create file")

    async def create_directory(
        self, repo: str, path: str, message: Optional[str] = None
    ) -> GitHubCommitResult:
        path = normalize_path(path)
        return await self.create_file(
            repo,
            f"{path}/{DIRECTORY_MARKER_FILE_NAME}",
            "",
            commit_message(message, f"Create directory {path}"),
        )

    async def update_file(
        self, repo: str, path: str, content: str, sha: str, message: Optional[str] = None
    ) -> GitHubCommitResult:
        repo = parse_repo_full_name(repo)
        path = normalize_path(path)
        content = validate_base64(content)
        if not (sha or "").strip():
            raise ValidationError("sha of the version being replaced is required")
        body = {
            "message": commit_message(message, f"Update {path}"),
            "content": content,
            "sha": sha.strip(),
        }
        logger.info(f"Updating {repo}:{path}")
        async with self._client() as client:
            return await self._put_contents(client, repo, path, body, "Update file")

    async def delete_file(
        self, repo: str, path: str, sha: str, message: Optional[str] = None
    ) -> GitHubCommitResult:
        repo = parse_repo_full_name(repo)
        path = normalize_path(path)
        if not (sha or "").strip():
            raise ValidationError("sha of the version being deleted is required")
        body = {"message": commit_message(message, f"Delete {path}"), "sha": sha.strip()}

        logger.info(f"Deleting {repo}:{path}")
        async with self._client() as client:
            resp = await send(client, "DELETE", self._contents_url(repo, path), "Delete file", json=body)
            if _is_hash_conflict(resp):
                raise Conflict(error_message(resp) or f"{path} was changed upstream; re-read it and retry")
            raise_for_upstream(resp, "Delete file")
            data = decode_json(resp, "Delete file") if resp.content else {}

        commit = (data or {}).get("commit") or {}
        return GitHubCommitResult(
            path=path,
            sha=None,
            commit_sha=commit.get("sha"),
            commit_message=body["message"],
        )
