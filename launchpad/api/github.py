# FILE: launchpad/api/github.py
from typing import List

from fastapi import APIRouter, Depends, Query

from launchpad.api.deps import get_github_service
from launchpad.schemas.github import (
    GitHubCommitResult,
    GitHubContentEntry,
    GitHubDirectoryCreateRequest,
    GitHubFileContent,
    GitHubFileCreateRequest,
    GitHubFileDeleteRequest,
    GitHubFileUpdateRequest,
    GitHubRepoInfo,
)
from launchpad.services.github_service import GitHubService

router = APIRouter(prefix="/api/github", tags=["github"])


@router.get("/repos", response_model=List[GitHubRepoInfo])
async def list_github_repos(github: GitHubService = Depends(get_github_service)):
    """List repositories for the configured GitHub account."""
    return await github.list_repos()


@router.get("/repos/{owner}/{repo}/contents", response_model=List[GitHubContentEntry])
async def list_contents(
    owner: str,
    repo: str,
    path: str = Query("", description="Directory path; empty for the repository root"),
    github: GitHubService = Depends(get_github_service),
):
    return await github.list_directory(f"{owner}/{repo}", path)


@router.get("/repos/{owner}/{repo}/file", response_model=GitHubFileContent)
async def read_file(
    owner: str,
    repo: str,
    path: str = Query(...),
    github: GitHubService = Depends(get_github_service),
):
    """Base64 content plus the sha to present on the next write."""
    return await github.read_file(f"{owner}/{repo}", path)


@router.post("/repos/{owner}/{repo}/files", response_model=GitHubCommitResult)
async def create_file(
    owner: str,
    repo: str,
    data: GitHubFileCreateRequest,
    github: GitHubService = Depends(get_github_service),
):
    return await github.create_file(f"{owner}/{repo}", data.path, data.content, data.message)


@router.post("/repos/{owner}/{repo}/directories", response_model=GitHubCommitResult)
async def create_directory(
    owner: str,
    repo: str,
    data: GitHubDirectoryCreateRequest,
    github: GitHubService = Depends(get_github_service),
):
    return await github.create_directory(f"{owner}/{repo}", data.path, data.message)


@router.put("/repos/{owner}/{repo}/files", response_model=GitHubCommitResult)
async def update_file(
    owner: str,
    repo: str,
    data: GitHubFileUpdateRequest,
    github: GitHubService = Depends(get_github_service),
):
    return await github.update_file(f"{owner}/{repo}", data.path, data.content, data.sha, data.message)


@router.delete("/repos/{owner}/{repo}/files", response_model=GitHubCommitResult)
async def delete_file(
    owner: str,
    repo: str,
    data: GitHubFileDeleteRequest,
    github: GitHubService = Depends(get_github_service),
):
    return await github.delete_file(f"{owner}/{repo}", data.path, data.sha, data.message)
