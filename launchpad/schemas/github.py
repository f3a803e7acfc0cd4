# FILE: launchpad/schemas/github.py
from typing import Optional, List
from pydantic import BaseModel, Field


class GitHubRepoInfo(BaseModel):
    id: int
    name: str
    full_name: str
    description: Optional[str]
    private: bool
    visibility: str
    fork: bool = False
    default_branch: str
    html_url: str
    updated_at: Optional[str]
    stargazers_count: int


class GitHubContentEntry(BaseModel):
    name: str
    path: str
    type: str  # file | dir | symlink | submodule
    size: int = 0
    sha: str
    html_url: Optional[str] = None
    download_url: Optional[str] = None


class GitHubFileContent(BaseModel):
    name: str
    path: str
    size: int = 0
    sha: str = Field(..., description="Present this hash on the next update or delete of this path")
    encoding: str = "base64"
    content: str


class GitHubCommitResult(BaseModel):
    path: str
    sha: Optional[str] = Field(None, description="New content hash; null after a delete")
    commit_sha: Optional[str] = None
    commit_message: str


class GitHubFileCreateRequest(BaseModel):
    path: str
    content: str = Field("", description="Base64-encoded file body")
    message: Optional[str] = None


class GitHubDirectoryCreateRequest(BaseModel):
    path: str
    message: Optional[str] = None


class GitHubFileUpdateRequest(BaseModel):
    path: str
    content: str = Field(..., description="Base64-encoded file body")
    sha: str = Field(..., description="Content hash observed on the last read")
    message: Optional[str] = None


class GitHubFileDeleteRequest(BaseModel):
    path: str
    sha: str = Field(..., description="Content hash observed on the last read")
    message: Optional[str] = None
