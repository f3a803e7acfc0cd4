from launchpad.schemas.hosting import Deployment, Project, ProjectDetail
from launchpad.schemas.github import GitHubCommitResult, GitHubContentEntry, GitHubFileContent, GitHubRepoInfo

__all__ = [
    "Deployment", "Project", "ProjectDetail",
    "GitHubCommitResult", "GitHubContentEntry", "GitHubFileContent", "GitHubRepoInfo",
]
