# launchpad/core/config.py
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from launchpad.core.errors import ConfigurationError

# ================== ENV ==================

ROOT_DIR = Path(__file__).resolve().parents[2]
load_dotenv(ROOT_DIR / ".env")

VERCEL_API_BASE = "https://api.vercel.com"
GITHUB_API_BASE = "https://api.github.com"


def env(*names: str, default: Optional[str] = None) -> str:
    for n in names:
        v = os.environ.get(n)
        if v is not None and str(v).strip() != "":
            return v
    if default is not None:
        return default
    raise KeyError(f"Missing required env var. Tried: {', '.join(names)}")


def _env_int(name: str, default: int) -> int:
    raw = env(name, default=str(default))
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = env(name, default=str(default))
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


# ================== CONFIG ==================

@dataclass(frozen=True)
class DashboardConfig:
    """
    Process-wide settings, built once at startup and handed to each service.
    Tokens may be empty: the app still boots, and only the operations that
    need a missing token fail.
    """

    vercel_token: str = ""
    vercel_team_id: str = ""
    github_token: str = ""
    vercel_api_base: str = VERCEL_API_BASE
    github_api_base: str = GITHUB_API_BASE
    http_timeout: float = 30.0
    enrichment_concurrency: int = 10
    recent_deployments: int = 10
    cors_origins: str = "*"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        return cls(
            vercel_token=env("VERCEL_TOKEN", default="").strip(),
            vercel_team_id=env("VERCEL_TEAM_ID", default="").strip(),
            github_token=env("GITHUB_TOKEN", default="").strip(),
            vercel_api_base=env("VERCEL_API_BASE", default=VERCEL_API_BASE).rstrip("/"),
            github_api_base=env("GITHUB_API_BASE", default=GITHUB_API_BASE).rstrip("/"),
            http_timeout=_env_float("UPSTREAM_TIMEOUT_SECONDS", 30.0),
            enrichment_concurrency=max(1, _env_int("ENRICHMENT_CONCURRENCY", 10)),
            recent_deployments=max(1, _env_int("RECENT_DEPLOYMENTS_LIMIT", 10)),
            cors_origins=env("CORS_ORIGINS", default="*"),
            log_level=env("LOG_LEVEL", default="INFO").upper(),
        )

    @property
    def hosting_configured(self) -> bool:
        return bool(self.vercel_token)

    @property
    def github_configured(self) -> bool:
        return bool(self.github_token)

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def require_vercel_token(self) -> str:
        if not self.vercel_token:
            raise ConfigurationError("Vercel token not configured (VERCEL_TOKEN).")
        return self.vercel_token

    def require_github_token(self) -> str:
        if not self.github_token:
            raise ConfigurationError("GitHub token not configured (GITHUB_TOKEN).")
        return self.github_token
