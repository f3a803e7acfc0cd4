import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from launchpad.api import deployments, github, projects, root
from launchpad.core.config import DashboardConfig
from launchpad.core.errors import DashboardError

logger = logging.getLogger("launchpad")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(
        config: Optional[DashboardConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the API. ``transport`` replaces the network for every upstream call."""
    config = config or DashboardConfig.from_env()

    app = FastAPI(title="Launchpad Dashboard API")
    app.state.config = config
    app.state.upstream_transport = transport

    @app.exception_handler(DashboardError)
    async def dashboard_error_handler(request: Request, exc: DashboardError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    app.include_router(root.router)
    app.include_router(projects.router)
    app.include_router(deployments.router)
    app.include_router(github.router)

    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_origins=config.cors_origin_list or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if not config.hosting_configured:
        logger.warning("VERCEL_TOKEN not set; hosting endpoints will answer 500")
    if not config.github_configured:
        logger.warning("GITHUB_TOKEN not set; GitHub endpoints will answer 500")
    return app


def main() -> None:
    import uvicorn

    config = DashboardConfig.from_env()
    configure_logging(config.log_level)
    uvicorn.run(create_app(config), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
