from fastapi import FastAPI

from . import health, job_roles, releases, reports, tutorials


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(releases.router)
    app.include_router(reports.router)
    app.include_router(tutorials.router)
    app.include_router(job_roles.router)
