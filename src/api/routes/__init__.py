from fastapi import FastAPI

from . import health, reviews, users


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(reviews.router)
    app.include_router(reviews.admin_router)
    app.include_router(users.router)
