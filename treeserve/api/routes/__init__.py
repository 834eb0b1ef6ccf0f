"""API route registration."""

from fastapi import APIRouter

from treeserve.api.routes import auth, files, health, live, pages

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(files.router, tags=["files"])

site_router = APIRouter()

site_router.include_router(auth.router)
site_router.include_router(pages.router)
site_router.include_router(files.download_router)
site_router.include_router(live.router)
