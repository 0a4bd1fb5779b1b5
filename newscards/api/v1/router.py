from fastapi import APIRouter

from .endpoints import dashboard, ingest, posts, queue, sources

api_router = APIRouter()

# Fetch triggers and manual queue entry (e.g. /api/trigger-rss-fetch, /api/add-content-to-queue)
api_router.include_router(ingest.router, tags=["ingest"])
api_router.include_router(queue.router, tags=["queue"])
api_router.include_router(sources.router, tags=["sources"])
api_router.include_router(posts.router, tags=["posts"])
api_router.include_router(dashboard.router, tags=["dashboard"])
