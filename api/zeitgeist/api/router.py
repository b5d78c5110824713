"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import advice, analytics, cron, favorites, history, ops, users, vibes

api_router = APIRouter()
api_router.include_router(advice.router, prefix="/advice", tags=["advice"])
api_router.include_router(vibes.router, prefix="/vibes", tags=["vibes"])
api_router.include_router(users.router, prefix="/user", tags=["user"])
api_router.include_router(history.router, prefix="/history", tags=["history"])
api_router.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
api_router.include_router(ops.router, prefix="/ops", tags=["ops"])
