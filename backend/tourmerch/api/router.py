"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from tourmerch.api.routes import inventory, sales, shows, tours, users

api_router = APIRouter(prefix="/api")
api_router.include_router(users.router)
api_router.include_router(tours.router)
api_router.include_router(shows.router)
api_router.include_router(inventory.router)
api_router.include_router(sales.router)
