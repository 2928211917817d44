"""
API router: aggregates all endpoint sub-routers.
"""
from fastapi import APIRouter

from smartchat.api.endpoints import auth, billing, widgets

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(billing.router)
api_router.include_router(widgets.router)
