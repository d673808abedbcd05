"""
API Router
Combines all endpoint routers
"""
from fastapi import APIRouter
from leadgen.api.v1.endpoints import (
    agents,
    records,
    auth,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(agents.router)
api_router.include_router(records.router)
