# app/api/api_v1/api.py
from fastapi import APIRouter

from app.api.api_v1.routers import (
    certificates,
    dashboard,
    farmers,
    farms,
    fields,
    inspections,
)

api_router = APIRouter()

api_router.include_router(dashboard.router)
api_router.include_router(farms.router)
api_router.include_router(farmers.router)
api_router.include_router(fields.router)
api_router.include_router(certificates.router)
api_router.include_router(inspections.router)
