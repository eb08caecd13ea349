"""Aggregate all API sub-routers."""

from fastapi import APIRouter

from . import triage, library, preview, ws

api_router = APIRouter()

api_router.include_router(triage.router)
api_router.include_router(library.router)
api_router.include_router(preview.router)
api_router.include_router(ws.router)
