"""Triage deck API endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..models.session import TriageState
from ..services.triage_manager import TriageManager
from .deps import get_triage

router = APIRouter(prefix="/triage", tags=["triage"])


class ReloadRequest(BaseModel):
    reset_stats: bool = False


@router.get("/state", response_model=TriageState)
async def get_state(triage: TriageManager = Depends(get_triage)):
    return triage.snapshot()


@router.post("/keep", response_model=TriageState)
async def keep_current(triage: TriageManager = Depends(get_triage)):
    await triage.keep_current()
    return triage.snapshot()


@router.post("/delete", response_model=TriageState)
async def delete_current(triage: TriageManager = Depends(get_triage)):
    await triage.delete_current()
    return triage.snapshot()


@router.post("/skip", response_model=TriageState)
async def skip_current(triage: TriageManager = Depends(get_triage)):
    await triage.skip_current()
    return triage.snapshot()


@router.post("/reload", response_model=TriageState)
async def reload_library(req: ReloadRequest, triage: TriageManager = Depends(get_triage)):
    await triage.reload_library(reset_stats=req.reset_stats)
    return triage.snapshot()


@router.post("/stats/reset", response_model=TriageState)
async def reset_stats(triage: TriageManager = Depends(get_triage)):
    await triage.reset_stats()
    return triage.snapshot()


@router.post("/flush")
async def flush_pending_deletes(triage: TriageManager = Depends(get_triage)):
    """Commit queued deletes now; clients call this when they go to background."""
    result = await triage.flush_pending_deletes_if_needed()
    return {"committed": result is not None, "result": result, "state": triage.snapshot()}


@router.post("/error/clear", response_model=TriageState)
async def clear_error(triage: TriageManager = Depends(get_triage)):
    await triage.clear_error()
    return triage.snapshot()


@router.post("/notice/clear", response_model=TriageState)
async def clear_notice(triage: TriageManager = Depends(get_triage)):
    await triage.clear_notice()
    return triage.snapshot()
