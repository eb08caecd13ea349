"""Library filters, albums and authorization endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..models.common import DateFilter, MediaFilter
from ..models.session import FilterOption, TriageState
from ..services.triage_manager import TriageManager, UnknownAlbumError
from .deps import get_triage

router = APIRouter(prefix="/library", tags=["library"])


class AlbumSelection(BaseModel):
    album_id: str


class DateFilterSelection(BaseModel):
    filter: DateFilter


class MediaFilterSelection(BaseModel):
    filter: MediaFilter


class FlagSelection(BaseModel):
    enabled: bool


@router.get("/albums")
async def list_albums(triage: TriageManager = Depends(get_triage)):
    return triage.albums


@router.post("/albums/refresh")
async def refresh_albums(triage: TriageManager = Depends(get_triage)):
    return await triage.refresh_albums()


@router.get("/filters")
async def list_filters():
    return {
        "date": [FilterOption(value=f.value, title=f.label, hint=f.hint()) for f in DateFilter],
        "media": [FilterOption(value=f.value, title=f.label, hint=f.hint) for f in MediaFilter],
    }


@router.put("/filters/album", response_model=TriageState)
async def select_album(req: AlbumSelection, triage: TriageManager = Depends(get_triage)):
    try:
        await triage.select_album(req.album_id)
    except UnknownAlbumError:
        raise HTTPException(status_code=404, detail="Album not found")
    return triage.snapshot()


@router.put("/filters/date", response_model=TriageState)
async def set_date_filter(req: DateFilterSelection, triage: TriageManager = Depends(get_triage)):
    await triage.set_date_filter(req.filter)
    return triage.snapshot()


@router.put("/filters/media", response_model=TriageState)
async def set_media_filter(req: MediaFilterSelection, triage: TriageManager = Depends(get_triage)):
    await triage.set_media_filter(req.filter)
    return triage.snapshot()


@router.put("/filters/include-videos", response_model=TriageState)
async def set_include_videos(req: FlagSelection, triage: TriageManager = Depends(get_triage)):
    await triage.set_include_videos(req.enabled)
    return triage.snapshot()


@router.put("/filters/randomize", response_model=TriageState)
async def set_randomize(req: FlagSelection, triage: TriageManager = Depends(get_triage)):
    await triage.set_randomize(req.enabled)
    return triage.snapshot()


@router.get("/authorization")
async def authorization_status(triage: TriageManager = Depends(get_triage)):
    return {
        "state": triage.authorization,
        "source_status": triage.source.current_authorization_status(),
    }


@router.post("/authorization/refresh", response_model=TriageState)
async def refresh_authorization(triage: TriageManager = Depends(get_triage)):
    """Re-read access without prompting; clients call this when they return to foreground."""
    await triage.refresh_authorization_status()
    return triage.snapshot()


@router.post("/authorization/request", response_model=TriageState)
async def request_authorization(triage: TriageManager = Depends(get_triage)):
    await triage.ensure_authorization(request_if_needed=True)
    return triage.snapshot()
