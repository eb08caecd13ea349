"""Item preview API endpoint."""

import mimetypes
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from ..services.triage_manager import TriageManager
from .deps import get_triage

router = APIRouter(prefix="/preview", tags=["preview"])


@router.get("/{item_id:path}")
async def preview_item(item_id: str, request: Request, triage: TriageManager = Depends(get_triage)):
    item = triage.find_item(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found")

    # Size check
    max_size = request.app.state.settings.max_preview_size_mb * 1024 * 1024
    if item.size > max_size:
        raise HTTPException(status_code=413, detail="File too large for preview")

    data = await triage.source.read_bytes(item)
    if data is None:
        raise HTTPException(status_code=404, detail="Could not read file")

    mime_type = mimetypes.guess_type(item.filename)[0] or "application/octet-stream"

    return Response(
        content=data,
        media_type=mime_type,
        headers={"Content-Disposition": f'inline; filename="{item.filename}"'},
    )
