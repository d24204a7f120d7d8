"""
Conversion routes: .tlp import/export (no persistence).
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Body, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from tlpcore.config import get_settings
from tlpcore.models import Feature, ImportParams, Project
from tlpcore.tlp_export import generate
from tlpcore.tlp_import import parse_text
from tlpcore.tlp_selector import TlpDecodeError
from tlpcore.validation import NoteValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Convert"])

NOTIFICATIONS_HEADER = "X-Export-Notifications"


async def _read_upload(upload_file: UploadFile, *, max_mb: int) -> bytes:
    """
    Chunked read + size limit.
    """
    limit = max_mb * 1024 * 1024
    chunk_size = 1024 * 1024  # 1MB
    chunks: List[bytes] = []
    total = 0

    try:
        while True:
            chunk = await upload_file.read(chunk_size)
            if not chunk:
                break
            total += len(chunk)
            if total > limit:
                raise HTTPException(
                    status_code=413,
                    detail=f"File too large: {total/1024/1024:.2f}MB > {max_mb}MB",
                )
            chunks.append(chunk)
    finally:
        await upload_file.close()

    return b"".join(chunks)


@router.post("/import/tlp", response_model=Project)
async def import_tlp(
    file: UploadFile = File(...),
    default_lyric: Optional[str] = Query(None, min_length=1),
    skip_corrupt: Optional[bool] = Query(None),
) -> Project:
    """
    Upload a .tlp file, get the canonical project JSON back.
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Filename is missing")

    s = get_settings()
    data = await _read_upload(file, max_mb=s.max_upload_size_mb)
    if not data:
        raise HTTPException(status_code=400, detail="File is empty")

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="File is not UTF-8 text")

    params = ImportParams(default_lyric=default_lyric) if default_lyric else ImportParams()
    name = Path(file.filename).stem

    try:
        return parse_text(
            text,
            params,
            name=name,
            input_file=Path(file.filename),
            skip_corrupt=skip_corrupt,
        )
    except TlpDecodeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NoteValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/export/tlp")
def export_tlp(
    project: Project = Body(...),
    feature: List[Feature] = Query([]),
):
    """
    Canonical project JSON -> .tlp bytes.
    Notifications are returned in the X-Export-Notifications header.
    """
    try:
        result = generate(project, feature)
    except Exception:
        logger.exception("Failed to build TLP for %r", project.name)
        raise HTTPException(status_code=500, detail="Failed to build TLP")

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.file_name)}",
            NOTIFICATIONS_HEADER: ",".join(n.value for n in result.notifications),
        },
    )
