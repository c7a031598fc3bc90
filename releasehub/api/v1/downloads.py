from __future__ import annotations

import tempfile
from typing import BinaryIO, Iterator
from urllib.parse import quote

import anyio
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from releasehub.api.deps import get_distribution
from releasehub.core.config import AppSettings
from releasehub.core.security import get_settings
from releasehub.services.distribution import Distribution
from releasehub.services.release_store import render_file_name

router = APIRouter(tags=["Downloads"])


def content_disposition(file_name: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = "".join(
        char if 32 <= ord(char) < 127 and char not in '"\\' else "_" for char in file_name
    )
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name, safe='')}"


def _iter_spool(spool: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    try:
        while True:
            chunk = spool.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        spool.close()


@router.get("/download/{link_id}", status_code=200)
async def download_release(
    link_id: str,
    distribution: Distribution = Depends(get_distribution),
    app_settings: AppSettings = Depends(get_settings),
):
    link = await anyio.to_thread.run_sync(distribution.registry.get, link_id)
    release = await anyio.to_thread.run_sync(distribution.store.get, link.release_id)
    # headers are fully built before the download is counted
    headers = {
        "ETag": f'"{release.checksum_sha256}"',
        "Content-Disposition": content_disposition(render_file_name(release, app_settings.FILENAME_TEMPLATE)),
    }

    spool = tempfile.SpooledTemporaryFile(max_size=app_settings.DOWNLOAD_SPOOL_MAX_BYTES)
    try:
        size = await anyio.to_thread.run_sync(distribution.tracker.record_download, link_id, spool)
        spool.seek(0)
    except BaseException:
        spool.close()
        raise

    headers["Content-Length"] = str(size)
    return StreamingResponse(
        _iter_spool(spool, app_settings.DOWNLOAD_CHUNK_SIZE_BYTES),
        status_code=200,
        media_type="application/octet-stream",
        headers=headers,
    )
