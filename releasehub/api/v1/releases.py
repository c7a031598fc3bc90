from __future__ import annotations

import logging
import time

import anyio
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, UploadFile

from releasehub.api.deps import get_distribution
from releasehub.core.config import AppSettings
from releasehub.core.security import admin_access, get_settings
from releasehub.domain.release import Release, ReleaseDraft
from releasehub.services.distribution import Distribution
from releasehub.services.email_service.email_worker import queue_release_notifications

router = APIRouter(prefix="/api/v1/releases", tags=["Releases"], dependencies=[Depends(admin_access)])


@router.get("", response_model=list[Release], status_code=200)
def list_releases(distribution: Distribution = Depends(get_distribution)):
    return distribution.store.list()


@router.post("", response_model=Release, status_code=201)
async def publish_release(
    background_tasks: BackgroundTasks,
    version: str = Form(""),
    description: str = Form(""),
    file: UploadFile = File(...),
    distribution: Distribution = Depends(get_distribution),
    app_settings: AppSettings = Depends(get_settings),
):
    started = time.perf_counter()
    draft = ReleaseDraft(version=version, description=description)
    draft.validate()
    release = await anyio.to_thread.run_sync(distribution.store.publish, draft, file.file)
    notifications = await anyio.to_thread.run_sync(distribution.notifier.prepare, release)
    queue_release_notifications(background_tasks, notifications, app_settings)
    logging.info(
        "[release_publish_request] id=%s subscribers=%s elapsed_ms=%s",
        release.id,
        len(notifications),
        int((time.perf_counter() - started) * 1000),
    )
    return release


@router.get("/{release_id}", response_model=Release, status_code=200)
def get_release(release_id: str, distribution: Distribution = Depends(get_distribution)):
    return distribution.store.get(release_id)


@router.delete("/{release_id}", status_code=204)
def unpublish_release(release_id: str, distribution: Distribution = Depends(get_distribution)):
    distribution.unpublish_release(release_id)
    return None
