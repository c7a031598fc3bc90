from typing import Any

from fastapi import APIRouter, Body, Depends

from releasehub.api.deps import get_distribution
from releasehub.core.security import admin_access
from releasehub.services.distribution import Distribution

router = APIRouter(prefix="/api/v1/config", tags=["Config"], dependencies=[Depends(admin_access)])


@router.get("", response_model=dict[str, Any], status_code=200)
def get_config(distribution: Distribution = Depends(get_distribution)):
    return distribution.config.get_all()


@router.put("", response_model=dict[str, Any], status_code=200)
def update_config(
    values: dict[str, Any] = Body(...),
    distribution: Distribution = Depends(get_distribution),
):
    return distribution.config.update(values)
