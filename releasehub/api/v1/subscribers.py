from fastapi import APIRouter, Depends

from releasehub.api.deps import get_distribution
from releasehub.core.security import admin_access
from releasehub.schemas.subscriber import SubscriberRead, SubscriberWrite
from releasehub.services.distribution import Distribution

router = APIRouter(prefix="/api/v1/subscribers", tags=["Subscribers"], dependencies=[Depends(admin_access)])


@router.get("", response_model=list[SubscriberRead], status_code=200)
def list_subscribers(distribution: Distribution = Depends(get_distribution)):
    return distribution.subscribers.list_subscribers()


@router.post("", response_model=SubscriberRead, status_code=201)
def subscribe(payload: SubscriberWrite, distribution: Distribution = Depends(get_distribution)):
    return distribution.subscribers.subscribe(name=payload.name, email=payload.email)


@router.put("/{subscriber_id}", response_model=SubscriberRead, status_code=200)
def update_subscriber(
    subscriber_id: str,
    payload: SubscriberWrite,
    distribution: Distribution = Depends(get_distribution),
):
    return distribution.subscribers.update_subscriber(subscriber_id, name=payload.name, email=payload.email)


@router.delete("/{subscriber_id}", status_code=204)
def unsubscribe(subscriber_id: str, distribution: Distribution = Depends(get_distribution)):
    distribution.unsubscribe(subscriber_id)
    return None


@router.get("/{subscriber_id}/stats", response_model=dict[str, int], status_code=200)
def subscriber_download_stats(subscriber_id: str, distribution: Distribution = Depends(get_distribution)):
    return distribution.tracker.stats_for_subscriber(subscriber_id)
