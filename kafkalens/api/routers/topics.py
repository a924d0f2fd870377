"""Topic endpoints: list, detail and bounded message sampling."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query

from kafkalens.api.dependencies import get_message_sampler, get_topic_service
from kafkalens.domain.models.message import MessageFetchRequest, SampledMessage
from kafkalens.domain.models.topic import Topic, TopicDetail
from kafkalens.domain.services.topic_service import TopicService
from kafkalens.services.message_sampler import MessageSampler

router = APIRouter()


# ---------- routes -------------------------------------------------------------
@router.get("", response_model=list[Topic])
def list_topics(
    *,
    cid: str = Path(...),
    include_internal: bool = Query(default=False, alias="includeInternal"),
    q: str | None = Query(default=None, description="Name filter (contains)"),
    svc: TopicService = Depends(get_topic_service),
) -> list[Topic]:
    """Return (optionally filtered) topics for *cid*."""
    return svc.list_topics(cid, include_internal=include_internal, name_filter=q)


@router.get("/{topic}", response_model=TopicDetail)
def get_topic(
    *,
    cid: str = Path(...),
    topic: str = Path(...),
    svc: TopicService = Depends(get_topic_service),
) -> TopicDetail:
    return svc.get_topic(cid, topic)


@router.get("/{topic}/messages", response_model=list[SampledMessage])
def sample_messages(
    *,
    cid: str = Path(...),
    topic: str = Path(...),
    partition: int = Query(..., description="Partition to read"),
    offset: int | None = Query(default=None, description="Start offset (default 0)"),
    limit: int | None = Query(default=None, description="Max records (default 100, capped at 1000)"),
    sampler: MessageSampler = Depends(get_message_sampler),
) -> list[SampledMessage]:
    """Read a bounded window of *topic*/*partition* without committing anything."""
    request = MessageFetchRequest(topic=topic, partition=partition, offset=offset, limit=limit)
    return sampler.fetch(cid, request)
