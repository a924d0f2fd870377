"""Consumer-group listing, detail, members and lag."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from kafkalens.api.dependencies import get_consumer_service, get_lag_service
from kafkalens.domain.models.consumer_group import (
    ConsumerGroup,
    ConsumerGroupListing,
    ConsumerMember,
    GroupLagSummary,
)
from kafkalens.domain.services.consumer_service import ConsumerService
from kafkalens.domain.services.lag_service import LagService

router = APIRouter()


@router.get("", response_model=list[ConsumerGroupListing])
def list_consumer_groups(
    cid: str = Path(..., description="Cluster ID"),
    svc: ConsumerService = Depends(get_consumer_service),
) -> list[ConsumerGroupListing]:
    return svc.list_groups(cid)


@router.get("/{gid}", response_model=ConsumerGroup)
def get_consumer_group(
    cid: str = Path(..., description="Cluster ID"),
    gid: str = Path(..., description="Consumer-group ID"),
    svc: ConsumerService = Depends(get_consumer_service),
) -> ConsumerGroup:
    """State, coordinator and members of *gid*."""
    return svc.get_group(cid, gid)


@router.get("/{gid}/members", response_model=list[ConsumerMember])
def get_consumer_group_members(
    cid: str = Path(..., description="Cluster ID"),
    gid: str = Path(..., description="Consumer-group ID"),
    svc: ConsumerService = Depends(get_consumer_service),
) -> list[ConsumerMember]:
    return svc.get_members(cid, gid)


@router.get("/{gid}/lag", response_model=GroupLagSummary)
def get_consumer_group_lag(
    cid: str = Path(..., description="Cluster ID"),
    gid: str = Path(..., description="Consumer-group ID"),
    svc: LagService = Depends(get_lag_service),
) -> GroupLagSummary:
    """Per-partition lag of *gid* with warning/critical counts."""
    return svc.group_lag(cid, gid)
