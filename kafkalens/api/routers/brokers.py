"""Broker snapshot endpoints: list brokers, detail view, configuration."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from kafkalens.api.dependencies import get_broker_service
from kafkalens.domain.models.cluster import Broker
from kafkalens.domain.services.broker_service import BrokerService

router = APIRouter()


@router.get("", response_model=list[Broker])
def list_brokers(
    cid: str = Path(...),
    svc: BrokerService = Depends(get_broker_service),
) -> list[Broker]:
    """Return the current broker snapshot for *cid*."""
    return svc.list_brokers(cid)


@router.get("/{bid}", response_model=Broker)
def get_broker(
    *,
    cid: str = Path(...),
    bid: int = Path(..., ge=0, description="Broker ID"),
    svc: BrokerService = Depends(get_broker_service),
) -> Broker:
    return svc.get_broker(cid, bid)


@router.get("/{bid}/config", response_model=dict[str, str | None])
def get_broker_config(
    *,
    cid: str = Path(...),
    bid: int = Path(..., ge=0, description="Broker ID"),
    svc: BrokerService = Depends(get_broker_service),
) -> dict[str, str | None]:
    """Return broker *bid*'s configuration; sensitive values are null."""
    return svc.get_broker_config(cid, bid)
