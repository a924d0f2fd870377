"""Cluster-level endpoints: list clusters, show one, test connectivity."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from kafkalens.api.dependencies import get_cluster_service
from kafkalens.domain.models.cluster import ClusterSummary, ConnectionTestResult
from kafkalens.domain.services.cluster_service import ClusterService

router = APIRouter()


# ---------- routes -------------------------------------------------------------
@router.get("", response_model=list[ClusterSummary])
def list_clusters(
    svc: ClusterService = Depends(get_cluster_service),
) -> list[ClusterSummary]:
    """Return all configured Kafka clusters."""
    return svc.list_clusters()


@router.get("/{cid}", response_model=ClusterSummary)
def get_cluster(
    cid: str = Path(..., description="Cluster identifier"),
    svc: ClusterService = Depends(get_cluster_service),
) -> ClusterSummary:
    return svc.get_cluster(cid)


@router.post("/{cid}/test", response_model=ConnectionTestResult)
def test_connection(
    cid: str = Path(..., description="Cluster identifier"),
    svc: ClusterService = Depends(get_cluster_service),
) -> ConnectionTestResult:
    """Run describe-cluster against *cid*; failures are reported in the body."""
    return svc.test_connection(cid)
