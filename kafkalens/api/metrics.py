from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from kafkalens.core.metrics import CACHED_CLIENTS, REGISTRY

router = APIRouter()


@router.get("/metrics")
def metrics(request: Request):
    registry = getattr(request.app.state, "registry", None)
    if registry is not None:
        CACHED_CLIENTS.set(registry.cached_count())
    return Response(generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
