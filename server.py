# server.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kafkalens.api.routers import api_router
from kafkalens.core.config import settings
from kafkalens.core.errors import install_exception_handlers
from kafkalens.domain.repository import YamlClusterRepository
from kafkalens.domain.services.broker_service import BrokerService
from kafkalens.domain.services.cluster_service import ClusterService
from kafkalens.domain.services.consumer_service import ConsumerService
from kafkalens.domain.services.lag_service import LagService
from kafkalens.domain.services.topic_service import TopicService
from kafkalens.infra.kafka.gateway import AdminGateway
from kafkalens.infra.kafka.registry import ClusterConnectionRegistry
from kafkalens.services.message_sampler import MessageSampler

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("kafkalens.server")


def wire(app: FastAPI, repository) -> None:
    """Build the object graph on ``app.state``."""
    registry = ClusterConnectionRegistry(repository, settings)
    gateway = AdminGateway(registry, settings)
    app.state.repository = repository
    app.state.registry = registry
    app.state.gateway = gateway
    app.state.cluster_service = ClusterService(repository, registry)
    app.state.topic_service = TopicService(gateway)
    app.state.consumer_service = ConsumerService(gateway)
    app.state.lag_service = LagService(gateway, settings)
    app.state.broker_service = BrokerService(gateway)
    app.state.message_sampler = MessageSampler(registry, settings)


# Lifespan handler replaces @app.on_event("startup"/"shutdown")
@asynccontextmanager
async def lifespan(app: FastAPI):
    if not hasattr(app.state, "registry"):
        wire(app, YamlClusterRepository(settings.clusters_config_path))
    logger.info("Kafka Lens started with %d clusters", len(app.state.repository.find_all()))
    try:
        yield
    finally:
        logger.info("Shutting down: closing admin clients")
        app.state.registry.evict_all()
        app.state.gateway.shutdown()


app = FastAPI(
    title="Kafka Lens API",
    version="1.0.0",
    lifespan=lifespan,
    # Put OpenAPI/docs under /api/v1 for consistency with the REST prefix
    openapi_url="/api/v1/openapi.json",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
)

# --- CORS: allow the dashboard during development (configurable via settings.cors_allow_origins) ---
allow_origins = settings.cors_allow_origins or [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

app.include_router(api_router, prefix="/api/v1")

if settings.metrics_enabled:
    from kafkalens.api import metrics as metrics_router
    # metrics lives at /metrics (Prometheus convention)
    app.include_router(metrics_router.router, prefix="")


@app.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "UP", "clusters": len(app.state.repository.find_all())}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=True)
