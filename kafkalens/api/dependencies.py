"""Global reusable FastAPI dependencies (JWT, services wired in the lifespan)."""
from fastapi import Header, Request

from kafkalens.core.config import get_settings
from kafkalens.core.security import TokenValidationError, decode_jwt
from kafkalens.domain.services.broker_service import BrokerService
from kafkalens.domain.services.cluster_service import ClusterService
from kafkalens.domain.services.consumer_service import ConsumerService
from kafkalens.domain.services.lag_service import LagService
from kafkalens.domain.services.topic_service import TopicService
from kafkalens.services.message_sampler import MessageSampler


def require_jwt(
    authorization: str | None = Header(default=None, alias="Authorization")
) -> dict:
    """Validate a Bearer JWT and return the decoded claims.

    With ``auth_enabled`` off every request passes with empty claims.
    """
    if not get_settings().auth_enabled:
        return {}
    if not authorization or not authorization.startswith("Bearer "):
        raise TokenValidationError("Missing bearer token")
    return decode_jwt(authorization.removeprefix("Bearer ").strip())


# ---------- service accessors ----------
def get_cluster_service(request: Request) -> ClusterService:
    return request.app.state.cluster_service


def get_topic_service(request: Request) -> TopicService:
    return request.app.state.topic_service


def get_consumer_service(request: Request) -> ConsumerService:
    return request.app.state.consumer_service


def get_lag_service(request: Request) -> LagService:
    return request.app.state.lag_service


def get_broker_service(request: Request) -> BrokerService:
    return request.app.state.broker_service


def get_message_sampler(request: Request) -> MessageSampler:
    return request.app.state.message_sampler
