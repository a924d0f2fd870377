"""Error taxonomy and RFC 7807 *Problem Details* model.

Every failure the core reports is a :class:`KafkaLensError`. The four
remote kinds share :class:`RemoteOperationError`, which records the cluster
and the operation that failed; the kafka-python exception, if any, is only
kept as ``__cause__``.
"""
from __future__ import annotations

import enum
from typing import Any, Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(str, enum.Enum):
    """Stable, machine-readable error codes."""

    CLUSTER_NOT_FOUND = "CLUSTER_NOT_FOUND"
    CLUSTER_CONFIG_ERROR = "CLUSTER_CONFIG_ERROR"
    TOPIC_NOT_FOUND = "TOPIC_NOT_FOUND"
    CONSUMER_GROUP_NOT_FOUND = "CONSUMER_GROUP_NOT_FOUND"
    BROKER_NOT_FOUND = "BROKER_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    KAFKA_TIMEOUT = "KAFKA_TIMEOUT"
    KAFKA_CONNECTION_ERROR = "KAFKA_CONNECTION_ERROR"
    KAFKA_AUTH_ERROR = "KAFKA_AUTH_ERROR"
    KAFKA_AUTHORIZATION_ERROR = "KAFKA_AUTHORIZATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class RemoteErrorKind(str, enum.Enum):
    """Classification of a failed remote call."""

    TIMEOUT = "Timeout"
    CONNECTION_FAILURE = "ConnectionFailure"
    AUTHENTICATION_FAILURE = "AuthenticationFailure"
    AUTHORIZATION_FAILURE = "AuthorizationFailure"


class KafkaLensError(Exception):
    """Base class for every error raised by the gateway core."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})


class ClusterNotFoundError(KafkaLensError):
    """The cluster id is unknown to the descriptor repository."""

    code = ErrorCode.CLUSTER_NOT_FOUND

    def __init__(self, cluster_id: str) -> None:
        super().__init__(f"Cluster not found: {cluster_id}", {"clusterId": cluster_id})
        self.cluster_id = cluster_id


class ClusterConfigError(KafkaLensError):
    """Static cluster configuration is unreadable or inconsistent."""

    code = ErrorCode.CLUSTER_CONFIG_ERROR


class RequestValidationError(KafkaLensError):
    """Malformed request parameters, detected before any remote call."""

    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class ResourceNotFoundError(KafkaLensError):
    """A topic, group or broker is absent on an otherwise healthy cluster."""

    def __init__(self, code: ErrorCode, cluster_id: str, resource: str, name: Any) -> None:
        super().__init__(
            f"{resource} not found: {name} in cluster {cluster_id}",
            {"clusterId": cluster_id, "resource": resource, "name": str(name)},
        )
        self.code = code
        self.cluster_id = cluster_id
        self.name = name

    @classmethod
    def topic(cls, cluster_id: str, topic: str) -> "ResourceNotFoundError":
        return cls(ErrorCode.TOPIC_NOT_FOUND, cluster_id, "Topic", topic)

    @classmethod
    def consumer_group(cls, cluster_id: str, group_id: str) -> "ResourceNotFoundError":
        return cls(ErrorCode.CONSUMER_GROUP_NOT_FOUND, cluster_id, "ConsumerGroup", group_id)

    @classmethod
    def broker(cls, cluster_id: str, broker_id: int) -> "ResourceNotFoundError":
        return cls(ErrorCode.BROKER_NOT_FOUND, cluster_id, "Broker", broker_id)


class RemoteOperationError(KafkaLensError):
    """A remote call against a cluster failed.

    Attributes
    ----------
    kind : RemoteErrorKind
        Which of the four remote failure kinds occurred.
    cluster_id : str
        Logical cluster the call was issued against.
    operation : str
        Gateway operation name, e.g. ``"listTopics"``.
    """

    kind: RemoteErrorKind = RemoteErrorKind.CONNECTION_FAILURE

    def __init__(self, cluster_id: str, operation: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or self._default_message(cluster_id, operation),
            {"clusterId": cluster_id, "operation": operation},
        )
        self.cluster_id = cluster_id
        self.operation = operation

    def _default_message(self, cluster_id: str, operation: str) -> str:
        return f"Kafka operation failed: {operation} on cluster {cluster_id}"


class OperationTimeoutError(RemoteOperationError):
    code = ErrorCode.KAFKA_TIMEOUT
    kind = RemoteErrorKind.TIMEOUT

    def _default_message(self, cluster_id: str, operation: str) -> str:
        return f"Kafka operation timed out: {operation} on cluster {cluster_id}"


class ConnectionFailureError(RemoteOperationError):
    code = ErrorCode.KAFKA_CONNECTION_ERROR
    kind = RemoteErrorKind.CONNECTION_FAILURE

    def _default_message(self, cluster_id: str, operation: str) -> str:
        return f"Failed to connect to Kafka cluster: {cluster_id} ({operation})"


class AuthenticationFailureError(RemoteOperationError):
    code = ErrorCode.KAFKA_AUTH_ERROR
    kind = RemoteErrorKind.AUTHENTICATION_FAILURE

    def _default_message(self, cluster_id: str, operation: str) -> str:
        return f"Kafka authentication failed: {operation} on cluster {cluster_id}"


class AuthorizationFailureError(RemoteOperationError):
    code = ErrorCode.KAFKA_AUTHORIZATION_ERROR
    kind = RemoteErrorKind.AUTHORIZATION_FAILURE

    def _default_message(self, cluster_id: str, operation: str) -> str:
        return f"Kafka authorization failed: {operation} on cluster {cluster_id}"


# --------------------------------------------------------------------------- #
# RFC 7807 body                                                               #
# --------------------------------------------------------------------------- #
class ProblemDetail(BaseModel):
    """Data model that serialises to RFC 7807 JSON.

    Attributes
    ----------
    type : str
        A URI reference that identifies the problem type.
    title : str
        A short human-readable summary of the problem type.
    status : int
        The HTTP status code.
    detail : str | None
        A human-readable explanation specific to this occurrence.
    instance : str
        A URI reference that identifies the specific occurrence.
    code : str
        One of :class:`ErrorCode`.
    details : dict
        Context such as the cluster id and operation name.
    """

    model_config = ConfigDict(json_schema_extra={"required": ["type", "title", "status"]})

    type: str = Field("about:blank", examples=["/errors/cluster-not-found"])
    title: str
    status: int = Field(..., ge=400, le=599)
    detail: Optional[str] = None
    instance: str = Field(default_factory=lambda: f"urn:uuid:{uuid4()}")
    code: str = ErrorCode.INTERNAL_ERROR.value
    details: Dict[str, Any] = Field(default_factory=dict)
