"""Translate kafka-python failures into the gateway's error taxonomy."""
from __future__ import annotations

import socket
from concurrent.futures import TimeoutError as FutureTimeoutError

from kafka import errors as kerr

from kafkalens.core.exceptions import (
    AuthenticationFailureError,
    AuthorizationFailureError,
    ConnectionFailureError,
    KafkaLensError,
    OperationTimeoutError,
)

TIMEOUT_ERRORS = (
    kerr.KafkaTimeoutError,        # client-side request timeout
    kerr.RequestTimedOutError,     # broker-side request timeout
    FutureTimeoutError,
    socket.timeout,
)
AUTHENTICATION_ERRORS = (
    kerr.SaslAuthenticationFailedError,
    kerr.UnsupportedSaslMechanismError,
    kerr.IllegalSaslStateError,
)
AUTHORIZATION_ERRORS = (
    kerr.TopicAuthorizationFailedError,
    kerr.GroupAuthorizationFailedError,
    kerr.ClusterAuthorizationFailedError,
)


def translate(exc: BaseException, cluster_id: str, operation: str) -> KafkaLensError:
    """Map *exc* to a :class:`RemoteOperationError` subclass.

    Errors that are already part of the taxonomy pass through unchanged.
    """
    if isinstance(exc, KafkaLensError):
        return exc
    if isinstance(exc, TIMEOUT_ERRORS):
        return OperationTimeoutError(cluster_id, operation)
    if isinstance(exc, AUTHENTICATION_ERRORS):
        return AuthenticationFailureError(cluster_id, operation)
    if isinstance(exc, AUTHORIZATION_ERRORS):
        return AuthorizationFailureError(cluster_id, operation)
    return ConnectionFailureError(cluster_id, operation)
