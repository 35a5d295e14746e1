"""Domain models for the name-registry API (Pydantic v2)."""

from core.domain.models import (
    ApiFailure,
    ApiRequest,
    ApiResult,
    ApiSuccess,
    ClientConfig,
    ErrorKind,
    HttpMethod,
    Operation,
    Resource,
)

__all__ = [
    "ApiFailure",
    "ApiRequest",
    "ApiResult",
    "ApiSuccess",
    "ClientConfig",
    "ErrorKind",
    "HttpMethod",
    "Operation",
    "Resource",
]
