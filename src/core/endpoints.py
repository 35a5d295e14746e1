"""Endpoint registry of the name-registry service.

Pure constant lookup: each `Operation` maps to one HTTP method, one resource
and one path template. Asking for an operation that does not exist is a
programming error and raises immediately.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from core.config import DEFAULT_API_BASE_URL
from core.domain.models import ApiRequest, HttpMethod, Operation, Resource
from core.urls import build_url


@dataclass(frozen=True)
class Endpoint:
    method: HttpMethod
    resource: Resource
    path: str = ""


ENDPOINTS: Mapping[Operation, Endpoint] = {
    Operation.LOOKUP_USERS: Endpoint(HttpMethod.GET, Resource.USERS, "/{usernames}"),
    Operation.SEARCH_USERS: Endpoint(HttpMethod.GET, Resource.SEARCH),
    Operation.REGISTER_USER: Endpoint(HttpMethod.POST, Resource.USERS),
    Operation.UPDATE_USER: Endpoint(HttpMethod.POST, Resource.USERS, "/{username}/update"),
    Operation.TRANSFER_USER: Endpoint(HttpMethod.POST, Resource.USERS, "/{username}/update"),
    Operation.BROADCAST_TRANSACTION: Endpoint(HttpMethod.POST, Resource.TRANSACTIONS),
    Operation.GET_UNSPENT_OUTPUTS: Endpoint(HttpMethod.GET, Resource.ADDRESSES, "/{address}/unspents"),
    Operation.GET_NAMES_OWNED_BY_ADDRESS: Endpoint(HttpMethod.GET, Resource.ADDRESSES, "/{address}/names"),
    Operation.GET_DKIM_PUBLIC_KEY: Endpoint(HttpMethod.GET, Resource.DOMAINS, "/{domain}/dkim"),
}


class EndpointRegistry:
    """Resolves operations to fully built `ApiRequest` objects."""

    def __init__(self, base_url: str = DEFAULT_API_BASE_URL) -> None:
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    def base_for(self, resource: Resource | str) -> str:
        return f"{self._base_url}/{Resource(resource).value}"

    def endpoint(self, operation: Operation | str) -> Endpoint:
        # Operation(...) raises ValueError for unknown names.
        return ENDPOINTS[Operation(operation)]

    def build_request(
        self,
        operation: Operation | str,
        *,
        body: dict[str, Any] | None = None,
        query: Mapping[str, str] | None = None,
        **segments: Any,
    ) -> ApiRequest:
        op = Operation(operation)
        endpoint = self.endpoint(op)
        if endpoint.method is HttpMethod.GET and body is not None:
            raise ValueError(f"{op.value} is a GET operation and takes no body")

        url = build_url(self.base_for(endpoint.resource), endpoint.path, query=query, **segments)
        return ApiRequest(operation=op, method=endpoint.method, url=url, body=body)
