"""Domain models (Pydantic v2).

Operations, requests and call results. Configuration and requests are
frozen so they can be shared across worker threads.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Operation(str, Enum):
    """Remote capabilities exposed by the name-registry API."""

    LOOKUP_USERS = "lookup_users"
    SEARCH_USERS = "search_users"
    REGISTER_USER = "register_user"
    UPDATE_USER = "update_user"
    TRANSFER_USER = "transfer_user"
    BROADCAST_TRANSACTION = "broadcast_transaction"
    GET_UNSPENT_OUTPUTS = "get_unspent_outputs"
    GET_NAMES_OWNED_BY_ADDRESS = "get_names_owned_by_address"
    GET_DKIM_PUBLIC_KEY = "get_dkim_public_key"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


class Resource(str, Enum):
    """Top-level resource categories of the service."""

    USERS = "users"
    SEARCH = "search"
    TRANSACTIONS = "transactions"
    ADDRESSES = "addresses"
    DOMAINS = "domains"


class ErrorKind(str, Enum):
    """Failure taxonomy surfaced by the client.

    Service-level errors ("user not found") are not part of it: they arrive
    inside a successful JSON payload and are interpreted by the caller.
    """

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    TRANSPORT = "transport"
    PARSE = "parse"


class ClientConfig(BaseModel):
    """Static credentials of one client instance."""

    model_config = ConfigDict(frozen=True)

    app_id: str | None = Field(
        default=None,
        description="App id obtained from the Onename API.",
    )
    app_secret: str | None = Field(
        default=None,
        repr=False,
        description="App secret obtained from the Onename API.",
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.app_id and self.app_id.strip()) and bool(
            self.app_secret and self.app_secret.strip()
        )


class ApiRequest(BaseModel):
    """A single request, built per call and discarded afterwards."""

    model_config = ConfigDict(frozen=True)

    operation: Operation
    method: HttpMethod
    url: str = Field(..., min_length=1)
    body: dict[str, Any] | None = Field(
        default=None,
        description="JSON object sent as the body of POST requests.",
    )


class ApiSuccess(BaseModel):
    """Parsed JSON returned by the service.

    `data` may still carry an embedded `"error"` field; that is a domain
    error the caller has to inspect.
    """

    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    data: Any = Field(default=None, description="Parsed JSON value.")
    status_code: int | None = None


class ApiFailure(BaseModel):
    """The call did not produce a usable JSON value."""

    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    kind: ErrorKind
    message: str = Field(..., min_length=1)
    status_code: int | None = None


ApiResult = Union[ApiSuccess, ApiFailure]
