"""Synchronous client for the name-registry API.

Responsibility:
- Check preconditions (credentials, required inputs) before touching the network.
- Build the request through the `EndpointRegistry`.
- Perform one blocking HTTP call, buffer the whole body and parse it as JSON.
- Return an `ApiSuccess` or an `ApiFailure`; runtime failures never raise.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.models import (
    ApiFailure,
    ApiRequest,
    ApiResult,
    ApiSuccess,
    ClientConfig,
    ErrorKind,
    Operation,
)
from core.endpoints import EndpointRegistry
from core.urls import normalize_identifiers

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "client not configured: app_id and app_secret are required"


class BlockstackClient:
    """One method per remote capability, all sharing the same request contract."""

    def __init__(
        self,
        config: ClientConfig | None,
        *,
        settings: AppSettings | None = None,
        registry: EndpointRegistry | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._settings = settings or AppSettings()
        self._registry = registry or EndpointRegistry(self._settings.api_base_url)
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> "BlockstackClient":
        settings = settings or AppSettings()
        return cls(settings.client_config(), settings=settings, transport=transport)

    @property
    def config(self) -> ClientConfig | None:
        return self._config

    @property
    def registry(self) -> EndpointRegistry:
        return self._registry

    @property
    def is_configured(self) -> bool:
        return self._config is not None and self._config.is_configured

    # Users

    def lookup_users(self, usernames: str | Iterable[str]) -> ApiResult:
        """Look up one or more usernames in a single call.

        The service answers with a mapping keyed by username; each value is
        either a profile record or an object with an `"error"` field.
        """

        failure = self._check_configured(Operation.LOOKUP_USERS)
        if failure is not None:
            return failure

        names = normalize_identifiers(usernames)
        if not names:
            return ApiSuccess(data={})

        return self.execute(self._registry.build_request(Operation.LOOKUP_USERS, usernames=names))

    def lookup_profiles(self, usernames: str | Iterable[str]) -> ApiResult:
        """Like `lookup_users`, keeping only requested names that resolved to a profile.

        Keys nobody asked for (a top-level `"error"`, metadata) are ignored.
        """

        names = normalize_identifiers(usernames)
        result = self.lookup_users(names)
        if isinstance(result, ApiFailure):
            return result
        if not isinstance(result.data, dict):
            return self._fail(
                Operation.LOOKUP_USERS,
                ErrorKind.PARSE,
                "lookup response is not a JSON object",
                result.status_code,
            )

        found = {
            name: result.data[name]
            for name in names
            if isinstance(result.data.get(name), dict) and "error" not in result.data[name]
        }
        return ApiSuccess(data=found, status_code=result.status_code)

    def search_users(self, query: str) -> ApiResult:
        op = Operation.SEARCH_USERS
        failure = self._check_configured(op) or self._check_required(op, query=query)
        if failure is not None:
            return failure
        return self.execute(self._registry.build_request(op, query={"query": query}))

    def register_user(
        self,
        username: str,
        recipient_address: str,
        profile: dict[str, Any] | None = None,
    ) -> ApiResult:
        op = Operation.REGISTER_USER
        failure = self._check_configured(op) or self._check_required(
            op, username=username, recipient_address=recipient_address
        )
        if failure is not None:
            return failure

        body: dict[str, Any] = {
            "username": username.strip(),
            "recipient_address": recipient_address.strip(),
        }
        if profile is not None:
            body["profile"] = profile
        return self.execute(self._registry.build_request(op, body=body))

    def update_user(self, username: str, profile: dict[str, Any], owner_pubkey: str) -> ApiResult:
        """Request an unsigned update transaction (`unsigned_tx`) for `profile`."""

        op = Operation.UPDATE_USER
        failure = self._check_configured(op) or self._check_required(
            op, username=username, owner_pubkey=owner_pubkey
        )
        if failure is not None:
            return failure

        body = {"profile": profile, "owner_pubkey": owner_pubkey.strip()}
        return self.execute(self._registry.build_request(op, body=body, username=username.strip()))

    def transfer_user(self, username: str, transfer_address: str, owner_pubkey: str) -> ApiResult:
        """Request an unsigned transfer transaction (`unsigned_tx`) to `transfer_address`."""

        op = Operation.TRANSFER_USER
        failure = self._check_configured(op) or self._check_required(
            op,
            username=username,
            transfer_address=transfer_address,
            owner_pubkey=owner_pubkey,
        )
        if failure is not None:
            return failure

        body = {
            "transfer_address": transfer_address.strip(),
            "owner_pubkey": owner_pubkey.strip(),
        }
        return self.execute(self._registry.build_request(op, body=body, username=username.strip()))

    # Transactions

    def broadcast_transaction(self, signed_hex: str) -> ApiResult:
        op = Operation.BROADCAST_TRANSACTION
        failure = self._check_configured(op) or self._check_required(op, signed_hex=signed_hex)
        if failure is not None:
            return failure
        return self.execute(self._registry.build_request(op, body={"signed_hex": signed_hex.strip()}))

    # Addresses

    def get_unspent_outputs(self, address: str) -> ApiResult:
        return self._get_by(Operation.GET_UNSPENT_OUTPUTS, address=address)

    def get_names_owned_by_address(self, address: str) -> ApiResult:
        return self._get_by(Operation.GET_NAMES_OWNED_BY_ADDRESS, address=address)

    # Domains

    def get_dkim_public_key(self, domain: str) -> ApiResult:
        return self._get_by(Operation.GET_DKIM_PUBLIC_KEY, domain=domain)

    # Execution

    def execute(self, request: ApiRequest) -> ApiResult:
        """Run a prepared request: one round trip, full body buffered."""

        failure = self._check_configured(request.operation)
        if failure is not None:
            return failure

        op = request.operation
        logger.debug("%s %s", request.method.value, request.url)
        try:
            with build_client(self._settings, config=self._config, transport=self._transport) as client:
                response = client.request(request.method.value, request.url, json=request.body)
        except httpx.InvalidURL as exc:
            return self._fail(op, ErrorKind.TRANSPORT, f"invalid URL: {exc}")
        except httpx.TimeoutException as exc:
            return self._fail(op, ErrorKind.TRANSPORT, f"request timed out: {exc}")
        except httpx.RequestError as exc:
            return self._fail(op, ErrorKind.TRANSPORT, f"request failed: {exc}")

        logger.debug("%s -> HTTP %s (%d bytes)", op.value, response.status_code, len(response.content))
        return self._parse(op, response)

    def _parse(self, op: Operation, response: httpx.Response) -> ApiResult:
        status = response.status_code
        try:
            data = response.json()
        except ValueError:
            if not response.is_success:
                return self._fail(op, ErrorKind.TRANSPORT, f"HTTP {status}", status)
            return self._fail(op, ErrorKind.PARSE, "response body is not valid JSON", status)

        if not response.is_success:
            # Domain errors ride in the JSON body regardless of status.
            logger.info("%s returned HTTP %s with a JSON body", op.value, status)
        return ApiSuccess(data=data, status_code=status)

    def _get_by(self, op: Operation, **segments: str) -> ApiResult:
        failure = self._check_configured(op) or self._check_required(op, **segments)
        if failure is not None:
            return failure
        return self.execute(
            self._registry.build_request(op, **{k: v.strip() for k, v in segments.items()})
        )

    def _check_configured(self, op: Operation) -> ApiFailure | None:
        if self.is_configured:
            return None
        return self._fail(op, ErrorKind.CONFIGURATION, NOT_CONFIGURED)

    def _check_required(self, op: Operation, **values: str | None) -> ApiFailure | None:
        missing = [name for name, value in values.items() if value is None or not str(value).strip()]
        if not missing:
            return None
        return self._fail(op, ErrorKind.VALIDATION, f"missing required value(s): {', '.join(missing)}")

    @staticmethod
    def _fail(op: Operation, kind: ErrorKind, message: str, status_code: int | None = None) -> ApiFailure:
        logger.warning("%s failed (%s): %s", op.value, kind.value, message)
        return ApiFailure(kind=kind, message=message, status_code=status_code)
