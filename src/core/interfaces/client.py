"""Registry client contract.

The lookup use case runs against `BlockstackClient` or an in-memory fake.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable

from core.domain.models import ApiResult


@runtime_checkable
class RegistryClient(Protocol):
    """Minimal contract for a name-registry client.

    Design rules:
    - Every call is synchronous and returns a result value, never raises for
      network or parse problems.
    - Threading is the caller's choice (see `core.services.background`).
    """

    def lookup_users(self, usernames: str | Iterable[str]) -> ApiResult: ...

    def lookup_profiles(self, usernames: str | Iterable[str]) -> ApiResult: ...

    def search_users(self, query: str) -> ApiResult: ...

    def register_user(
        self,
        username: str,
        recipient_address: str,
        profile: dict[str, Any] | None = None,
    ) -> ApiResult: ...

    def update_user(self, username: str, profile: dict[str, Any], owner_pubkey: str) -> ApiResult: ...

    def transfer_user(self, username: str, transfer_address: str, owner_pubkey: str) -> ApiResult: ...

    def broadcast_transaction(self, signed_hex: str) -> ApiResult: ...

    def get_unspent_outputs(self, address: str) -> ApiResult: ...

    def get_names_owned_by_address(self, address: str) -> ApiResult: ...

    def get_dkim_public_key(self, domain: str) -> ApiResult: ...
