"""Unit tests for BlockstackClient against a mocked transport."""

import logging

import httpx
import pytest

from adapters.blockstack_client import BlockstackClient
from conftest import BASE_URL, json_handler
from core.domain.models import ApiFailure, ApiSuccess, ClientConfig, ErrorKind, HttpMethod, Operation
from core.endpoints import EndpointRegistry

PRINTABLE_ASCII = "".join(chr(c) for c in range(32, 127))

ALL_OPERATIONS = [
    pytest.param(lambda c: c.lookup_users(["alice"]), id="lookup_users"),
    pytest.param(lambda c: c.lookup_profiles(["alice"]), id="lookup_profiles"),
    pytest.param(lambda c: c.search_users("wenger"), id="search_users"),
    pytest.param(lambda c: c.register_user("alice", "1abc"), id="register_user"),
    pytest.param(lambda c: c.update_user("alice", {"bio": "x"}, "02ab"), id="update_user"),
    pytest.param(lambda c: c.transfer_user("alice", "1xyz", "02ab"), id="transfer_user"),
    pytest.param(lambda c: c.broadcast_transaction("0100ab"), id="broadcast_transaction"),
    pytest.param(lambda c: c.get_unspent_outputs("1abc"), id="get_unspent_outputs"),
    pytest.param(lambda c: c.get_names_owned_by_address("1abc"), id="get_names_owned_by_address"),
    pytest.param(lambda c: c.get_dkim_public_key("onename.com"), id="get_dkim_public_key"),
    pytest.param(
        lambda c: c.execute(EndpointRegistry(BASE_URL).build_request(Operation.GET_DKIM_PUBLIC_KEY, domain="x.com")),
        id="execute",
    ),
]


class TestConfiguration:
    """A client without credentials never touches the network."""

    @pytest.mark.parametrize("call", ALL_OPERATIONS)
    @pytest.mark.parametrize(
        "client_config",
        [
            None,
            ClientConfig(),
            ClientConfig(app_id="id"),
            ClientConfig(app_secret="secret"),
            ClientConfig(app_id="  ", app_secret="secret"),
        ],
    )
    def test_unconfigured_client_fails_without_io(self, make_client, call, client_config):
        client, transport = make_client(client_config=client_config)

        result = call(client)

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.CONFIGURATION
        assert transport.requests == []

    def test_is_configured(self, make_client):
        client, _ = make_client()
        assert client.is_configured

    def test_from_settings_reads_credentials(self, settings):
        configured = settings.model_copy(update={"app_id": "id", "app_secret": "secret"})
        client = BlockstackClient.from_settings(configured)
        assert client.is_configured
        assert client.registry.base_url == BASE_URL


class TestLookup:
    """Tests for lookup_users and lookup_profiles."""

    def test_lookup_builds_comma_joined_path(self, make_client):
        client, transport = make_client(json_handler({}))

        client.lookup_users(["alice", "bob"])

        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/v1/users/alice,bob"

    def test_messy_input_builds_same_request_as_clean_input(self, make_client):
        client, transport = make_client(json_handler({}))

        client.lookup_users("alice, bob,,carol ")
        client.lookup_users("alice,bob,carol")

        first, second = transport.requests
        assert str(first.url) == str(second.url)
        assert first.url.path == "/v1/users/alice,bob,carol"

    @pytest.mark.parametrize("usernames", [[], "", " , ,", ["", "  "]])
    def test_empty_lookup_skips_network(self, make_client, usernames):
        client, transport = make_client()

        result = client.lookup_users(usernames)

        assert isinstance(result, ApiSuccess)
        assert result.data == {}
        assert transport.requests == []

    def test_lookup_returns_raw_mapping(self, make_client):
        payload = {"alice": {"error": "not found"}, "bob": {"profile": "..."}}
        client, _ = make_client(json_handler(payload))

        result = client.lookup_users(["alice", "bob"])

        assert isinstance(result, ApiSuccess)
        assert result.data == payload
        assert result.status_code == 200

    def test_lookup_profiles_drops_error_entries(self, make_client):
        payload = {"alice": {"error": "not found"}, "bob": {"profile": "..."}}
        client, _ = make_client(json_handler(payload))

        result = client.lookup_profiles(["alice", "bob"])

        assert isinstance(result, ApiSuccess)
        assert result.data == {"bob": {"profile": "..."}}

    def test_lookup_profiles_ignores_top_level_error_body(self, make_client):
        client, _ = make_client(json_handler({"error": {"message": "user not found"}}, status_code=404))

        result = client.lookup_profiles(["ghost"])

        assert isinstance(result, ApiSuccess)
        assert result.data == {}
        assert result.status_code == 404

    def test_lookup_profiles_ignores_unrequested_keys(self, make_client):
        payload = {"ghost": {"error": "not found"}, "meta": {"version": 1}}
        client, _ = make_client(json_handler(payload))

        result = client.lookup_profiles(["ghost"])

        assert isinstance(result, ApiSuccess)
        assert result.data == {}

    def test_lookup_profiles_accepts_generator_input(self, make_client):
        client, transport = make_client(json_handler({"bob": {"profile": "..."}}))

        result = client.lookup_profiles(name for name in ["bob"])

        assert transport.requests[0].url.path == "/v1/users/bob"
        assert result.data == {"bob": {"profile": "..."}}

    def test_lookup_profiles_rejects_non_object_payload(self, make_client):
        client, _ = make_client(json_handler(["alice"]))

        result = client.lookup_profiles(["alice"])

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.PARSE


class TestRequests:
    """Request shape of each operation."""

    def test_search_encodes_query(self, make_client):
        client, transport = make_client(json_handler({"results": []}))

        client.search_users("muneeb ali&co")

        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/v1/search"
        assert request.url.params["query"] == "muneeb ali&co"

    @pytest.mark.parametrize("query", [PRINTABLE_ASCII, " a ", "  leading", "trailing\t"])
    def test_search_sends_query_verbatim(self, make_client, query):
        client, transport = make_client(json_handler({"results": []}))

        client.search_users(query)

        assert transport.requests[0].url.params["query"] == query

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_blank_search_is_rejected_without_io(self, make_client, query):
        client, transport = make_client()

        result = client.search_users(query)

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.VALIDATION
        assert transport.requests == []

    def test_register_omits_profile_when_absent(self, make_client):
        client, transport = make_client(json_handler({"status": "success"}))

        result = client.register_user("alice", "1abc")

        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1/users"
        assert request.headers["Content-Type"] == "application/json"
        assert transport.last_json == {"username": "alice", "recipient_address": "1abc"}
        assert isinstance(result, ApiSuccess)
        assert result.data == {"status": "success"}

    def test_register_includes_profile(self, make_client):
        client, transport = make_client(json_handler({"status": "success"}))

        client.register_user("alice", "1abc", profile={"bio": "hi"})

        assert transport.last_json == {
            "username": "alice",
            "recipient_address": "1abc",
            "profile": {"bio": "hi"},
        }

    def test_register_requires_address(self, make_client):
        client, transport = make_client()

        result = client.register_user("alice", " ")

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.VALIDATION
        assert "recipient_address" in result.message
        assert transport.requests == []

    def test_update_posts_profile_and_owner_key(self, make_client):
        client, transport = make_client(json_handler({"unsigned_tx": "0100"}))

        result = client.update_user("alice", {"bio": "new"}, "02ab")

        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1/users/alice/update"
        assert transport.last_json == {"profile": {"bio": "new"}, "owner_pubkey": "02ab"}
        assert result.data == {"unsigned_tx": "0100"}

    def test_transfer_posts_address_and_owner_key(self, make_client):
        client, transport = make_client(json_handler({"unsigned_tx": "0100"}))

        client.transfer_user("alice", "1xyz", "02ab")

        assert transport.requests[0].url.path == "/v1/users/alice/update"
        assert transport.last_json == {"transfer_address": "1xyz", "owner_pubkey": "02ab"}

    def test_broadcast_posts_signed_hex(self, make_client):
        client, transport = make_client(json_handler({"status": "success"}))

        client.broadcast_transaction("0100ab")

        assert transport.requests[0].url.path == "/v1/transactions"
        assert transport.last_json == {"signed_hex": "0100ab"}

    @pytest.mark.parametrize(
        "call, path",
        [
            (lambda c: c.get_unspent_outputs("1abc"), "/v1/addresses/1abc/unspents"),
            (lambda c: c.get_names_owned_by_address("1abc"), "/v1/addresses/1abc/names"),
            (lambda c: c.get_dkim_public_key("onename.com"), "/v1/domains/onename.com/dkim"),
        ],
    )
    def test_get_queries(self, make_client, call, path):
        client, transport = make_client(json_handler([]))

        result = call(client)

        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.path == path
        assert request.content == b""
        assert isinstance(result, ApiSuccess)
        assert result.data == []

    def test_sends_credentials_and_headers(self, make_client, settings):
        client, transport = make_client(json_handler({}))

        client.get_dkim_public_key("onename.com")

        request = transport.requests[0]
        assert request.headers["Authorization"].startswith("Basic ")
        assert request.headers["Accept"] == "application/json"
        assert request.headers["User-Agent"] == settings.user_agent

    def test_execute_runs_prepared_request(self, make_client):
        client, transport = make_client(json_handler({"ok": 1}))
        request = client.registry.build_request(Operation.BROADCAST_TRANSACTION, body={"signed_hex": "ff"})

        result = client.execute(request)

        assert request.method is HttpMethod.POST
        assert transport.last_json == {"signed_hex": "ff"}
        assert result.data == {"ok": 1}


class TestFailures:
    """Transport and parse failures come back as ApiFailure values."""

    def test_non_json_body_is_parse_error(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        result = client.lookup_users(["alice"])

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.PARSE
        assert result.status_code == 200

    def test_empty_body_is_parse_error(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(200, content=b""))

        result = client.get_dkim_public_key("onename.com")

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.PARSE

    def test_connection_failure_is_transport_error_and_closes(self, make_client):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, transport = make_client(refuse)

        result = client.lookup_users(["alice"])

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.TRANSPORT
        assert "connection refused" in result.message
        assert transport.closed

    def test_timeout_is_transport_error(self, make_client):
        def slow(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        client, transport = make_client(slow)

        result = client.search_users("wenger")

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.TRANSPORT
        assert "timed out" in result.message
        assert transport.closed

    def test_successful_call_also_closes_transport(self, make_client):
        client, transport = make_client(json_handler({}))

        client.lookup_users(["alice"])

        assert transport.closed

    def test_invalid_url_is_transport_error(self, settings, config):
        registry = EndpointRegistry("https://api.example.test:notaport/v1")
        client = BlockstackClient(config, settings=settings, registry=registry)

        result = client.get_dkim_public_key("onename.com")

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.TRANSPORT

    def test_error_status_without_body_is_transport_error(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(503))

        result = client.lookup_users(["alice"])

        assert isinstance(result, ApiFailure)
        assert result.kind is ErrorKind.TRANSPORT
        assert result.status_code == 503
        assert result.message == "HTTP 503"

    def test_error_status_with_json_body_is_passed_through(self, make_client):
        client, _ = make_client(json_handler({"error": {"message": "user not found"}}, status_code=404))

        result = client.lookup_users(["ghost"])

        assert isinstance(result, ApiSuccess)
        assert result.status_code == 404
        assert result.data == {"error": {"message": "user not found"}}

    def test_domain_error_in_200_payload_is_success(self, make_client):
        client, _ = make_client(json_handler({"status": "error", "message": "name taken"}))

        result = client.register_user("alice", "1abc")

        assert isinstance(result, ApiSuccess)
        assert result.data["status"] == "error"

    def test_failures_are_logged_without_secrets(self, make_client, caplog):
        caplog.set_level(logging.DEBUG, logger="adapters.blockstack_client")
        client, _ = make_client(lambda request: httpx.Response(200, text="nope"))

        client.lookup_users(["alice"])

        assert any(r.levelno == logging.WARNING and "parse" in r.getMessage() for r in caplog.records)
        assert "app-secret" not in caplog.text
