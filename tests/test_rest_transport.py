import json

import httpx
import pytest
from jose import jwt

from rentease.backend.client import BackendClient
from rentease.backend.errors import AuthError, BackendError, MultipleRowsError, NoRowsError
from rentease.backend.rest import RestTransport

pytestmark = pytest.mark.anyio

BASE_URL = "https://project.supabase.co"
ANON_KEY = "anon-key"


@pytest.fixture
def rest(new_storage):
	def _client(handler, jwt_secret=""):
		http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
		transport = RestTransport(BASE_URL, ANON_KEY, jwt_secret=jwt_secret, http_client=http)
		return BackendClient(transport, new_storage())
	return _client


def _session_payload(user_id="user-1", access_token="access-1"):
	return {
		"access_token": access_token,
		"refresh_token": "refresh-1",
		"expires_at": 1900000000,
		"user": {"id": user_id, "email": "ada@example.com"},
	}


async def test_select_builds_postgrest_query(rest):
	seen = []

	def handler(request):
		seen.append(request)
		return httpx.Response(200, json=[{"id": "1"}, {"id": "2"}])

	client = rest(handler)
	rows = await client.table("items").select("*").eq("owner_id", "u1").order("created_at", desc=True).execute()

	assert rows == [{"id": "1"}, {"id": "2"}]
	request = seen[0]
	assert request.method == "GET"
	assert request.url.path == "/rest/v1/items"
	assert request.url.params["select"] == "*"
	assert request.url.params["owner_id"] == "eq.u1"
	assert request.url.params["order"] == "created_at.desc"
	assert request.headers["apikey"] == ANON_KEY
	assert request.headers["Authorization"] == f"Bearer {ANON_KEY}"


async def test_single_row_contract(rest):
	payloads = iter([[], [{"id": "1"}, {"id": "2"}], []])
	client = rest(lambda request: httpx.Response(200, json=next(payloads)))

	with pytest.raises(NoRowsError) as not_found:
		await client.table("items").select("*").eq("id", "x").single().execute()
	with pytest.raises(MultipleRowsError):
		await client.table("items").select("*").single().execute()
	assert await client.table("profiles").select("*").eq("id", "x").maybe_single().execute() is None
	assert not_found.value.code == "PGRST116"


async def test_insert_without_select_returns_nothing(rest):
	seen = []

	def handler(request):
		seen.append(request)
		return httpx.Response(201)

	client = rest(handler)
	result = await client.table("items").insert([{"title": "Tent", "price": 19.99}]).execute()

	assert result is None
	assert seen[0].method == "POST"
	assert seen[0].headers["Prefer"] == "return=minimal"
	assert json.loads(seen[0].content) == [{"title": "Tent", "price": 19.99}]


async def test_insert_then_select_single_returns_the_row(rest):
	seen = []

	def handler(request):
		seen.append(request)
		return httpx.Response(201, json=[{"id": "u1", "full_name": ""}])

	client = rest(handler)
	row = await client.table("profiles").insert([{"id": "u1", "full_name": ""}]).select().single().execute()

	assert row == {"id": "u1", "full_name": ""}
	assert seen[0].headers["Prefer"] == "return=representation"


async def test_upsert_merges_on_conflict_key(rest):
	seen = []

	def handler(request):
		seen.append(request)
		return httpx.Response(201)

	client = rest(handler)
	await client.table("profiles").upsert({"id": "u1", "full_name": "Ada"}, on_conflict="id").execute()

	request = seen[0]
	assert request.url.params["on_conflict"] == "id"
	assert request.headers["Prefer"] == "resolution=merge-duplicates,return=minimal"


async def test_error_payload_becomes_backend_error(rest):
	payload = {"code": "42501", "message": "new row violates row-level security policy", "details": None}
	client = rest(lambda request: httpx.Response(403, json=payload))

	with pytest.raises(BackendError) as error:
		await client.table("items").insert([{"title": "x"}]).execute()

	assert str(error.value) == "new row violates row-level security policy"
	assert error.value.code == "42501"
	assert error.value.status == 403


async def test_network_failure_becomes_backend_error(rest):
	def handler(request):
		raise httpx.ConnectError("connection refused")

	client = rest(handler)

	with pytest.raises(BackendError):
		await client.table("items").select("*").execute()


async def test_sign_in_stores_session_and_authorizes_data_calls(rest):
	seen = []

	def handler(request):
		seen.append(request)
		if request.url.path == "/auth/v1/token":
			return httpx.Response(200, json=_session_payload())
		return httpx.Response(200, json=[])

	client = rest(handler)
	session = await client.auth.sign_in_with_password("ada@example.com", "secret123")
	await client.table("items").select("*").execute()

	assert session.user.id == "user-1"
	assert seen[0].url.params["grant_type"] == "password"
	assert client.auth._storage.tokens == ("access-1", "refresh-1")
	assert seen[1].headers["Authorization"] == "Bearer access-1"


async def test_bad_credentials_raise_auth_error(rest):
	body = {"error": "invalid_grant", "error_description": "Invalid login credentials"}
	client = rest(lambda request: httpx.Response(400, json=body))

	with pytest.raises(AuthError) as error:
		await client.auth.sign_in_with_password("ada@example.com", "nope")

	assert str(error.value) == "Invalid login credentials"
	assert client.auth.session is None


async def test_sign_up_awaiting_confirmation_has_no_session(rest):
	client = rest(lambda request: httpx.Response(200, json={"id": "user-1", "email": "ada@example.com"}))

	assert await client.auth.sign_up("ada@example.com", "secret123") is None
	assert client.auth.session is None


async def test_get_user_verifies_jwt_locally_when_secret_is_known(rest):
	def handler(request):
		raise AssertionError("no HTTP call expected")

	secret = "super-secret"
	token = jwt.encode({"sub": "user-1", "email": "ada@example.com", "aud": "authenticated"}, secret, algorithm="HS256")
	client = rest(handler, jwt_secret=secret)

	user = await client.transport.get_user(token)

	assert user.id == "user-1"
	with pytest.raises(AuthError):
		await client.transport.get_user(jwt.encode({"sub": "x", "aud": "authenticated"}, "other", algorithm="HS256"))


async def test_get_user_asks_the_server_without_secret(rest):
	def handler(request):
		assert request.headers["Authorization"] == "Bearer token-1"
		return httpx.Response(200, json={"id": "user-1", "email": "ada@example.com"})

	user = await rest(handler).transport.get_user("token-1")

	assert user.email == "ada@example.com"
