import threading
import time

import pytest
from jose import jwt

from rentease.backend.auth import INITIAL_SESSION, SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED
from rentease.backend.errors import AuthError, BackendError
from rentease.backend import local as local_backend
from rentease.context import AuthContext
from rentease.core.config import settings

pytestmark = pytest.mark.anyio


def _expired_access_token(user_id, email):
	now = int(time.time())
	payload = {"sub": user_id, "email": email, "type": "access", "iat": now - 7200, "exp": now - 3600}
	return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


async def test_no_stored_session_means_signed_out(make_client):
	client = make_client()
	events = []
	client.auth.on_auth_state_change(lambda event, session: events.append(event))

	ctx = await AuthContext(client.auth).initialize()

	assert ctx.user is None
	assert events == [INITIAL_SESSION]


async def test_stored_session_is_recovered(transport, make_client):
	session = await transport.sign_up("ada@example.com", "secret123")
	client = make_client((session.access_token, session.refresh_token))

	ctx = await AuthContext(client.auth).initialize()

	assert ctx.user.id == session.user.id
	assert ctx.user.email == "ada@example.com"


async def test_sign_in_and_out_flow_through_notifications(transport, make_client):
	await transport.sign_up("ada@example.com", "secret123")
	client = make_client()
	events = []
	client.auth.on_auth_state_change(lambda event, session: events.append(event))
	ctx = await AuthContext(client.auth).initialize()

	assert await ctx.sign_in("ada@example.com", "secret123")
	assert ctx.user.email == "ada@example.com"
	assert client.auth._storage.tokens is not None

	assert await ctx.sign_out()
	assert ctx.user is None
	assert ctx.session is None
	assert client.auth._storage.tokens is None
	assert events == [INITIAL_SESSION, SIGNED_IN, SIGNED_OUT]


async def test_wrong_password_is_reported_not_raised(transport, make_client):
	await transport.sign_up("ada@example.com", "secret123")
	ctx = await AuthContext(make_client().auth).initialize()

	assert not await ctx.sign_in("ada@example.com", "wrong-password")
	assert ctx.error == "Invalid login credentials"
	assert ctx.user is None


async def test_duplicate_sign_up_is_reported(transport, make_client):
	await transport.sign_up("ada@example.com", "secret123")
	ctx = await AuthContext(make_client().auth).initialize()

	assert not await ctx.sign_up("ADA@example.com", "secret123")
	assert ctx.error == "User already registered"


async def test_failed_sign_out_keeps_the_user(transport, make_client):
	session = await transport.sign_up("ada@example.com", "secret123")
	client = make_client((session.access_token, session.refresh_token))
	ctx = await AuthContext(client.auth).initialize()
	transport.sign_out_error = BackendError("network down", status=503)

	assert not await ctx.sign_out()
	assert ctx.error == "network down"
	assert ctx.user.id == session.user.id
	assert client.auth._storage.tokens is not None


async def test_sign_out_of_a_session_the_server_forgot_still_clears(transport, make_client):
	session = await transport.sign_up("ada@example.com", "secret123")
	client = make_client((session.access_token, session.refresh_token))
	ctx = await AuthContext(client.auth).initialize()
	transport.sign_out_error = AuthError("Session not found", status=404)

	assert await ctx.sign_out()
	assert ctx.user is None


async def test_expired_access_token_is_refreshed_and_persisted(transport, make_client):
	session = await transport.sign_up("ada@example.com", "secret123")
	expired = _expired_access_token(session.user.id, "ada@example.com")
	client = make_client((expired, session.refresh_token))
	events = []
	client.auth.on_auth_state_change(lambda event, s: events.append(event))

	ctx = await AuthContext(client.auth).initialize()

	assert ctx.user.id == session.user.id
	access_token, _ = client.auth._storage.tokens
	assert access_token != expired
	assert events == [TOKEN_REFRESHED, INITIAL_SESSION]


async def test_garbage_token_is_discarded(make_client):
	client = make_client(("not-a-jwt", "nope"))

	ctx = await AuthContext(client.auth).initialize()

	assert ctx.user is None
	assert client.auth._storage.tokens is None


async def test_close_unsubscribes(transport, make_client):
	await transport.sign_up("ada@example.com", "secret123")
	client = make_client()
	ctx = await AuthContext(client.auth).initialize()
	ctx.close()

	await client.auth.sign_in_with_password("ada@example.com", "secret123")

	assert ctx.user is None


async def test_password_hashing_runs_off_the_event_loop(transport, monkeypatch):
	loop_thread = threading.get_ident()
	threads = []

	def _recording(fn):
		def _wrapped(*args):
			threads.append(threading.get_ident())
			return fn(*args)
		return _wrapped

	monkeypatch.setattr(local_backend, "hash_password", _recording(local_backend.hash_password))
	monkeypatch.setattr(local_backend, "verify_password", _recording(local_backend.verify_password))

	await transport.sign_up("ada@example.com", "secret123")
	await transport.sign_in("ada@example.com", "secret123")

	assert len(threads) == 2
	assert loop_thread not in threads
