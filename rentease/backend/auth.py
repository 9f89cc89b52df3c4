"""Session state for one browser session.

The auth client owns the current :class:`Session`, persists its tokens in a
storage (cookies in the web app) and notifies subscribers serially on every
change. It never talks HTTP or SQL itself; the transport does.
"""
import time
from typing import Callable, Optional

from jose import JWTError, jwt

from rentease.backend.errors import AuthError, BackendError
from rentease.core.config import settings
from rentease.core.logging import log_event
from rentease.schemas.auth import Session

INITIAL_SESSION = "INITIAL_SESSION"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

# refresh a little before the real expiry so a request never carries a dead token
EXPIRY_MARGIN_SEC = 10

# statuses meaning the server no longer knows the session
_GONE_STATUSES = {401, 403, 404}


def token_expires_at(access_token: str) -> Optional[int]:
	try:
		claims = jwt.get_unverified_claims(access_token)
	except JWTError as exc:
		raise AuthError("Invalid access token") from exc
	exp = claims.get("exp")
	return int(exp) if exp is not None else None


def token_expired(access_token: str) -> bool:
	expires_at = token_expires_at(access_token)
	if expires_at is None:
		return False
	return expires_at - EXPIRY_MARGIN_SEC <= time.time()


class CookieStorage:
	"""Keeps the session tokens in two HTTP-only cookies.

	Reads come from the incoming request's cookies; writes are buffered and
	copied onto the outgoing response by :meth:`apply`.
	"""

	def __init__(self, cookies, prefix: str | None = None):
		prefix = prefix or settings.SESSION_COOKIE_PREFIX
		self.access_name = f"{prefix}-access-token"
		self.refresh_name = f"{prefix}-refresh-token"
		self._cookies = dict(cookies)
		self._pending = None  # None: untouched, False: remove, Session: write

	def load(self) -> Optional[tuple]:
		access = self._cookies.get(self.access_name)
		if not access:
			return None
		return access, self._cookies.get(self.refresh_name, "")

	def save(self, session: Session) -> None:
		self._pending = session
		self._cookies[self.access_name] = session.access_token
		self._cookies[self.refresh_name] = session.refresh_token

	def remove(self) -> None:
		self._pending = False
		self._cookies.pop(self.access_name, None)
		self._cookies.pop(self.refresh_name, None)

	def apply(self, response) -> None:
		if self._pending is None:
			return
		if self._pending is False:
			response.delete_cookie(self.access_name, path="/")
			response.delete_cookie(self.refresh_name, path="/")
			return
		max_age = max(settings.REFRESH_TOKEN_EXPIRES_DAYS, 1) * 24 * 3600
		for name, value in (
			(self.access_name, self._pending.access_token),
			(self.refresh_name, self._pending.refresh_token),
		):
			response.set_cookie(
				name,
				value,
				max_age=max_age,
				path="/",
				httponly=True,
				samesite="lax",
				secure=settings.COOKIE_SECURE,
			)


class Subscription:
	def __init__(self, listeners: list, callback: Callable):
		self._listeners = listeners
		self.callback = callback

	def unsubscribe(self) -> None:
		if self.callback in self._listeners:
			self._listeners.remove(self.callback)


class AuthClient:
	def __init__(self, transport, storage):
		self._transport = transport
		self._storage = storage
		self._listeners: list = []
		self.session: Optional[Session] = None

	@property
	def access_token(self) -> Optional[str]:
		return self.session.access_token if self.session else None

	def on_auth_state_change(self, callback: Callable) -> Subscription:
		self._listeners.append(callback)
		return Subscription(self._listeners, callback)

	def _emit(self, event: str, session: Optional[Session]) -> None:
		for callback in list(self._listeners):
			callback(event, session)

	def _store(self, session: Optional[Session]) -> None:
		self.session = session
		if session is None:
			self._storage.remove()
		else:
			self._storage.save(session)

	async def initialize(self) -> Optional[Session]:
		"""Recover the stored session, refreshing it when the access token expired."""
		stored = self._storage.load()
		session = None
		if stored:
			access_token, refresh_token = stored
			try:
				if token_expired(access_token):
					if not refresh_token:
						raise AuthError("Session expired")
					session = await self._transport.refresh_session(refresh_token)
					self._store(session)
					log_event("session_refreshed", user_id=session.user.id)
					self._emit(TOKEN_REFRESHED, session)
				else:
					user = await self._transport.get_user(access_token)
					session = Session(
						access_token=access_token,
						refresh_token=refresh_token,
						expires_at=token_expires_at(access_token),
						user=user,
					)
			except AuthError as exc:
				log_event("session_discarded", error=str(exc))
				self._storage.remove()
				session = None
			except BackendError as exc:
				# keep the cookies; the backend may only be unreachable for now
				log_event("session_recovery_failed", error=str(exc))
				session = None
		self.session = session
		self._emit(INITIAL_SESSION, session)
		return session

	async def sign_in_with_password(self, email: str, password: str) -> Session:
		session = await self._transport.sign_in(email, password)
		self._store(session)
		self._emit(SIGNED_IN, session)
		return session

	async def sign_up(self, email: str, password: str) -> Optional[Session]:
		session = await self._transport.sign_up(email, password)
		if session is not None:
			self._store(session)
			self._emit(SIGNED_IN, session)
		return session

	async def sign_out(self) -> None:
		if self.session is not None:
			try:
				await self._transport.sign_out(self.session.access_token)
			except AuthError as exc:
				if exc.status not in _GONE_STATUSES:
					raise
		self._store(None)
		self._emit(SIGNED_OUT, None)
