"""Current-user state for one browser session.

The subscription callback is the only writer of ``session`` and ``user``;
sign-in and sign-out go through the auth client and come back as
notifications.
"""
from typing import Optional

from rentease.backend.errors import BackendError, display_message
from rentease.core.logging import log_event
from rentease.schemas.auth import AuthUser, Session


class AuthContext:
	def __init__(self, auth):
		self._auth = auth
		self._subscription = None
		self.session: Optional[Session] = None
		self.user: Optional[AuthUser] = None
		self.error = ""

	async def initialize(self) -> "AuthContext":
		self._subscription = self._auth.on_auth_state_change(self._on_change)
		await self._auth.initialize()
		return self

	def close(self) -> None:
		if self._subscription is not None:
			self._subscription.unsubscribe()
			self._subscription = None

	def _on_change(self, event: str, session: Optional[Session]) -> None:
		self.session = session
		self.user = session.user if session else None

	async def sign_in(self, email: str, password: str) -> bool:
		self.error = ""
		try:
			await self._auth.sign_in_with_password(email, password)
		except BackendError as exc:
			log_event("sign_in_failed", error=str(exc))
			self.error = display_message(exc)
			return False
		return True

	async def sign_up(self, email: str, password: str) -> bool:
		"""True when the backend opened a session right away."""
		self.error = ""
		try:
			session = await self._auth.sign_up(email, password)
		except BackendError as exc:
			log_event("sign_up_failed", error=str(exc))
			self.error = display_message(exc)
			return False
		return session is not None

	async def sign_out(self) -> bool:
		self.error = ""
		user_id = self.user.id if self.user else None
		try:
			await self._auth.sign_out()
		except BackendError as exc:
			log_event("sign_out_failed", user_id=user_id, error=str(exc))
			self.error = display_message(exc)
			return False
		log_event("signed_out", user_id=user_id)
		return True
