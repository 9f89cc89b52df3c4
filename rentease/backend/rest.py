"""Transport for a hosted Supabase project.

Rows go through PostgREST (``/rest/v1``), sessions through GoTrue
(``/auth/v1``). One ``httpx.AsyncClient`` is shared by every request of the
process and closed on shutdown.
"""
from typing import Optional

import httpx
from jose import JWTError, jwt

from rentease.backend.errors import AuthError, BackendError
from rentease.backend.query import INSERT, UPSERT, Query
from rentease.core.logging import log_event
from rentease.schemas.auth import AuthUser, Session


class RestTransport:
	def __init__(
		self,
		url: str,
		anon_key: str,
		jwt_secret: str = "",
		timeout: float = 10,
		http_client: Optional[httpx.AsyncClient] = None,
	):
		if not url or not anon_key:
			raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
		self._anon_key = anon_key
		self._jwt_secret = jwt_secret
		self._http = http_client or httpx.AsyncClient(
			base_url=url.rstrip("/"),
			timeout=timeout,
		)

	async def aclose(self) -> None:
		await self._http.aclose()

	def _headers(self, access_token: Optional[str] = None) -> dict:
		return {
			"apikey": self._anon_key,
			"Authorization": f"Bearer {access_token or self._anon_key}",
		}

	async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
		try:
			return await self._http.request(method, path, **kwargs)
		except httpx.HTTPError as exc:
			log_event("backend_unreachable", method=method, path=path, error=str(exc))
			raise BackendError(str(exc) or "Network error") from exc

	# -------------------------
	# Rows
	# -------------------------
	async def execute(self, query: Query, access_token: Optional[str] = None) -> list:
		path = f"/rest/v1/{query.table}"
		headers = self._headers(access_token)
		params = []

		if query.action in (INSERT, UPSERT):
			prefer = ["return=representation" if query.returning else "return=minimal"]
			if query.action == UPSERT:
				prefer.insert(0, "resolution=merge-duplicates")
				params.append(("on_conflict", query.on_conflict or "id"))
			if query.returning:
				params.append(("select", query.columns))
			headers["Prefer"] = ",".join(prefer)
			response = await self._send("POST", path, params=params, json=query.rows, headers=headers)
		else:
			params.append(("select", query.columns))
			for column, value in query.filters:
				params.append((column, f"eq.{_format_value(value)}"))
			if query.order:
				column, desc = query.order
				params.append(("order", f"{column}.{'desc' if desc else 'asc'}"))
			response = await self._send("GET", path, params=params, headers=headers)

		if response.status_code >= 400:
			raise _rest_error(response)
		if not response.content:
			return []
		data = response.json()
		return data if isinstance(data, list) else [data]

	# -------------------------
	# Sessions
	# -------------------------
	async def sign_in(self, email: str, password: str) -> Session:
		response = await self._send(
			"POST",
			"/auth/v1/token",
			params={"grant_type": "password"},
			json={"email": email, "password": password},
			headers=self._headers(),
		)
		return _session_from(response, required=True)

	async def sign_up(self, email: str, password: str) -> Optional[Session]:
		response = await self._send(
			"POST",
			"/auth/v1/signup",
			json={"email": email, "password": password},
			headers=self._headers(),
		)
		return _session_from(response, required=False)

	async def refresh_session(self, refresh_token: str) -> Session:
		response = await self._send(
			"POST",
			"/auth/v1/token",
			params={"grant_type": "refresh_token"},
			json={"refresh_token": refresh_token},
			headers=self._headers(),
		)
		return _session_from(response, required=True)

	async def sign_out(self, access_token: str) -> None:
		response = await self._send("POST", "/auth/v1/logout", headers=self._headers(access_token))
		if response.status_code >= 400:
			raise _auth_error(response)

	async def get_user(self, access_token: str) -> AuthUser:
		if self._jwt_secret:
			try:
				claims = jwt.decode(
					access_token,
					self._jwt_secret,
					algorithms=["HS256"],
					audience="authenticated",
				)
			except JWTError as exc:
				raise AuthError("Invalid or expired token", status=401) from exc
			if not claims.get("sub"):
				raise AuthError("Invalid token", status=401)
			return AuthUser(id=claims["sub"], email=claims.get("email"))

		response = await self._send("GET", "/auth/v1/user", headers=self._headers(access_token))
		if response.status_code >= 400:
			raise _auth_error(response)
		payload = response.json()
		return AuthUser(id=payload["id"], email=payload.get("email"))


def _format_value(value) -> str:
	if isinstance(value, bool):
		return "true" if value else "false"
	if value is None:
		return "null"
	return str(value)


def _json_or_empty(response: httpx.Response) -> dict:
	try:
		payload = response.json()
	except ValueError:
		return {}
	return payload if isinstance(payload, dict) else {}


def _rest_error(response: httpx.Response) -> BackendError:
	payload = _json_or_empty(response)
	return BackendError(
		payload.get("message") or response.reason_phrase or "Request failed",
		code=payload.get("code"),
		status=response.status_code,
		details=payload.get("details"),
	)


def _auth_error(response: httpx.Response) -> AuthError:
	payload = _json_or_empty(response)
	message = (
		payload.get("error_description")
		or payload.get("msg")
		or payload.get("message")
		or payload.get("error")
		or response.reason_phrase
		or "Authentication failed"
	)
	code = payload.get("error_code") or payload.get("error")
	return AuthError(message, code=code, status=response.status_code)


def _session_from(response: httpx.Response, required: bool) -> Optional[Session]:
	if response.status_code >= 400:
		raise _auth_error(response)
	payload = response.json()
	if not payload.get("access_token"):
		# sign-up with e-mail confirmation returns the user only
		if required:
			raise AuthError("No session returned", status=response.status_code)
		return None
	user = payload.get("user") or {}
	return Session(
		access_token=payload["access_token"],
		refresh_token=payload.get("refresh_token", ""),
		expires_at=payload.get("expires_at"),
		user=AuthUser(id=user["id"], email=user.get("email")),
	)
