"""Request-scoped dependencies: backend client, auth context, route guard."""
from fastapi import Depends, Request

from rentease.backend.auth import CookieStorage
from rentease.backend.client import BackendClient
from rentease.context import AuthContext
from rentease.core.errors import AuthRequired
from rentease.schemas.auth import AuthUser
from rentease.views.base import CancelToken


def get_client(request: Request) -> BackendClient:
	storage = CookieStorage(request.cookies)
	request.state.session_storage = storage
	return BackendClient(request.app.state.transport, storage)


async def get_auth_context(client: BackendClient = Depends(get_client)):
	ctx = AuthContext(client.auth)
	await ctx.initialize()
	try:
		yield ctx
	finally:
		ctx.close()


def require_user(ctx: AuthContext = Depends(get_auth_context)) -> AuthUser:
	# evaluated before the view is built; anonymous visitors never reach it
	if ctx.user is None:
		raise AuthRequired()
	return ctx.user


def get_cancel_token(request: Request) -> CancelToken:
	return CancelToken(probe=request.is_disconnected)


async def session_cookie_middleware(request: Request, call_next):
	response = await call_next(request)
	storage = getattr(request.state, "session_storage", None)
	if storage is not None:
		storage.apply(response)
	return response
