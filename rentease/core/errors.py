from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse, Response
from starlette import status

from rentease.core.logging import log_event

# nginx's "client closed request"; the client never sees it
CLIENT_CLOSED_REQUEST = 499


class AuthRequired(Exception):
	"""Raised by the route guard when an auth-gated view is visited anonymously."""

	def __init__(self, redirect_to: str = "/auth"):
		super().__init__(redirect_to)
		self.redirect_to = redirect_to


def error_response(request: Request, status_code: int, message: str, details=None):
	# Ensure details is serializable
	if isinstance(details, Exception):
		details = str(details)
	return JSONResponse(
		status_code=status_code,
		content={
			"error": {
				"message": message,
				"details": details,
				"request_id": getattr(request.state, "request_id", None),
			}
		},
	)

async def validation_exception_handler(request: Request, exc: RequestValidationError):
	return error_response(
		request,
		status.HTTP_422_UNPROCESSABLE_ENTITY,
		"Validation error",
		details=exc.errors(),
	)

async def auth_required_handler(request: Request, exc: AuthRequired):
	return RedirectResponse(exc.redirect_to, status_code=status.HTTP_303_SEE_OTHER)

async def cancelled_handler(request: Request, exc: Exception):
	log_event(
		"request_cancelled",
		path=request.url.path,
		request_id=getattr(request.state, "request_id", None),
	)
	return Response(status_code=CLIENT_CLOSED_REQUEST)
