from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from starlette import status

from rentease.context import AuthContext
from rentease.dependencies import get_auth_context
from rentease.schemas.auth import Credentials
from rentease.templating import render

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Please enter a valid email and a password of at least 6 characters."

def _home() -> RedirectResponse:
	return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)

def _auth_page(request: Request, mode: str, email: str = "", error: str = "", message: str = "", status_code: int = 200):
	return render(
		request,
		"auth.html",
		mode=mode,
		email=email,
		error=error,
		message=message,
		status_code=status_code,
	)

@router.get("", response_class=HTMLResponse, name="auth")
def auth_page(request: Request, mode: str = "sign-in", ctx: AuthContext = Depends(get_auth_context)):
	if ctx.user is not None:
		return _home()
	return _auth_page(request, "sign-up" if mode == "sign-up" else "sign-in")

@router.post("/sign-in", response_class=HTMLResponse)
async def sign_in(
	request: Request,
	email: str = Form(""),
	password: str = Form(""),
	ctx: AuthContext = Depends(get_auth_context),
):
	try:
		creds = Credentials(email=email, password=password)
	except ValidationError:
		return _auth_page(request, "sign-in", email=email, error=INVALID_CREDENTIALS, status_code=400)
	if not await ctx.sign_in(creds.email, creds.password):
		return _auth_page(request, "sign-in", email=email, error=ctx.error, status_code=400)
	return _home()

@router.post("/sign-up", response_class=HTMLResponse)
async def sign_up(
	request: Request,
	email: str = Form(""),
	password: str = Form(""),
	ctx: AuthContext = Depends(get_auth_context),
):
	try:
		creds = Credentials(email=email, password=password)
	except ValidationError:
		return _auth_page(request, "sign-up", email=email, error=INVALID_CREDENTIALS, status_code=400)
	if await ctx.sign_up(creds.email, creds.password):
		return _home()
	if ctx.error:
		return _auth_page(request, "sign-up", email=email, error=ctx.error, status_code=400)
	return _auth_page(request, "sign-in", email=email, message="Check your email to confirm your account, then sign in.")

@router.post("/sign-out")
async def sign_out(ctx: AuthContext = Depends(get_auth_context)):
	if not await ctx.sign_out():
		return RedirectResponse("/?notice=sign-out-failed", status_code=status.HTTP_303_SEE_OTHER)
	return _home()
