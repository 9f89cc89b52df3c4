from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from rentease.backend.client import BackendClient
from rentease.dependencies import get_cancel_token, get_client, require_user
from rentease.schemas.auth import AuthUser
from rentease.schemas.profiles import ProfileFields
from rentease.templating import render
from rentease.views.base import CancelToken
from rentease.views.profile_form import ProfileForm

router = APIRouter(prefix="/profile", tags=["profile"])

@router.get("", response_class=HTMLResponse, name="profile")
async def profile_form(
	request: Request,
	client: BackendClient = Depends(get_client),
	user: AuthUser = Depends(require_user),
	token: CancelToken = Depends(get_cancel_token),
):
	view = ProfileForm(client, user, token=token)
	await view.load()
	return render(request, "profile.html", user=user, view=view)

@router.post("", response_class=HTMLResponse)
async def save_profile(
	request: Request,
	full_name: str = Form(""),
	avatar_url: str = Form(""),
	phone: str = Form(""),
	client: BackendClient = Depends(get_client),
	user: AuthUser = Depends(require_user),
	token: CancelToken = Depends(get_cancel_token),
):
	view = ProfileForm(client, user, token=token)
	await view.save(ProfileFields(full_name=full_name, avatar_url=avatar_url, phone=phone))
	return render(request, "profile.html", user=user, view=view, status_code=200 if view.saved else 400)
