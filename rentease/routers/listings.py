from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette import status

from rentease.backend.client import BackendClient
from rentease.dependencies import get_cancel_token, get_client, require_user
from rentease.schemas.auth import AuthUser
from rentease.schemas.items import ListingDraft
from rentease.templating import render
from rentease.views.base import CancelToken
from rentease.views.listing_form import ListingForm

router = APIRouter(prefix="/list-item", tags=["listings"])

@router.get("", response_class=HTMLResponse, name="list_item")
def list_item_form(
	request: Request,
	client: BackendClient = Depends(get_client),
	user: AuthUser = Depends(require_user),
):
	view = ListingForm(client, user)
	return render(request, "list_item.html", user=user, view=view)

@router.post("", response_class=HTMLResponse)
async def create_listing(
	request: Request,
	title: str = Form(""),
	description: str = Form(""),
	price: str = Form(""),
	category: str = Form(""),
	image_url: str = Form(""),
	client: BackendClient = Depends(get_client),
	user: AuthUser = Depends(require_user),
	token: CancelToken = Depends(get_cancel_token),
):
	draft = ListingDraft(
		title=title,
		description=description,
		price=price,
		category=category,
		image_url=image_url,
	)
	view = ListingForm(client, user, draft=draft, token=token)
	if await view.submit():
		return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
	return render(request, "list_item.html", user=user, view=view, status_code=400)
