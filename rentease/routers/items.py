from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from rentease.backend.client import BackendClient
from rentease.context import AuthContext
from rentease.dependencies import get_auth_context, get_cancel_token, get_client
from rentease.templating import render
from rentease.views.base import CancelToken
from rentease.views.item_detail import ItemDetailView

router = APIRouter(prefix="/items", tags=["items"])

@router.get("/{item_id}", response_class=HTMLResponse, name="item_detail")
async def item_detail(
	request: Request,
	item_id: str,
	client: BackendClient = Depends(get_client),
	ctx: AuthContext = Depends(get_auth_context),
	token: CancelToken = Depends(get_cancel_token),
):
	view = ItemDetailView(client, item_id, user=ctx.user, token=token)
	await view.load()
	if view.not_found:
		status_code = 404
	elif view.error:
		status_code = 502
	else:
		status_code = 200
	return render(request, "item_detail.html", user=ctx.user, view=view, status_code=status_code)
