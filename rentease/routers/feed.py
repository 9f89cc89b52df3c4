from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from rentease.backend.client import BackendClient
from rentease.context import AuthContext
from rentease.dependencies import get_auth_context, get_cancel_token, get_client
from rentease.templating import render
from rentease.views.base import CancelToken
from rentease.views.feed import ALL_CATEGORIES, FeedView

router = APIRouter(tags=["feed"])

NOTICES = {
	"sign-out-failed": "We could not sign you out. Please try again.",
}

@router.get("/", response_class=HTMLResponse, name="feed")
async def feed(
	request: Request,
	search: str = "",
	category: str = ALL_CATEGORIES,
	notice: str | None = None,
	client: BackendClient = Depends(get_client),
	ctx: AuthContext = Depends(get_auth_context),
	token: CancelToken = Depends(get_cancel_token),
):
	view = FeedView(client, search=search, category=category, token=token)
	await view.load()
	return render(request, "feed.html", user=ctx.user, view=view, notice=NOTICES.get(notice or ""))
