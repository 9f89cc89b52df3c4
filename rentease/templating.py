from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from rentease.core.config import settings
from rentease.db.models import CATEGORIES

MONTHS = (
	"January", "February", "March", "April", "May", "June",
	"July", "August", "September", "October", "November", "December",
)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def format_price(value) -> str:
	return f"{float(value):.2f}".rstrip("0").rstrip(".")


def format_listed_on(value) -> str:
	if not value:
		return ""
	return f"{MONTHS[value.month - 1]} {value.day}, {value.year}"


def format_short_date(value) -> str:
	if not value:
		return ""
	return f"{value.month}/{value.day}/{value.year}"


templates.env.filters["price"] = format_price
templates.env.filters["listed_on"] = format_listed_on
templates.env.filters["short_date"] = format_short_date


def nav_links(user) -> list:
	"""Links of the navigation shell; sign-out is a POST and rendered as a button."""
	links = [{"href": "/list-item", "label": "List Item", "primary": True}]
	if user:
		links.append({"href": "/profile", "label": "Profile"})
		links.append({"href": "/auth/sign-out", "label": "Sign Out", "method": "post"})
	else:
		links.append({"href": "/auth", "label": "Sign In"})
	return links


def render(request: Request, name: str, user=None, status_code: int = 200, **context):
	context.update(
		{
			"app_name": settings.APP_NAME,
			"user": user,
			"nav_links": nav_links(user),
			"categories": CATEGORIES,
		}
	)
	return templates.TemplateResponse(request, name, context, status_code=status_code)
