import logging

from pydantic import ValidationError

from rentease.backend.errors import BackendError, display_message
from rentease.core.logging import log_event
from rentease.schemas.items import Item
from rentease.views.base import View, ViewState

ALL_CATEGORIES = "all"


def filter_items(items: list, search: str = "", category: str = ALL_CATEGORIES) -> list:
	"""Items whose title or description contains ``search`` (any case), in ``category``."""
	term = (search or "").lower()
	return [
		item
		for item in items
		if (term in item.title.lower() or term in item.description.lower())
		and (category == ALL_CATEGORIES or item.category == category)
	]


class FeedView(View):
	def __init__(self, client, search: str = "", category: str = ALL_CATEGORIES, token=None):
		super().__init__(client, token)
		self.search = search or ""
		self.category = category or ALL_CATEGORIES
		self.items: list = []

	async def load(self) -> None:
		self.state = ViewState.LOADING
		try:
			rows = await self.fetch(
				self.client.table("items").select("*").order("created_at", desc=True)
			)
			self.items = [Item(**row) for row in rows or []]
			self.state = ViewState.READY
		except (BackendError, ValidationError) as exc:
			log_event("items_fetch_failed", level=logging.ERROR, error=str(exc))
			self.items = []
			self.error = display_message(exc)
			self.state = ViewState.ERRORED

	@property
	def visible_items(self) -> list:
		return filter_items(self.items, self.search, self.category)
