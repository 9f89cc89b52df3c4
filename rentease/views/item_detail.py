from pydantic import ValidationError

from rentease.backend.errors import BackendError, NoRowsError, display_message
from rentease.core.logging import log_event
from rentease.schemas.items import Item
from rentease.schemas.profiles import OwnerSummary
from rentease.views.base import View, ViewState


class ItemDetailView(View):
	"""An item and its owner's public profile, fetched one after the other."""

	def __init__(self, client, item_id: str, user=None, token=None):
		super().__init__(client, token)
		self.item_id = item_id
		self.user = user
		self.item = None
		self.owner = None
		self.not_found = False

	async def load(self) -> None:
		self.state = ViewState.LOADING
		try:
			row = await self.fetch(
				self.client.table("items").select("*").eq("id", self.item_id).single()
			)
		except NoRowsError:
			self.not_found = True
			self.state = ViewState.ERRORED
			return
		except BackendError as exc:
			self._fail(exc)
			return

		try:
			self.item = Item(**row)
			owner = await self.fetch(
				self.client.table("profiles")
				.select("full_name, avatar_url")
				.eq("id", self.item.owner_id)
				.single()
			)
			self.owner = OwnerSummary(**owner)
		except (BackendError, ValidationError) as exc:
			self._fail(exc)
			return
		self.state = ViewState.READY

	def _fail(self, exc: Exception) -> None:
		log_event("item_fetch_failed", item_id=self.item_id, error=str(exc))
		self.error = display_message(exc)
		self.state = ViewState.ERRORED

	@property
	def can_request_rent(self) -> bool:
		# the rent action itself is not implemented; only its visibility is decided here
		return self.user is not None and self.item is not None and self.user.id != self.item.owner_id
