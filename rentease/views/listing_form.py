from rentease.backend.errors import BackendError, display_message
from rentease.core.logging import log_event
from rentease.schemas.items import ListingDraft
from rentease.views.base import View, ViewState


class ListingForm(View):
	def __init__(self, client, user, draft: ListingDraft | None = None, token=None):
		super().__init__(client, token)
		self.user = user
		self.draft = draft or ListingDraft()
		self.state = ViewState.READY

	@property
	def submitting(self) -> bool:
		return self.state == ViewState.SUBMITTING

	async def submit(self) -> bool:
		"""Insert the draft as a new item owned by the current user.

		On failure the draft is kept so the user can correct it.
		"""
		self.state = ViewState.SUBMITTING
		self.error = ""
		try:
			row = self.draft.to_row(self.user.id)
			await self.fetch(self.client.table("items").insert([row]))
		except (ValueError, BackendError) as exc:
			log_event("item_create_failed", owner_id=self.user.id, error=str(exc))
			self.error = display_message(exc)
			self.state = ViewState.ERRORED
			return False
		log_event("item_created", owner_id=self.user.id, title=row["title"])
		self.state = ViewState.READY
		return True
