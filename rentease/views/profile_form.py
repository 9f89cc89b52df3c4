from datetime import datetime, timezone

from rentease.backend.errors import BackendError, display_message
from rentease.core.logging import log_event
from rentease.schemas.profiles import ProfileFields
from rentease.views.base import View, ViewState


class ProfileForm(View):
	"""Read-or-create on load, upsert on save."""

	def __init__(self, client, user, token=None):
		super().__init__(client, token)
		self.user = user
		self.fields = ProfileFields()
		self.saved = False

	@property
	def saving(self) -> bool:
		return self.state == ViewState.SUBMITTING

	def _profiles(self):
		return self.client.table("profiles")

	async def load(self) -> None:
		self.state = ViewState.LOADING
		try:
			row = await self.fetch(self._profiles().select("*").eq("id", self.user.id).maybe_single())
			if row is None:
				blank = {"id": self.user.id, "full_name": "", "avatar_url": "", "phone": ""}
				row = await self.fetch(self._profiles().insert([blank]).select().single())
				log_event("profile_created", user_id=self.user.id)
			self.fields = ProfileFields.from_row(row)
			self.state = ViewState.READY
		except BackendError as exc:
			log_event("profile_fetch_failed", user_id=self.user.id, error=str(exc))
			self.error = display_message(exc)
			self.state = ViewState.ERRORED

	async def save(self, fields: ProfileFields) -> bool:
		self.fields = fields
		self.state = ViewState.SUBMITTING
		self.error = ""
		self.saved = False
		row = {
			"id": self.user.id,
			**fields.model_dump(),
			"updated_at": datetime.now(timezone.utc).isoformat(),
		}
		try:
			await self.fetch(self._profiles().upsert(row, on_conflict="id"))
		except BackendError as exc:
			log_event("profile_update_failed", user_id=self.user.id, error=str(exc))
			self.error = display_message(exc)
			self.state = ViewState.ERRORED
			return False
		self.saved = True
		self.state = ViewState.READY
		return True
