"""Shared lifecycle for page views.

Every view moves ``idle -> loading -> ready | errored``; forms add
``ready -> submitting -> ready | errored`` on each submission. Nothing leaves
``errored`` on its own: a fresh load or an explicit submission is the only
way out.
"""
from enum import Enum
from typing import Awaitable, Callable, Optional


class ViewState(str, Enum):
	IDLE = "idle"
	LOADING = "loading"
	READY = "ready"
	ERRORED = "errored"
	SUBMITTING = "submitting"


class Cancelled(Exception):
	"""The request that started a backend call is gone; its response is discarded."""


class CancelToken:
	def __init__(self, probe: Optional[Callable[[], Awaitable[bool]]] = None):
		self._probe = probe
		self._cancelled = False

	def cancel(self) -> None:
		self._cancelled = True

	async def is_cancelled(self) -> bool:
		if not self._cancelled and self._probe is not None:
			self._cancelled = await self._probe()
		return self._cancelled

	async def check(self) -> None:
		if await self.is_cancelled():
			raise Cancelled()


class View:
	def __init__(self, client, token: Optional[CancelToken] = None):
		self.client = client
		self.token = token or CancelToken()
		self.state = ViewState.IDLE
		self.error = ""

	@property
	def loading(self) -> bool:
		return self.state in (ViewState.IDLE, ViewState.LOADING)

	async def fetch(self, builder):
		"""Run one backend request, dropping the response if the request went away."""
		await self.token.check()
		result = await builder.execute()
		await self.token.check()
		return result
