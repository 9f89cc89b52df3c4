from rentease.backend.auth import AuthClient
from rentease.backend.query import Query, QueryBuilder


class BackendClient:
	"""Handle to the data/auth service for one browser session.

	Data requests carry the current session's access token so the backend
	can apply its row-level security.
	"""

	def __init__(self, transport, storage):
		self.transport = transport
		self.auth = AuthClient(transport, storage)

	def table(self, name: str) -> QueryBuilder:
		return QueryBuilder(self, name)

	async def execute(self, query: Query):
		rows = await self.transport.execute(query, access_token=self.auth.access_token)
		return query.pick(rows)
