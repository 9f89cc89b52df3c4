"""Fluent query builder shared by every backend transport.

A builder accumulates a :class:`Query` description; the transport turns it
into SQL or a PostgREST request and hands back a list of row dicts, and
:meth:`Query.pick` applies the single-row contract on top of that list.
"""
from dataclasses import dataclass, field
from typing import Any, Optional

from rentease.backend.errors import MultipleRowsError, NoRowsError

SELECT = "select"
INSERT = "insert"
UPSERT = "upsert"

MANY = "many"
SINGLE = "single"
MAYBE_SINGLE = "maybe_single"


@dataclass
class Query:
	table: str
	action: str = SELECT
	columns: str = "*"
	filters: list = field(default_factory=list)
	order: Optional[tuple] = None  # (column, descending)
	rows: list = field(default_factory=list)
	on_conflict: Optional[str] = None
	returning: bool = True
	cardinality: str = MANY

	def column_names(self) -> Optional[list]:
		if self.columns.strip() == "*":
			return None
		return [c.strip() for c in self.columns.split(",") if c.strip()]

	def pick(self, rows: list) -> Any:
		if self.action != SELECT and not self.returning:
			return None
		if self.cardinality == MANY:
			return rows
		if len(rows) > 1:
			raise MultipleRowsError(self.table, len(rows))
		if not rows:
			if self.cardinality == SINGLE:
				raise NoRowsError(self.table)
			return None
		return rows[0]


class QueryBuilder:
	def __init__(self, client, table: str):
		self._client = client
		self.query = Query(table=table)

	def select(self, columns: str = "*") -> "QueryBuilder":
		self.query.columns = columns
		self.query.returning = True
		return self

	def insert(self, rows) -> "QueryBuilder":
		self.query.action = INSERT
		self.query.rows = [rows] if isinstance(rows, dict) else list(rows)
		self.query.returning = False
		return self

	def upsert(self, row, on_conflict: str = "id") -> "QueryBuilder":
		self.query.action = UPSERT
		self.query.rows = [row] if isinstance(row, dict) else list(row)
		self.query.on_conflict = on_conflict
		self.query.returning = False
		return self

	def eq(self, column: str, value) -> "QueryBuilder":
		self.query.filters.append((column, value))
		return self

	def order(self, column: str, desc: bool = False) -> "QueryBuilder":
		self.query.order = (column, desc)
		return self

	def single(self) -> "QueryBuilder":
		self.query.cardinality = SINGLE
		return self

	def maybe_single(self) -> "QueryBuilder":
		self.query.cardinality = MAYBE_SINGLE
		return self

	async def execute(self):
		return await self._client.execute(self.query)
