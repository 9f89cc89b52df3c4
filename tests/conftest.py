import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import rentease.db.session  # noqa: F401 registers the SQLite foreign-key pragma
from rentease.backend.client import BackendClient
from rentease.backend.errors import BackendError
from rentease.backend.local import LocalTransport
from rentease.db.base import Base
from rentease.main import create_app


class RecordingTransport(LocalTransport):
	"""Local transport that records every query and can be told to fail."""

	def __init__(self, session_factory):
		super().__init__(session_factory)
		self.queries = []
		self.failing_tables = set()
		self.sign_out_error = None

	async def execute(self, query, access_token=None):
		self.queries.append(query)
		if query.table in self.failing_tables:
			raise BackendError("backend unavailable", status=503)
		return await super().execute(query, access_token)

	async def sign_out(self, access_token):
		if self.sign_out_error is not None:
			raise self.sign_out_error
		return await super().sign_out(access_token)

	def count(self, action, table):
		return sum(1 for q in self.queries if q.action == action and q.table == table)


class MemoryStorage:
	def __init__(self, tokens=None):
		self.tokens = tokens

	def load(self):
		return self.tokens

	def save(self, session):
		self.tokens = (session.access_token, session.refresh_token)

	def remove(self):
		self.tokens = None


@pytest.fixture
def anyio_backend():
	return "asyncio"


@pytest.fixture
def session_factory():
	engine = create_engine(
		"sqlite://",
		connect_args={"check_same_thread": False},
		poolclass=StaticPool,
	)
	Base.metadata.create_all(engine)
	yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
	Base.metadata.drop_all(engine)
	engine.dispose()


@pytest.fixture
def transport(session_factory):
	return RecordingTransport(session_factory)


@pytest.fixture
def new_storage():
	return MemoryStorage


@pytest.fixture
def make_client(transport):
	def _make(tokens=None):
		return BackendClient(transport, MemoryStorage(tokens))
	return _make


@pytest.fixture
def web(transport):
	with TestClient(create_app(transport)) as client:
		yield client


@pytest.fixture
def sign_up(web):
	def _sign_up(email="owner@example.com", password="secret123"):
		return web.post(
			"/auth/sign-up",
			data={"email": email, "password": password},
			follow_redirects=False,
		)
	return _sign_up
