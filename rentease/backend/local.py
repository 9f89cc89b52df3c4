"""Embedded transport backed by SQLAlchemy.

Implements the same row and session contract as the hosted service so the
app runs without a Supabase project (development, tests). Passwords are
hashed with passlib and sessions are HS256 tokens signed with JWT_SECRET.
Row-level security is not emulated.
"""
from datetime import datetime
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from jose import JWTError
from sqlalchemy import DateTime
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DbSession

from rentease.backend.auth import token_expires_at
from rentease.backend.errors import AuthError, BackendError
from rentease.backend.query import INSERT, SELECT, Query
from rentease.core.logging import log_event
from rentease.core.security import (
	create_access_token, create_refresh_token, decode_token,
	hash_password, verify_password,
)
from rentease.db.models import Item, Profile, User
from rentease.schemas.auth import AuthUser, Session

TABLES = {
	"items": Item,
	"profiles": Profile,
}


class LocalTransport:
	def __init__(self, session_factory):
		self._session_factory = session_factory

	async def aclose(self) -> None:
		return None

	# -------------------------
	# Rows
	# -------------------------
	async def execute(self, query: Query, access_token: Optional[str] = None) -> list:
		model = TABLES.get(query.table)
		if model is None:
			raise BackendError(f'relation "public.{query.table}" does not exist', code="42P01", status=404)

		db: DbSession = self._session_factory()
		try:
			if query.action == SELECT:
				objs = self._select(db, model, query)
			elif query.action == INSERT:
				objs = self._insert(db, model, query)
			else:
				objs = self._upsert(db, model, query)
			if query.action != SELECT and not query.returning:
				return []
			return [_project(_row(obj), query) for obj in objs]
		except IntegrityError as exc:
			db.rollback()
			log_event("local_integrity_error", table=query.table, error=str(exc.orig))
			raise BackendError(str(exc.orig), code="23514", status=409) from exc
		except SQLAlchemyError as exc:
			db.rollback()
			raise BackendError(str(exc)) from exc
		finally:
			db.close()

	def _select(self, db: DbSession, model, query: Query) -> list:
		q = db.query(model)
		for column, value in query.filters:
			q = q.filter(_column(model, column) == value)
		if query.order:
			column, desc = query.order
			attr = _column(model, column)
			q = q.order_by(attr.desc() if desc else attr.asc())
		return q.all()

	def _insert(self, db: DbSession, model, query: Query) -> list:
		objs = [model(**_coerce(model, row)) for row in query.rows]
		db.add_all(objs)
		db.commit()
		return objs

	def _upsert(self, db: DbSession, model, query: Query) -> list:
		key = query.on_conflict or "id"
		key_column = _column(model, key)
		objs = []
		for row in query.rows:
			values = _coerce(model, row)
			obj = db.query(model).filter(key_column == values.get(key)).first()
			if obj is None:
				obj = model(**values)
				db.add(obj)
			else:
				for name, value in values.items():
					setattr(obj, name, value)
			objs.append(obj)
		db.commit()
		return objs

	# -------------------------
	# Sessions
	# -------------------------
	def _session_for(self, user: User) -> Session:
		access = create_access_token(user.id, user.email)
		return Session(
			access_token=access,
			refresh_token=create_refresh_token(user.id, user.email),
			expires_at=token_expires_at(access),
			user=AuthUser(id=user.id, email=user.email),
		)

	def _user_from_token(self, db: DbSession, token: str, token_type: str) -> User:
		try:
			payload = decode_token(token)
		except JWTError as exc:
			raise AuthError("Invalid or expired token", status=401) from exc
		if payload.get("type") != token_type or not payload.get("sub"):
			raise AuthError("Invalid token", status=401)
		user = db.query(User).filter(User.id == payload["sub"]).first()
		if not user:
			raise AuthError("User not found", status=404)
		return user

	async def sign_up(self, email: str, password: str) -> Session:
		email = email.lower()
		password_hash = await run_in_threadpool(hash_password, password)
		db = self._session_factory()
		try:
			if db.query(User).filter(User.email == email).first():
				raise AuthError("User already registered", code="user_already_exists", status=422)
			user = User(email=email, password_hash=password_hash)
			db.add(user)
			db.commit()
			db.refresh(user)
			log_event("user_registered", user_id=user.id)
			return self._session_for(user)
		finally:
			db.close()

	async def sign_in(self, email: str, password: str) -> Session:
		db = self._session_factory()
		try:
			user = db.query(User).filter(User.email == email.lower()).first()
			if not user or not await run_in_threadpool(verify_password, password, user.password_hash):
				raise AuthError("Invalid login credentials", code="invalid_credentials", status=400)
			log_event("user_login", user_id=user.id)
			return self._session_for(user)
		finally:
			db.close()

	async def refresh_session(self, refresh_token: str) -> Session:
		db = self._session_factory()
		try:
			return self._session_for(self._user_from_token(db, refresh_token, "refresh"))
		finally:
			db.close()

	async def get_user(self, access_token: str) -> AuthUser:
		db = self._session_factory()
		try:
			user = self._user_from_token(db, access_token, "access")
			return AuthUser(id=user.id, email=user.email)
		finally:
			db.close()

	async def sign_out(self, access_token: str) -> None:
		# tokens are stateless; validating is all there is to do server-side
		user = await self.get_user(access_token)
		log_event("user_logout", user_id=user.id)


def _column(model, name: str):
	if name not in model.__table__.columns:
		raise BackendError(
			f"column {model.__tablename__}.{name} does not exist", code="42703", status=400
		)
	return getattr(model, name)


def _coerce(model, row: dict) -> dict:
	values = {}
	for name, value in row.items():
		column = model.__table__.columns.get(name)
		if column is None:
			raise BackendError(
				f"Could not find the '{name}' column of '{model.__tablename__}'",
				code="PGRST204",
				status=400,
			)
		if isinstance(column.type, DateTime) and isinstance(value, str):
			value = datetime.fromisoformat(value.replace("Z", "+00:00"))
		values[name] = value
	return values


def _row(obj) -> dict:
	return {column.name: getattr(obj, column.name) for column in obj.__table__.columns}


def _project(row: dict, query: Query) -> dict:
	names = query.column_names()
	if names is None:
		return row
	missing = [name for name in names if name not in row]
	if missing:
		raise BackendError(
			f"column {query.table}.{missing[0]} does not exist", code="42703", status=400
		)
	return {name: row[name] for name in names}
