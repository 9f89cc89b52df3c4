from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt
from passlib.context import CryptContext

from rentease.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def _normalize_password(password: str) -> str:
	# bcrypt only considers the first 72 bytes; truncate consistently to avoid errors.
	raw = password.encode("utf-8")
	if len(raw) <= 72:
		return password
	return raw[:72].decode("utf-8", errors="ignore")

def hash_password(password: str) -> str:
	return pwd_context.hash(_normalize_password(password))

def verify_password(password: str, password_hash: str) -> bool:
	return pwd_context.verify(_normalize_password(password), password_hash)

def _create_token(user_id: str, email: str, token_type: str, expires_delta: Optional[timedelta]) -> str:
	now = datetime.now(timezone.utc)
	payload = {
		"sub": user_id,
		"email": email,
		"type": token_type,  # "access" or "refresh"
		"iat": int(now.timestamp()),
	}
	if expires_delta and expires_delta.total_seconds() > 0:
		payload["exp"] = int((now + expires_delta).timestamp())
	return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def access_token_lifetime() -> Optional[timedelta]:
	expires = settings.ACCESS_TOKEN_EXPIRES_MIN
	return None if expires <= 0 else timedelta(minutes=expires)

def create_access_token(user_id: str, email: str) -> str:
	return _create_token(user_id, email, "access", access_token_lifetime())

def create_refresh_token(user_id: str, email: str) -> str:
	expires = settings.REFRESH_TOKEN_EXPIRES_DAYS
	delta = None if expires <= 0 else timedelta(days=expires)
	return _create_token(user_id, email, "refresh", delta)

def decode_token(token: str) -> dict:
	return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
