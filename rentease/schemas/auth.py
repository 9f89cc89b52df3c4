from typing import Optional

from pydantic import BaseModel, EmailStr, Field

class AuthUser(BaseModel):
	id: str
	email: Optional[str] = None

class Session(BaseModel):
	access_token: str
	refresh_token: str = ""
	expires_at: Optional[int] = None
	user: AuthUser

class Credentials(BaseModel):
	email: EmailStr
	password: str = Field(min_length=6, max_length=72)
