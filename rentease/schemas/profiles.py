from typing import Optional

from pydantic import BaseModel

class OwnerSummary(BaseModel):
	full_name: Optional[str] = None
	avatar_url: Optional[str] = None

class ProfileFields(BaseModel):
	full_name: str = ""
	avatar_url: str = ""
	phone: str = ""

	@classmethod
	def from_row(cls, row: dict) -> "ProfileFields":
		return cls(
			full_name=row.get("full_name") or "",
			avatar_url=row.get("avatar_url") or "",
			phone=row.get("phone") or "",
		)
