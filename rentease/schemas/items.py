import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from rentease.db.models import CATEGORIES

class Item(BaseModel):
	id: str
	title: str
	description: str = ""
	price: float
	image_url: str = ""
	category: str
	owner_id: str
	created_at: Optional[datetime] = None

class ListingDraft(BaseModel):
	"""Raw form fields of the listing form, kept as typed by the user."""

	title: str = ""
	description: str = ""
	price: str = ""
	category: str = ""
	image_url: str = ""

	def to_row(self, owner_id: str) -> dict:
		missing = [name for name in ("title", "description", "price", "category", "image_url") if not getattr(self, name).strip()]
		if missing:
			raise ValueError(f"Please fill in: {', '.join(missing)}")
		try:
			price = float(self.price)
		except ValueError:
			raise ValueError("Price must be a number")
		if not math.isfinite(price):
			raise ValueError("Price must be a number")
		if price < 0:
			raise ValueError("Price must be zero or more")
		if self.category not in CATEGORIES:
			raise ValueError("Please select a category")
		return {
			"title": self.title,
			"description": self.description,
			"price": price,
			"category": self.category,
			"image_url": self.image_url,
			"owner_id": owner_id,
		}
