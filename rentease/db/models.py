import uuid
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from rentease.db.base import Base

CATEGORIES = ("electronics", "furniture", "tools", "sports")

def _uuid() -> str:
	return str(uuid.uuid4())

class User(Base):
	__tablename__ = "users"

	id = Column(String, primary_key=True, default=_uuid)
	email = Column(String, unique=True, index=True, nullable=False)
	password_hash = Column(String, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow)

	items = relationship("Item", back_populates="owner")
	profile = relationship("Profile", back_populates="user", uselist=False)

class Item(Base):
	__tablename__ = "items"
	__table_args__ = (
		CheckConstraint("price >= 0", name="ck_items_price_non_negative"),
		CheckConstraint(
			"category IN ({})".format(", ".join(f"'{c}'" for c in CATEGORIES)),
			name="ck_items_category",
		),
	)

	id = Column(String, primary_key=True, default=_uuid)
	title = Column(String, nullable=False)
	description = Column(Text, nullable=False, default="")
	price = Column(Float, nullable=False)
	image_url = Column(String, nullable=False, default="")
	category = Column(String, nullable=False)
	owner_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, index=True)

	owner = relationship("User", back_populates="items")

class Profile(Base):
	__tablename__ = "profiles"

	id = Column(String, ForeignKey("users.id"), primary_key=True)
	full_name = Column(String, nullable=True)
	avatar_url = Column(String, nullable=True)
	phone = Column(String, nullable=True)
	updated_at = Column(DateTime, default=datetime.utcnow)

	user = relationship("User", back_populates="profile")
