from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    name: str = Field(index=True, unique=True)
    icon: Optional[str] = None          # emoji shown on the storefront menu
    image_icon: Optional[str] = None    # public URL, wins over the emoji
    position: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
