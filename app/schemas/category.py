from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


class CategoryCreate(CamelModel):
    user_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=64)


class CategoryBrief(CamelModel):
    id: str
    name: str


class CategoryResponse(CategoryBrief):
    user_id: str
    created_at: Optional[datetime] = None
