from datetime import datetime
from typing import List, Optional

from pydantic import Field, StrictBool, StrictInt, field_validator, model_validator

from app.schemas.common import CamelModel
from app.schemas.category import CategoryBrief


class AssetMetadata(CamelModel):
    """Caller-supplied fields shared by the JSON and multipart create paths."""
    user_id: str = Field(min_length=1)
    workspace_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    user_description: str = ""
    category_id: str = Field(min_length=1)
    tags: List[str] = Field(default_factory=list)
    thumbnail_path: Optional[str] = Field(default=None, min_length=1)


class AssetUploadForm(AssetMetadata):
    """Form fields of a multipart upload; file metadata is derived from the file part."""
    pass


class AssetCreate(AssetMetadata):
    file_path: str = Field(min_length=1)
    file_type: str = Field(min_length=1)
    file_size: StrictInt = Field(gt=0)


class AssetUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    user_description: Optional[str] = None
    category_id: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[List[str]] = None
    file_path: Optional[str] = Field(default=None, min_length=1)
    file_type: Optional[str] = Field(default=None, min_length=1)
    file_size: Optional[StrictInt] = Field(default=None, gt=0)
    thumbnail_path: Optional[str] = None
    is_favorite: Optional[StrictBool] = None
    is_archived: Optional[StrictBool] = None

    @field_validator(
        "title", "user_description", "category_id", "tags", "file_path",
        "file_type", "file_size", "is_favorite", "is_archived",
    )
    @classmethod
    def not_null(cls, value):
        # 只有 thumbnailPath 允许显式置空
        if value is None:
            raise ValueError("may not be null")
        return value

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class AssetResponse(CamelModel):
    id: str
    user_id: str
    workspace_id: str
    title: str
    user_description: str = ""
    ai_description: Optional[str] = None
    category_id: str
    tags: List[str] = Field(default_factory=list)
    file_path: str
    file_type: str
    file_size: int
    thumbnail_path: Optional[str] = None
    is_favorite: bool = False
    is_archived: bool = False
    analysis_status: str
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class AssetListItem(AssetResponse):
    category: Optional[CategoryBrief] = None
