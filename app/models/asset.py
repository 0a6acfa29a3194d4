import enum

from sqlalchemy import (
    Column, String, DateTime, Text, Boolean, Integer, JSON,
    ForeignKey, ForeignKeyConstraint, Index,
)
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import generate_id, utcnow


class AnalysisStatus(str, enum.Enum):
    # 由外部分析流程推进，本服务只写入 pending
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Asset(Base):
    __tablename__ = "assets"
    __table_args__ = (
        ForeignKeyConstraint(
            ["category_id", "user_id"],
            ["categories.id", "categories.user_id"],
            name="fk_assets_category_user",
        ),
        Index("ix_assets_user_archived_created", "user_id", "is_archived", "created_at"),
    )

    id = Column(String(64), primary_key=True, default=generate_id)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    workspace_id = Column(String(64), ForeignKey("workspaces.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    user_description = Column(Text, nullable=False, default="")
    ai_description = Column(Text, nullable=True)
    category_id = Column(String(64), nullable=False, index=True)
    tags = Column(JSON, nullable=False, default=list)

    # 文件信息
    file_path = Column(String(500), nullable=False)
    file_type = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False)
    thumbnail_path = Column(Text, nullable=True)

    # 状态
    is_favorite = Column(Boolean, nullable=False, default=False)
    is_archived = Column(Boolean, nullable=False, default=False)
    analysis_status = Column(String(20), nullable=False, default=AnalysisStatus.PENDING.value)
    deleted_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category = relationship("Category", viewonly=True)
