from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint

from app.core.database import Base
from app.models.base import generate_id, utcnow


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_categories_user_name"),
        # 供 assets 的复合外键引用，保证资产与分类属于同一用户
        UniqueConstraint("id", "user_id", name="uq_categories_id_user"),
    )

    id = Column(String(64), primary_key=True, default=generate_id)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
