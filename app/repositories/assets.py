import logging
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import joinedload

from app.core.exceptions import RecordNotFound
from app.models.asset import Asset, AnalysisStatus
from app.models.base import utcnow
from app.repositories.base import BaseRepository, storage_errors


logger = logging.getLogger(__name__)

# 客户端可修改的字段
UPDATABLE_FIELDS = frozenset({
    "title", "user_description", "category_id", "tags", "file_path",
    "file_type", "file_size", "thumbnail_path", "is_favorite", "is_archived",
})


class AssetRepository(BaseRepository):

    def list(
        self,
        user_id: str,
        category_id: Optional[str] = None,
        query: Optional[str] = None,
        limit: int = 100,
    ) -> List[Asset]:
        """Non-archived assets of a user, newest first, with their category loaded."""
        stmt = (
            select(Asset)
            .options(joinedload(Asset.category))
            .where(Asset.user_id == user_id, Asset.is_archived.is_(False))
        )
        if category_id:
            stmt = stmt.where(Asset.category_id == category_id)
        if query:
            stmt = stmt.where(or_(
                Asset.title.icontains(query, autoescape=True),
                Asset.user_description.icontains(query, autoescape=True),
                Asset.ai_description.icontains(query, autoescape=True),
            ))
        stmt = stmt.order_by(Asset.created_at.desc()).limit(limit)

        with storage_errors(self.db):
            return list(self.db.scalars(stmt))

    def get(self, asset_id: str) -> Asset:
        asset = self.db.get(Asset, asset_id)
        if asset is None:
            raise RecordNotFound()
        return asset

    def create(self, **fields) -> Asset:
        fields.pop("analysis_status", None)
        with storage_errors(self.db):
            asset = Asset(**fields, analysis_status=AnalysisStatus.PENDING.value)
            self.db.add(asset)
            self._commit(asset)
        logger.info("Created asset %s for user %s", asset.id, asset.user_id)
        return asset

    def update(self, asset_id: str, changes: dict) -> Asset:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        with storage_errors(self.db):
            asset = self.get(asset_id)
            for field, value in changes.items():
                setattr(asset, field, value)
            return self._commit(asset)

    def archive(self, asset_id: str) -> Asset:
        """Soft delete: the row and its file stay in place."""
        with storage_errors(self.db):
            asset = self.get(asset_id)
            asset.is_archived = True
            asset.deleted_at = utcnow()
            self._commit(asset)
        logger.info("Archived asset %s", asset_id)
        return asset
