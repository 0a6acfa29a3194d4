import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import RecordConflict
from app.models.category import Category
from app.repositories.base import BaseRepository, classify_integrity_error, storage_errors


logger = logging.getLogger(__name__)


class CategoryRepository(BaseRepository):

    def list_for_user(self, user_id: str) -> List[Category]:
        with storage_errors(self.db):
            stmt = select(Category).where(Category.user_id == user_id).order_by(Category.name.asc())
            return list(self.db.scalars(stmt))

    def find_by_name(self, user_id: str, name: str) -> Optional[Category]:
        stmt = select(Category).where(Category.user_id == user_id, Category.name == name)
        return self.db.scalars(stmt).first()

    def create(self, user_id: str, name: str) -> Category:
        """Plain insert; a duplicate name raises ``RecordConflict``."""
        with storage_errors(self.db):
            category = Category(user_id=user_id, name=name)
            self.db.add(category)
            return self._commit(category)

    def ensure(self, user_id: str, name: str) -> Category:
        """
        Upsert keyed on (user_id, name): return the existing row unchanged or
        insert a new one.

        Two concurrent calls may both miss the lookup; the loser's insert hits
        the unique constraint and re-reads the winner's row.
        """
        with storage_errors(self.db):
            existing = self.find_by_name(user_id, name)
            if existing is not None:
                return existing

            category = Category(user_id=user_id, name=name)
            self.db.add(category)
            try:
                return self._commit(category)
            except IntegrityError as e:
                self.db.rollback()
                if not isinstance(classify_integrity_error(e), RecordConflict):
                    raise
                winner = self.find_by_name(user_id, name)
                if winner is None:
                    raise
                logger.info("Category %r for user %s created concurrently, reusing it", name, user_id)
                return winner
