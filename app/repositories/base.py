"""
Shared plumbing for the repositories: commit/rollback and the translation of
driver errors into the typed ``CatalogError`` variants.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, NoResultFound
from sqlalchemy.orm import Session

from app.core.exceptions import (
    CatalogError,
    InternalError,
    MissingReference,
    RecordConflict,
    RecordNotFound,
    StorageUnavailable,
)


logger = logging.getLogger(__name__)

# SQLSTATE (PostgreSQL, and any driver exposing it)
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"

# MySQL / MariaDB error numbers
MYSQL_DUPLICATE_ENTRY = 1062
MYSQL_FOREIGN_KEY_ERRORS = (1451, 1452)

_UNIQUE_MARKERS = ("unique constraint", "duplicate key", "duplicate entry")
_FOREIGN_KEY_MARKERS = ("foreign key constraint", "foreign key")


def _sqlstate(orig) -> Optional[str]:
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return None


def classify_integrity_error(exc: IntegrityError) -> CatalogError:
    """Pick the error variant for a constraint violation."""
    orig = exc.orig
    code = _sqlstate(orig)
    if code == UNIQUE_VIOLATION:
        return RecordConflict()
    if code == FOREIGN_KEY_VIOLATION:
        return MissingReference()

    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int):
        if args[0] == MYSQL_DUPLICATE_ENTRY:
            return RecordConflict()
        if args[0] in MYSQL_FOREIGN_KEY_ERRORS:
            return MissingReference()

    message = str(orig).lower()
    if any(marker in message for marker in _UNIQUE_MARKERS):
        return RecordConflict()
    if any(marker in message for marker in _FOREIGN_KEY_MARKERS):
        return MissingReference()
    # NOT NULL / CHECK 等：属于程序错误，不暴露给调用方
    return InternalError()


@contextmanager
def storage_errors(db: Session) -> Iterator[Session]:
    """Roll back and re-raise storage failures as ``CatalogError`` variants."""
    try:
        yield db
    except IntegrityError as e:
        db.rollback()
        error = classify_integrity_error(e)
        if isinstance(error, InternalError):
            raise
        raise error from e
    except (OperationalError, InterfaceError) as e:
        db.rollback()
        raise StorageUnavailable() from e
    except NoResultFound as e:
        db.rollback()
        raise RecordNotFound() from e


class BaseRepository:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, instance=None):
        self.db.commit()
        if instance is not None:
            self.db.refresh(instance)
        return instance
