import logging
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

from app.core.config import Settings
from app.core.exceptions import StorageUnavailable


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings, **overrides) -> Engine:
    options = dict(pool_pre_ping=True)
    if settings.is_sqlite:
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_recycle=3600,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
        )
    options.update(overrides)

    engine = create_engine(settings.DATABASE_URL, **options)
    if engine.dialect.name == "sqlite":
        # SQLite 默认不校验外键
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class Database:
    """
    Engine + session factory, built once per process and handed to the app.

    If the engine cannot be built (bad URL, driver not installed) the error is
    kept and every session request raises ``StorageUnavailable`` instead.
    """

    def __init__(self, settings: Settings, engine: Optional[Engine] = None):
        self.settings = settings
        self.engine: Optional[Engine] = engine
        self.init_error: Optional[Exception] = None
        if self.engine is None:
            try:
                self.engine = build_engine(settings)
            except Exception as e:
                logger.error("Failed to initialise database engine: %s", e)
                self.init_error = e
        self.session_factory = (
            sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
            if self.engine is not None else None
        )

    @property
    def available(self) -> bool:
        return self.session_factory is not None

    def session(self) -> Session:
        if self.session_factory is None:
            raise StorageUnavailable() from self.init_error
        return self.session_factory()

    def create_all(self) -> None:
        if self.engine is None:
            raise StorageUnavailable() from self.init_error
        # 注册所有模型
        import app.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> bool:
        if self.engine is None:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("Database ping failed: %s", e)
            return False

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency to get database session"""
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()
