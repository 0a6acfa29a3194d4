from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.database import get_db
from app.repositories.assets import AssetRepository
from app.repositories.categories import CategoryRepository


def get_app_settings(request: Request) -> Settings:
    """The settings the running app was built with"""
    return request.app.state.settings


def get_asset_repository(db: Session = Depends(get_db)) -> AssetRepository:
    return AssetRepository(db)


def get_category_repository(db: Session = Depends(get_db)) -> CategoryRepository:
    return CategoryRepository(db)
