from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.deps import get_category_repository
from app.core.exceptions import ValidationFailed
from app.repositories.categories import CategoryRepository
from app.schemas.category import CategoryCreate, CategoryResponse
from app.schemas.common import ERROR_RESPONSES, ResponseModel


router = APIRouter(prefix="/categories", tags=["categories"], responses=ERROR_RESPONSES)


@router.get("", response_model=ResponseModel[List[CategoryResponse]])
def list_categories(
    user_id: Optional[str] = Query(None, alias="userId"),
    repo: CategoryRepository = Depends(get_category_repository),
):
    """List a user's categories, sorted by name"""
    if not user_id:
        raise ValidationFailed.for_field("userId", "userId is required", "missing")

    categories = repo.list_for_user(user_id)
    return ResponseModel(data=[CategoryResponse.model_validate(c) for c in categories])


@router.post("", response_model=ResponseModel[CategoryResponse], status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    repo: CategoryRepository = Depends(get_category_repository),
):
    """
    Ensure a category exists for the user.

    Calling it again with the same name returns the existing row; the status
    is 201 either way.
    """
    category = repo.ensure(category_in.user_id, category_in.name)
    return ResponseModel(
        code=status.HTTP_201_CREATED,
        msg="created",
        data=CategoryResponse.model_validate(category),
    )
