import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from starlette.datastructures import FormData

from app.core.config import Settings
from app.core.deps import get_app_settings, get_asset_repository
from app.core.exceptions import ValidationFailed
from app.core.storage import LocalFileStorage, get_file_storage
from app.repositories.assets import AssetRepository
from app.schemas.asset import (
    AssetCreate, AssetListItem, AssetResponse, AssetUpdate, AssetUploadForm,
)
from app.schemas.common import ERROR_RESPONSES, ResponseModel


router = APIRouter(prefix="/assets", tags=["assets"], responses=ERROR_RESPONSES)
logger = logging.getLogger(__name__)

_CREATE_BODY_DOC = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {"schema": AssetCreate.model_json_schema(by_alias=True)},
            "multipart/form-data": {"schema": {
                "type": "object",
                "required": ["userId", "workspaceId", "title", "categoryId", "file"],
                "properties": {
                    **AssetUploadForm.model_json_schema(by_alias=True)["properties"],
                    "file": {"type": "string", "format": "binary"},
                },
            }},
        },
    }
}


@router.get("", response_model=ResponseModel[List[AssetListItem]])
def list_assets(
    user_id: Optional[str] = Query(None, alias="userId"),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    q: Optional[str] = Query(None, description="Case-insensitive match on title and descriptions"),
    repo: AssetRepository = Depends(get_asset_repository),
    settings: Settings = Depends(get_app_settings),
):
    """List a user's non-archived assets, newest first"""
    if not user_id:
        raise ValidationFailed.for_field("userId", "userId is required", "missing")

    assets = repo.list(user_id, category_id=category_id or None, query=q or None, limit=settings.LIST_LIMIT)
    return ResponseModel(data=[AssetListItem.model_validate(a) for a in assets])


def _parse_model(model, payload):
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e.errors()) from e


def _form_payload(form: FormData) -> dict:
    payload = {}
    for key, value in form.multi_items():
        if key in ("file", "tags") or not isinstance(value, str):
            continue
        if value == "" and key in ("thumbnailPath", "thumbnail_path"):
            continue
        payload[key] = value

    tags = [t for t in form.getlist("tags") if isinstance(t, str) and t != ""]
    if len(tags) == 1 and tags[0].lstrip().startswith("["):
        try:
            tags = json.loads(tags[0])
        except json.JSONDecodeError as e:
            raise ValidationFailed.for_field("tags", "tags must be a JSON array of strings", "json_invalid") from e
    payload["tags"] = tags
    return payload


def _single_file(form: FormData) -> UploadFile:
    files = [v for v in form.getlist("file") if not isinstance(v, str)]
    if not files:
        raise ValidationFailed.for_field("file", "A file part is required", "missing")
    if len(files) > 1:
        raise ValidationFailed.for_field("file", "Exactly one file part is allowed", "too_many")
    return files[0]


async def _create_from_json(request: Request, repo: AssetRepository):
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationFailed.for_field("body", "Request body must be valid JSON", "json_invalid") from e

    asset_in = _parse_model(AssetCreate, payload)
    return await run_in_threadpool(repo.create, **asset_in.model_dump())


async def _create_from_upload(request: Request, repo: AssetRepository, storage: LocalFileStorage):
    async with request.form() as form:
        fields = _parse_model(AssetUploadForm, _form_payload(form))
        upload = _single_file(form)

        stored = await storage.save_upload(fields.user_id, upload)
        try:
            return await run_in_threadpool(
                repo.create,
                **fields.model_dump(),
                file_path=stored.relative_path,
                file_type=stored.content_type,
                file_size=stored.size,
            )
        except Exception:
            logger.warning("Asset insert failed, removing uploaded file %s", stored.relative_path)
            storage.delete(stored.relative_path)
            raise


@router.post(
    "",
    response_model=ResponseModel[AssetResponse],
    status_code=status.HTTP_201_CREATED,
    openapi_extra=_CREATE_BODY_DOC,
)
async def create_asset(
    request: Request,
    repo: AssetRepository = Depends(get_asset_repository),
    storage: LocalFileStorage = Depends(get_file_storage),
):
    """
    Create an asset.

    ``application/json``: the caller supplies the file metadata
    (``filePath``, ``fileType``, ``fileSize``).

    ``multipart/form-data``: the metadata fields come as form fields and the
    binary as a single ``file`` part; it is stored under the user's upload
    directory and the file metadata is derived from it.

    ``analysisStatus`` always starts as ``pending``.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        asset = await _create_from_upload(request, repo, storage)
    else:
        asset = await _create_from_json(request, repo)

    return ResponseModel(
        code=status.HTTP_201_CREATED,
        msg="created",
        data=AssetResponse.model_validate(asset),
    )


@router.patch("/{asset_id}", response_model=ResponseModel[AssetResponse])
def update_asset(
    asset_id: str,
    asset_in: AssetUpdate,
    repo: AssetRepository = Depends(get_asset_repository),
):
    """Partially update an asset; at least one field is required"""
    asset = repo.update(asset_id, asset_in.changes())
    return ResponseModel(msg="updated", data=AssetResponse.model_validate(asset))


@router.delete("/{asset_id}", response_model=ResponseModel[AssetResponse])
def archive_asset(
    asset_id: str,
    repo: AssetRepository = Depends(get_asset_repository),
):
    """Archive (soft delete) an asset. The row and its file are kept."""
    asset = repo.archive(asset_id)
    return ResponseModel(msg="archived", data=AssetResponse.model_validate(asset))
