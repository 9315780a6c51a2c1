import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from app.schemas.learning_resource import (
    LearningResourceCreateRelaxed,
    LearningResourceOut,
    UploadedFileOut,
)
from app.services.container import get_attachments, get_store
from app.services.repository import ContentStore
from app.services.storage import AttachmentStorage, StoredFile, UploadRejected

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Files"])


async def _store_upload(attachments: AttachmentStorage, file: Optional[UploadFile]) -> StoredFile:
    try:
        return await attachments.save_upload(file)
    except UploadRejected as e:
        logger.warning("Upload rejected (%s): %s", getattr(file, "filename", None), e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _parse_metadata(raw: str) -> dict:
    try:
        metadata = json.loads(raw or "{}")
    except json.JSONDecodeError as e:
        raise RequestValidationError(
            [{"loc": ("metadata",), "msg": f"Invalid JSON: {e.msg}", "type": "json_invalid"}]
        )
    if not isinstance(metadata, dict):
        raise RequestValidationError(
            [{"loc": ("metadata",), "msg": "Input should be an object", "type": "dict_type"}]
        )
    return metadata


# =========================
# Raw upload
# =========================
@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    attachments: AttachmentStorage = Depends(get_attachments),
):
    """
    Stores the file and returns its metadata; no record is created.
    - Upload field: file
    """
    stored = await _store_upload(attachments, file)
    info = UploadedFileOut(
        file_name=stored.file_name,
        original_name=stored.original_name,
        file_size=stored.file_size,
        file_type=stored.file_type,
        file_path=str(stored.path),
    )
    return {"message": "File uploaded successfully", "file": info.model_dump(by_alias=True)}


# =========================
# Upload + record
# =========================
@router.post(
    "/learning-resources/with-file",
    response_model=LearningResourceOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_learning_resource_with_file(
    file: Optional[UploadFile] = File(None),
    metadata: str = Form("{}"),
    store: ContentStore = Depends(get_store),
    attachments: AttachmentStorage = Depends(get_attachments),
):
    """
    Multipart: file + metadata (JSON string with title, description, category,
    resourceType, difficulty, ageGroup, isActive).
    The written file is removed again if the record cannot be created.
    """
    stored = await _store_upload(attachments, file)

    try:
        meta = _parse_metadata(metadata)
        is_active = meta.get("isActive")
        data = LearningResourceCreateRelaxed.model_validate(
            {
                "title": meta.get("title"),
                "description": meta.get("description"),
                "fileName": stored.file_name,
                "fileSize": stored.file_size,
                "fileType": stored.file_type,
                "category": meta.get("category"),
                "resourceType": meta.get("resourceType"),
                "difficulty": meta.get("difficulty"),
                "ageGroup": meta.get("ageGroup"),
                "isActive": True if is_active is None else is_active,
            }
        )
    except ValidationError as e:
        attachments.discard(stored.file_name)
        raise RequestValidationError(
            [{**err, "loc": ("metadata", *err["loc"])} for err in e.errors()]
        )
    except RequestValidationError:
        attachments.discard(stored.file_name)
        raise

    try:
        return await run_in_threadpool(store.create_learning_resource, data)
    except Exception:
        logger.exception("Error creating learning resource with file")
        attachments.discard(stored.file_name)
        raise HTTPException(
            status_code=500, detail="Failed to create learning resource with file"
        )


# =========================
# Download
# =========================
@router.get("/learning-resources/{resource_id}/download")
def download_learning_resource(
    resource_id: str,
    store: ContentStore = Depends(get_store),
    attachments: AttachmentStorage = Depends(get_attachments),
):
    """
    Streams the attached file and counts the download.
    404 "Learning resource not found" vs 404 "File not found on disk"
    (record present, file gone).
    """
    try:
        resource = store.get_learning_resource(resource_id)
    except Exception:
        logger.exception("Error fetching learning resource %s", resource_id)
        raise HTTPException(status_code=500, detail="Failed to download file")

    if resource is None:
        raise HTTPException(status_code=404, detail="Learning resource not found")

    path = attachments.path_for(resource.file_name)
    if not path.is_file():
        logger.warning("File %s of resource %s is missing on disk", resource.file_name, resource_id)
        raise HTTPException(status_code=404, detail="File not found on disk")

    try:
        store.increment_download_count(resource_id)
    except Exception:
        logger.exception("Error incrementing download count for %s", resource_id)
        raise HTTPException(status_code=500, detail="Failed to download file")

    return FileResponse(
        path,
        media_type=resource.file_type,
        filename=resource.file_name,
    )
