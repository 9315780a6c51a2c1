import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.schemas.learning_resource import (
    LearningResourceCreateRelaxed,
    LearningResourceOut,
    LearningResourceUpdate,
)
from app.services.container import get_store
from app.services.repository import ContentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/learning-resources", tags=["Learning resources"])

NOT_FOUND = "Learning resource not found"


@router.get("", response_model=List[LearningResourceOut])
def list_learning_resources(store: ContentStore = Depends(get_store)):
    """Active resources only, newest first."""
    try:
        return store.list_learning_resources()
    except Exception:
        logger.exception("Error fetching learning resources")
        raise HTTPException(status_code=500, detail="Failed to fetch learning resources")


@router.get("/{resource_id}", response_model=LearningResourceOut)
def get_learning_resource(resource_id: str, store: ContentStore = Depends(get_store)):
    try:
        resource = store.get_learning_resource(resource_id)
    except Exception:
        logger.exception("Error fetching learning resource %s", resource_id)
        raise HTTPException(status_code=500, detail="Failed to fetch learning resource")

    if resource is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return resource


@router.post("", response_model=LearningResourceOut, status_code=status.HTTP_201_CREATED)
def create_learning_resource(
    data: LearningResourceCreateRelaxed, store: ContentStore = Depends(get_store)
):
    """Record only: the file is expected to be already uploaded via /api/upload."""
    try:
        return store.create_learning_resource(data)
    except Exception:
        logger.exception("Error creating learning resource")
        raise HTTPException(status_code=500, detail="Failed to create learning resource")


@router.patch("/{resource_id}", response_model=LearningResourceOut)
def update_learning_resource(
    resource_id: str, data: LearningResourceUpdate, store: ContentStore = Depends(get_store)
):
    try:
        resource = store.update_learning_resource(resource_id, data)
    except Exception:
        logger.exception("Error updating learning resource %s", resource_id)
        raise HTTPException(status_code=500, detail="Failed to update learning resource")

    if resource is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return resource


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_learning_resource(resource_id: str, store: ContentStore = Depends(get_store)):
    # soft delete: the row and its file stay, only is_active flips
    try:
        deleted = store.delete_learning_resource(resource_id)
    except Exception:
        logger.exception("Error deleting learning resource %s", resource_id)
        raise HTTPException(status_code=500, detail="Failed to delete learning resource")

    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{resource_id}/download")
@router.post("/{resource_id}/increment-download")
def increment_download(resource_id: str, store: ContentStore = Depends(get_store)):
    """Counts a download without sending the file."""
    try:
        resource = store.get_learning_resource(resource_id)
        if resource is not None:
            store.increment_download_count(resource_id)
    except Exception:
        logger.exception("Error incrementing download count for %s", resource_id)
        raise HTTPException(status_code=500, detail="Failed to increment download count")

    if resource is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Download count incremented"}
