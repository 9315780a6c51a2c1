import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.schemas.blog_post import BlogPostCreateRelaxed, BlogPostOut, BlogPostUpdate
from app.services.container import get_store
from app.services.repository import ContentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/blog-posts", tags=["Blog posts"])

NOT_FOUND = "Blog post not found"


@router.get("", response_model=List[BlogPostOut])
def list_blog_posts(store: ContentStore = Depends(get_store)):
    """Newest first."""
    try:
        return store.list_blog_posts()
    except Exception:
        logger.exception("Error fetching blog posts")
        raise HTTPException(status_code=500, detail="Failed to fetch blog posts")


@router.get("/{post_id}", response_model=BlogPostOut)
def get_blog_post(post_id: str, store: ContentStore = Depends(get_store)):
    try:
        post = store.get_blog_post(post_id)
    except Exception:
        logger.exception("Error fetching blog post %s", post_id)
        raise HTTPException(status_code=500, detail="Failed to fetch blog post")

    if post is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return post


@router.post("", response_model=BlogPostOut, status_code=status.HTTP_201_CREATED)
def create_blog_post(data: BlogPostCreateRelaxed, store: ContentStore = Depends(get_store)):
    # category / isPublished / summary / tags may be omitted, the store applies defaults
    try:
        return store.create_blog_post(data)
    except Exception:
        logger.exception("Error creating blog post")
        raise HTTPException(status_code=500, detail="Failed to create blog post")


@router.patch("/{post_id}", response_model=BlogPostOut)
def update_blog_post(post_id: str, data: BlogPostUpdate, store: ContentStore = Depends(get_store)):
    try:
        post = store.update_blog_post(post_id, data)
    except Exception:
        logger.exception("Error updating blog post %s", post_id)
        raise HTTPException(status_code=500, detail="Failed to update blog post")

    if post is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return post


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_blog_post(post_id: str, store: ContentStore = Depends(get_store)):
    try:
        deleted = store.delete_blog_post(post_id)
    except Exception:
        logger.exception("Error deleting blog post %s", post_id)
        raise HTTPException(status_code=500, detail="Failed to delete blog post")

    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
