"""Content store: blog posts and learning resources.

Two interchangeable implementations of one contract:

- ``MemoryContentStore``: dict-backed, for tests and local demos
- ``SqlContentStore``: SQLAlchemy tables (``blog_posts``, ``learning_resources``)

Contract shared by both:

- ids are uuid4 strings generated on create
- ``created_at == updated_at`` right after create; every mutation bumps ``updated_at``
- lists are ordered by ``created_at`` descending
- learning resources are soft deleted (``is_active = False``) and hidden from
  list/get/update/increment afterwards; blog posts are removed for good
- "not found" is ``None`` / ``False``, never an exception
"""

from __future__ import annotations

import abc
import logging
import threading
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import Settings, get_database_url
from app.db.init_db import create_tables
from app.db.session import build_engine, build_session_factory
from app.models import BlogPost, LearningResource
from app.schemas.blog_post import (
    DEFAULT_BLOG_CATEGORY,
    BlogPostCreate,
    BlogPostOut,
    BlogPostUpdate,
)
from app.schemas.learning_resource import (
    LearningResourceCreate,
    LearningResourceOut,
    LearningResourceUpdate,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.utcnow()


def _new_id() -> str:
    return str(uuid.uuid4())


def _blog_post_fields(data: BlogPostCreate) -> dict:
    return {
        "title": data.title,
        "content": data.content,
        "summary": data.summary or None,
        "category": data.category or DEFAULT_BLOG_CATEGORY,
        "tags": data.tags,
        "is_published": True if data.is_published is None else data.is_published,
    }


def _learning_resource_fields(data: LearningResourceCreate) -> dict:
    fields = data.model_dump(exclude={"is_active"})
    fields["is_active"] = True if data.is_active is None else data.is_active
    fields["download_count"] = 0
    return fields


class ContentStore(abc.ABC):
    backend: str = ""

    # -------------------------
    # Blog posts
    # -------------------------
    @abc.abstractmethod
    def list_blog_posts(self) -> list[BlogPostOut]: ...

    @abc.abstractmethod
    def get_blog_post(self, post_id: str) -> Optional[BlogPostOut]: ...

    @abc.abstractmethod
    def create_blog_post(self, data: BlogPostCreate) -> BlogPostOut: ...

    @abc.abstractmethod
    def update_blog_post(self, post_id: str, data: BlogPostUpdate) -> Optional[BlogPostOut]: ...

    @abc.abstractmethod
    def delete_blog_post(self, post_id: str) -> bool: ...

    # -------------------------
    # Learning resources
    # -------------------------
    @abc.abstractmethod
    def list_learning_resources(self) -> list[LearningResourceOut]: ...

    @abc.abstractmethod
    def get_learning_resource(
        self, resource_id: str, include_inactive: bool = False
    ) -> Optional[LearningResourceOut]:
        """``include_inactive=True`` also returns soft-deleted rows, for direct inspection."""

    @abc.abstractmethod
    def create_learning_resource(self, data: LearningResourceCreate) -> LearningResourceOut: ...

    @abc.abstractmethod
    def update_learning_resource(
        self, resource_id: str, data: LearningResourceUpdate
    ) -> Optional[LearningResourceOut]: ...

    @abc.abstractmethod
    def delete_learning_resource(self, resource_id: str) -> bool: ...

    @abc.abstractmethod
    def increment_download_count(self, resource_id: str) -> None: ...


class MemoryContentStore(ContentStore):
    backend = "memory"

    def __init__(self) -> None:
        self._posts: dict[str, BlogPostOut] = {}
        self._resources: dict[str, LearningResourceOut] = {}
        # sync handlers run on a thread pool
        self._lock = threading.Lock()

    @staticmethod
    def _newest_first(items):
        # id breaks created_at ties, matching the SQL store
        return sorted(items, key=lambda r: (r.created_at, r.id), reverse=True)

    def list_blog_posts(self) -> list[BlogPostOut]:
        with self._lock:
            return [p.model_copy(deep=True) for p in self._newest_first(self._posts.values())]

    def get_blog_post(self, post_id: str) -> Optional[BlogPostOut]:
        with self._lock:
            post = self._posts.get(post_id)
            return post.model_copy(deep=True) if post else None

    def create_blog_post(self, data: BlogPostCreate) -> BlogPostOut:
        now = _now()
        post = BlogPostOut(id=_new_id(), created_at=now, updated_at=now, **_blog_post_fields(data))
        with self._lock:
            self._posts[post.id] = post
            return post.model_copy(deep=True)

    def update_blog_post(self, post_id: str, data: BlogPostUpdate) -> Optional[BlogPostOut]:
        changes = data.model_dump(exclude_unset=True)
        with self._lock:
            existing = self._posts.get(post_id)
            if existing is None:
                return None
            updated = existing.model_copy(update={**changes, "updated_at": _now()}, deep=True)
            self._posts[post_id] = updated
            return updated.model_copy(deep=True)

    def delete_blog_post(self, post_id: str) -> bool:
        with self._lock:
            return self._posts.pop(post_id, None) is not None

    def list_learning_resources(self) -> list[LearningResourceOut]:
        with self._lock:
            active = [r for r in self._resources.values() if r.is_active]
            return [r.model_copy(deep=True) for r in self._newest_first(active)]

    def get_learning_resource(
        self, resource_id: str, include_inactive: bool = False
    ) -> Optional[LearningResourceOut]:
        with self._lock:
            resource = self._resources.get(resource_id)
            if resource is None or not (resource.is_active or include_inactive):
                return None
            return resource.model_copy(deep=True)

    def create_learning_resource(self, data: LearningResourceCreate) -> LearningResourceOut:
        now = _now()
        resource = LearningResourceOut(
            id=_new_id(), created_at=now, updated_at=now, **_learning_resource_fields(data)
        )
        with self._lock:
            self._resources[resource.id] = resource
            return resource.model_copy(deep=True)

    def update_learning_resource(
        self, resource_id: str, data: LearningResourceUpdate
    ) -> Optional[LearningResourceOut]:
        changes = data.model_dump(exclude_unset=True)
        with self._lock:
            existing = self._resources.get(resource_id)
            if existing is None or not existing.is_active:
                return None
            updated = existing.model_copy(update={**changes, "updated_at": _now()}, deep=True)
            self._resources[resource_id] = updated
            return updated.model_copy(deep=True)

    def delete_learning_resource(self, resource_id: str) -> bool:
        with self._lock:
            existing = self._resources.get(resource_id)
            if existing is None or not existing.is_active:
                return False
            self._resources[resource_id] = existing.model_copy(
                update={"is_active": False, "updated_at": _now()}
            )
            return True

    def increment_download_count(self, resource_id: str) -> None:
        with self._lock:
            existing = self._resources.get(resource_id)
            if existing is None or not existing.is_active:
                return
            self._resources[resource_id] = existing.model_copy(
                update={"download_count": existing.download_count + 1, "updated_at": _now()}
            )


class SqlContentStore(ContentStore):
    backend = "database"

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    # -------------------------
    # Blog posts
    # -------------------------
    def list_blog_posts(self) -> list[BlogPostOut]:
        with self._session() as db:
            rows = db.scalars(select(BlogPost).order_by(BlogPost.created_at.desc(), BlogPost.id.desc())).all()
            return [BlogPostOut.model_validate(r) for r in rows]

    def get_blog_post(self, post_id: str) -> Optional[BlogPostOut]:
        with self._session() as db:
            row = db.get(BlogPost, post_id)
            return BlogPostOut.model_validate(row) if row else None

    def create_blog_post(self, data: BlogPostCreate) -> BlogPostOut:
        now = _now()
        row = BlogPost(id=_new_id(), created_at=now, updated_at=now, **_blog_post_fields(data))
        with self._session() as db:
            db.add(row)
            db.commit()
            return BlogPostOut.model_validate(row)

    def update_blog_post(self, post_id: str, data: BlogPostUpdate) -> Optional[BlogPostOut]:
        changes = data.model_dump(exclude_unset=True)
        with self._session() as db:
            row = db.get(BlogPost, post_id)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = _now()
            db.commit()
            return BlogPostOut.model_validate(row)

    def delete_blog_post(self, post_id: str) -> bool:
        with self._session() as db:
            result = db.execute(delete(BlogPost).where(BlogPost.id == post_id))
            db.commit()
            return result.rowcount > 0

    # -------------------------
    # Learning resources
    # -------------------------
    def _active_resource(self, db: Session, resource_id: str) -> Optional[LearningResource]:
        row = db.get(LearningResource, resource_id)
        if row is None or not row.is_active:
            return None
        return row

    def list_learning_resources(self) -> list[LearningResourceOut]:
        with self._session() as db:
            rows = db.scalars(
                select(LearningResource)
                .where(LearningResource.is_active.is_(True))
                .order_by(LearningResource.created_at.desc(), LearningResource.id.desc())
            ).all()
            return [LearningResourceOut.model_validate(r) for r in rows]

    def get_learning_resource(
        self, resource_id: str, include_inactive: bool = False
    ) -> Optional[LearningResourceOut]:
        with self._session() as db:
            if include_inactive:
                row = db.get(LearningResource, resource_id)
            else:
                row = self._active_resource(db, resource_id)
            return LearningResourceOut.model_validate(row) if row else None

    def create_learning_resource(self, data: LearningResourceCreate) -> LearningResourceOut:
        now = _now()
        row = LearningResource(
            id=_new_id(), created_at=now, updated_at=now, **_learning_resource_fields(data)
        )
        with self._session() as db:
            db.add(row)
            db.commit()
            return LearningResourceOut.model_validate(row)

    def update_learning_resource(
        self, resource_id: str, data: LearningResourceUpdate
    ) -> Optional[LearningResourceOut]:
        changes = data.model_dump(exclude_unset=True)
        with self._session() as db:
            row = self._active_resource(db, resource_id)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            row.updated_at = _now()
            db.commit()
            return LearningResourceOut.model_validate(row)

    def delete_learning_resource(self, resource_id: str) -> bool:
        with self._session() as db:
            result = db.execute(
                update(LearningResource)
                .where(LearningResource.id == resource_id, LearningResource.is_active.is_(True))
                .values(is_active=False, updated_at=_now())
            )
            db.commit()
            return result.rowcount > 0

    def increment_download_count(self, resource_id: str) -> None:
        # single UPDATE so concurrent downloads never lose an increment
        with self._session() as db:
            db.execute(
                update(LearningResource)
                .where(LearningResource.id == resource_id, LearningResource.is_active.is_(True))
                .values(
                    download_count=LearningResource.download_count + 1,
                    updated_at=_now(),
                )
            )
            db.commit()


def build_store(settings: Settings) -> ContentStore:
    backend = (settings.STORAGE_BACKEND or "database").strip().lower()

    if backend == "memory":
        logger.info("Using in-memory content store")
        return MemoryContentStore()

    if backend != "database":
        raise RuntimeError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND!r}")

    engine = build_engine(get_database_url(settings))
    if settings.AUTO_CREATE_TABLES:
        create_tables(engine)

    logger.info("Using database content store (%s)", engine.dialect.name)
    return SqlContentStore(build_session_factory(engine))
