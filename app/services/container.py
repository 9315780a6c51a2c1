"""Runtime services shared by the routers.

Built once in ``create_app`` and kept on ``app.state.container``; there is no
module-level instance, so every app (and every test) gets its own store and
upload directory.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from app.core.config import Settings
from app.services.repository import ContentStore
from app.services.storage import AttachmentStorage


@dataclass
class ServiceContainer:
    settings: Settings
    store: ContentStore
    attachments: AttachmentStorage

    def get_service_status(self) -> dict:
        return {
            "storage": self.store.backend,
            "upload_dir": str(self.attachments.base_dir),
        }


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_store(request: Request) -> ContentStore:
    return get_container(request).store


def get_attachments(request: Request) -> AttachmentStorage:
    return get_container(request).attachments
