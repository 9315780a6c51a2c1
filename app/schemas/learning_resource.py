from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from app.schemas.base import ApiModel, reject_null


class ResourceCategory(str, Enum):
    CHILDREN = "어린이용"  # 5-10 years
    SENIORS = "어르신용"  # 50+


class ResourceType(str, Enum):
    WORKSHEET = "활동지"
    VIDEO = "동영상"
    GAME = "게임"
    GUIDE = "안내서"


class Difficulty(str, Enum):
    EASY = "쉬움"
    MEDIUM = "보통"
    HARD = "어려움"


class LearningResourceCreate(ApiModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    file_size: int = Field(ge=0)
    file_type: str = Field(min_length=1)
    category: ResourceCategory
    resource_type: ResourceType
    difficulty: Difficulty
    age_group: str
    is_active: bool


class LearningResourceCreateRelaxed(LearningResourceCreate):
    is_active: Optional[bool] = None

    @field_validator("is_active", mode="before")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class LearningResourceUpdate(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    file_name: Optional[str] = Field(default=None, min_length=1)
    file_size: Optional[int] = Field(default=None, ge=0)
    file_type: Optional[str] = Field(default=None, min_length=1)
    category: Optional[ResourceCategory] = None
    resource_type: Optional[ResourceType] = None
    difficulty: Optional[Difficulty] = None
    age_group: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator(
        "title",
        "description",
        "file_name",
        "file_size",
        "file_type",
        "category",
        "resource_type",
        "difficulty",
        "age_group",
        "is_active",
        mode="before",
    )
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class LearningResourceOut(ApiModel):
    id: str
    title: str
    description: str
    file_name: str
    file_size: int
    file_type: str
    category: ResourceCategory
    resource_type: ResourceType
    difficulty: Difficulty
    age_group: str
    download_count: int = 0
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class UploadedFileOut(ApiModel):
    file_name: str
    original_name: str
    file_size: int
    file_type: str
    file_path: str
