from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class LearningResource(Base):
    __tablename__ = "learning_resources"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # attached file, stored under UPLOAD_DIR
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    file_type: Mapped[str] = mapped_column(Text, nullable=False)

    category: Mapped[str] = mapped_column(Text, nullable=False)  # 어린이용, 어르신용
    resource_type: Mapped[str] = mapped_column(Text, nullable=False)  # 활동지, 동영상, 게임, 안내서
    difficulty: Mapped[str] = mapped_column(Text, nullable=False)  # 쉬움, 보통, 어려움
    age_group: Mapped[str] = mapped_column(Text, nullable=False)

    download_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
