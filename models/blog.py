from enum import Enum

from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    DateTime,
    Text,
    JSON,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import BaseModel, Base, utcnow


class BlogStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class Blog(BaseModel, Base):
    __tablename__ = "blogs"

    title = Column(String(180), nullable=False)
    slug = Column(String(255), nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False)
    # {"url", "public_id", "width", "height"} as supplied by the client
    banner = Column(JSON, nullable=True)
    author_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    views_count = Column(Integer, nullable=False, default=0)
    likes_count = Column(Integer, nullable=False, default=0)
    comments_count = Column(Integer, nullable=False, default=0)
    status = Column(
        SAEnum(BlogStatus, name="blog_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BlogStatus.DRAFT,
    )
    published_at = Column(DateTime(timezone=True), nullable=True)

    author = relationship("User", lazy="joined")

    __table_args__ = (
        CheckConstraint("likes_count >= 0", name="ck_blogs_likes_nonnegative"),
        CheckConstraint("comments_count >= 0", name="ck_blogs_comments_nonnegative"),
        Index("ix_blogs_created_at", "created_at"),
    )

    def set_status(self, status: BlogStatus):
        """Change status; the first publish stamps published_at."""
        self.status = status
        if status == BlogStatus.PUBLISHED and self.published_at is None:
            self.published_at = utcnow()
