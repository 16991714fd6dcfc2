from sqlalchemy import Column, String, ForeignKey, UniqueConstraint

from models.base_model import BaseModel, Base


class Like(BaseModel, Base):
    __tablename__ = "likes"

    blog_id = Column(String(36), ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("blog_id", "user_id", name="uq_likes_blog_user"),
    )
