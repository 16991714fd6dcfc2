from sqlalchemy import Column, String, Text, ForeignKey

from models.base_model import BaseModel, Base


class Comment(BaseModel, Base):
    __tablename__ = "comments"

    blog_id = Column(String(36), ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
