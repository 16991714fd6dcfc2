"""
RefreshToken model: the ledger of refresh tokens that are still valid.

A row exists only while its token has not been revoked (logout, rotation,
owner deleted). Signature expiry is checked separately; expired rows are
not swept.

Fields:
- token (the raw signed string, unique)
- user_id (String(36)) - FK to users.id
- created_at
"""
from sqlalchemy import Column, String, Text, ForeignKey

import models
from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    token = Column(Text, nullable=False, unique=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    def __repr__(self):
        return f"<RefreshToken user_id={self.user_id}>"

    @classmethod
    def insert(cls, token: str, user_id: str) -> "RefreshToken":
        """Stage a ledger row; the caller commits."""
        record = cls(token=token, user_id=user_id)
        models.storage.new(record)
        return record

    @classmethod
    def exists(cls, token: str) -> bool:
        session = models.storage.get_session()
        return session.query(cls.id).filter(cls.token == token).first() is not None

    @classmethod
    def delete_by_token(cls, token: str) -> int:
        """Stage deletion of the matching row; returns how many matched."""
        session = models.storage.get_session()
        return session.query(cls).filter(cls.token == token).delete(synchronize_session=False)
