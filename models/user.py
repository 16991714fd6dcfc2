from enum import Enum

from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, JSON
from sqlalchemy.types import Enum as SAEnum


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


SOCIAL_LINK_KEYS = ("website", "facebook", "instagram", "x", "youtube")


class User(BaseModel, Base):
    __tablename__ = "users"

    username = Column(String(20), nullable=False, unique=True, index=True)
    email = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SAEnum(Role, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.USER,
    )
    first_name = Column(String(20), nullable=True)
    last_name = Column(String(20), nullable=True)
    social_links = Column(JSON, nullable=True, default=dict)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    def __repr__(self):
        return f"<User id={self.id} role={self.role}>"
