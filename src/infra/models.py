"""
SQLAlchemy ORM models for database tables
"""

from sqlalchemy import Column, String, DateTime, Index, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
import uuid

Base = declarative_base()


def _new_user_id() -> str:
    return str(uuid.uuid4())


class UserModel(Base):
    """SQLAlchemy ORM model for users table"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_user_id)
    wallet = Column(String(64), nullable=False)
    email = Column(String(320), nullable=False)
    twitter = Column(String(16), nullable=False)
    # Owned item references kept as a JSON document: [{"item": "..."}]
    items = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_users_wallet', 'wallet', unique=True),
    )

    def __repr__(self):
        return f"<User(id='{self.id}', wallet='{self.wallet}', twitter='{self.twitter}')>"
