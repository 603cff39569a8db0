"""User model."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from app.database import Base

# Value written to account_slot in single-account mode. The unique index on
# the column lets only one row hold it.
SINGLE_ACCOUNT_SLOT = 1


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class User(Base):
    """Registered account. Timestamps are naive UTC."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_name = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=True, index=True)
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    password_hash = Column(String(256), nullable=False)
    profile_picture = Column(Text, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    account_slot = Column(Integer, unique=True, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
