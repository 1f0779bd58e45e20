from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from huddle.models.base import Base, IntPrimaryKeyMixin, TimestampMixin


class User(Base, IntPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    # argon2 hash; never part of any response model
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
