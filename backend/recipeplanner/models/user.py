"""
RecipePlanner Backend - User SQLAlchemy Model
==============================================

What:  ORM model representing the `users` table.
Who:   Used by AuthService for registration, login and profile operations,
       and by Alembic for schema management.

Table Design:
    - email is UNIQUE at the database level. The service checks for an
      existing row first, but only the constraint settles a race between
      two concurrent registrations.
    - email is compared case-sensitively, exactly as stored.
    - password_hash only ever holds a bcrypt digest, never the plaintext.
"""

from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from recipeplanner.database import Base


class User(Base):
    """
    An account that owns recipes, meal-plan entries and a shopping list.

    Lifecycle:
        1. Created on registration
        2. name / password_hash updated through the profile endpoint
        3. Deleted together with everything it owns (see AuthService.delete_account)
    """

    __tablename__ = "users"
    # Ids are never reused, so an old token can't name a newer account
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login identifier, unique and case-sensitive",
    )

    name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Display name",
    )

    # bcrypt digests are 60 characters; 255 leaves room for a future scheme
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt digest of the password (never the plaintext)",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        # password_hash deliberately left out
        return f"<User(id={self.id}, email='{self.email}')>"
