"""SQLAlchemy ORM models backing the persistent state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


class CatalogItemRecord(Base):
    """A movie or show that at least one user has added to a list."""

    __tablename__ = "catalog_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[int] = mapped_column(
        Integer, unique=True, index=True, nullable=False
    )
    title: Mapped[str] = mapped_column(String(500))
    poster_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    overview: Mapped[str] = mapped_column(Text, default="")
    release_date: Mapped[str | None] = mapped_column(String(40), nullable=True)
    vote_average: Mapped[float | None] = mapped_column(Float, nullable=True)
    media_type: Mapped[str] = mapped_column(String(8), default="movie")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    list_entries: Mapped[list["ListEntryRecord"]] = relationship(
        back_populates="item", cascade="all, delete-orphan"
    )
    ratings: Mapped[list["RatingRecord"]] = relationship(
        back_populates="item", cascade="all, delete-orphan"
    )


class ListEntryRecord(Base):
    """Membership of one catalog item in a user's collection."""

    __tablename__ = "list_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_list_entry_user_item"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_items.id", ondelete="CASCADE")
    )
    added_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    item: Mapped[CatalogItemRecord] = relationship(back_populates="list_entries")


class RatingRecord(Base):
    """A user's 0-100 score for one catalog item."""

    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_rating_user_item"),
        CheckConstraint("value >= 0 AND value <= 100", name="ck_rating_value_range"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, index=True)
    item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_items.id", ondelete="CASCADE")
    )
    value: Mapped[int] = mapped_column(Integer)
    rated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    item: Mapped[CatalogItemRecord] = relationship(back_populates="ratings")
