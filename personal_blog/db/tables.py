"""SQLAlchemy table definitions.

These map to the frozen dataclass domain models in personal_blog/models/.
The Sql*Repo classes convert between SQLAlchemy rows and domain dataclasses.
"""

from __future__ import annotations

import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from personal_blog.db.engine import Base

post_categories = Table(
    "post_categories",
    Base.metadata,
    Column(
        "post_id",
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    visible_name: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    # Deleting a user deletes their posts
    posts: Mapped[list[PostRow]] = relationship(
        back_populates="author", cascade="all, delete-orphan"
    )


class CategoryRow(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    posts: Mapped[list[PostRow]] = relationship(
        secondary=post_categories, back_populates="categories"
    )


class PostRow(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    author: Mapped[UserRow] = relationship(back_populates="posts", lazy="joined")
    categories: Mapped[list[CategoryRow]] = relationship(
        secondary=post_categories,
        back_populates="posts",
        lazy="selectin",
        order_by="CategoryRow.id",
    )
