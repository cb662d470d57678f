from __future__ import annotations

import datetime
from typing import Annotated

from fastapi import APIRouter, Query, Response, status
from pydantic import Field, StringConstraints

from personal_blog.api.dependencies import PostServiceDep
from personal_blog.api.schemas import CamelModel
from personal_blog.models.post import Post
from personal_blog.services.posts_service import PostDraft

router = APIRouter(prefix="/api/posts", tags=["posts"])

CategoryName = Annotated[str, StringConstraints(min_length=2, max_length=50)]


class PostOut(CamelModel):
    id: int
    title: str
    content: str
    created_at: datetime.datetime | None
    updated_at: datetime.datetime | None
    author_name: str
    category_names: list[str]

    @classmethod
    def from_post(cls, post: Post) -> PostOut:
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            created_at=post.created_at,
            updated_at=post.updated_at,
            author_name=post.author.username,
            category_names=post.category_names,
        )


class PostIn(CamelModel):
    title: str = Field(min_length=5, max_length=200)
    content: str = Field(min_length=10)
    category_names: list[CategoryName] = Field(default_factory=list)

    def to_draft(self) -> PostDraft:
        return PostDraft(
            title=self.title,
            content=self.content,
            category_names=tuple(self.category_names),
        )


class BulkPostsIn(CamelModel):
    user_id: int
    posts: list[PostIn] = Field(min_length=1)


@router.post(
    "/user/{user_id}", response_model=PostOut, status_code=status.HTTP_201_CREATED
)
def create_post(user_id: int, payload: PostIn, posts: PostServiceDep) -> PostOut:
    post = posts.create_post(
        user_id,
        title=payload.title,
        content=payload.content,
        category_names=payload.category_names,
    )
    return PostOut.from_post(post)


@router.post(
    "/bulk/user/{user_id}",
    response_model=list[PostOut],
    status_code=status.HTTP_201_CREATED,
)
def create_posts_for_user(
    user_id: int, payload: list[PostIn], posts: PostServiceDep
) -> list[PostOut]:
    created = posts.create_posts_bulk(user_id, [p.to_draft() for p in payload])
    return [PostOut.from_post(p) for p in created]


@router.post("/bulk", response_model=list[PostOut], status_code=status.HTTP_201_CREATED)
def create_posts_bulk(payload: BulkPostsIn, posts: PostServiceDep) -> list[PostOut]:
    created = posts.create_posts_bulk(
        payload.user_id, [p.to_draft() for p in payload.posts]
    )
    return [PostOut.from_post(p) for p in created]


@router.get("", response_model=list[PostOut])
def list_posts(
    posts: PostServiceDep,
    category: Annotated[str | None, Query()] = None,
    author: Annotated[str | None, Query()] = None,
):
    found = posts.list_posts(category=category, author=author)
    if not found:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return [PostOut.from_post(p) for p in found]


@router.get("/{post_id}", response_model=PostOut)
def get_post(post_id: int, posts: PostServiceDep) -> PostOut:
    return PostOut.from_post(posts.get_post(post_id))


@router.put("/{post_id}", response_model=PostOut)
def update_post(post_id: int, payload: PostIn, posts: PostServiceDep) -> PostOut:
    post = posts.update_post(
        post_id,
        title=payload.title,
        content=payload.content,
        category_names=payload.category_names,
    )
    return PostOut.from_post(post)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(post_id: int, posts: PostServiceDep) -> Response:
    posts.delete_post(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/categories/{category_id}", response_model=PostOut)
def add_category_to_post(
    post_id: int, category_id: int, posts: PostServiceDep
) -> PostOut:
    return PostOut.from_post(posts.add_category_to_post(post_id, category_id))
