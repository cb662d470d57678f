from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status
from pydantic import Field

from personal_blog.api.dependencies import UserServiceDep
from personal_blog.api.schemas import CamelModel
from personal_blog.models.user import User

router = APIRouter(prefix="/api/users", tags=["users"])

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserOut(CamelModel):
    id: int
    username: str
    email: str
    visible_name: str

    @classmethod
    def from_user(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            visible_name=user.visible_name,
        )


class UserIn(CamelModel):
    visible_name: str = Field(min_length=2, max_length=50)
    username: str = Field(min_length=3, max_length=20, pattern=USERNAME_PATTERN)
    email: str = Field(pattern=EMAIL_PATTERN)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserIn, response: Response, users: UserServiceDep) -> UserOut:
    user = users.create_user(
        username=payload.username,
        email=payload.email,
        visible_name=payload.visible_name,
    )
    response.headers["Location"] = f"/api/users/{user.id}"
    return UserOut.from_user(user)


@router.get("", response_model=list[UserOut])
def list_users(
    users: UserServiceDep,
    with_category: Annotated[str | None, Query(alias="withCategory")] = None,
):
    if with_category is not None:
        found = users.find_users_by_post_category(with_category)
    else:
        found = users.list_users()
    if not found:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return [UserOut.from_user(u) for u in found]


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, users: UserServiceDep) -> UserOut:
    return UserOut.from_user(users.get_user(user_id))


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserIn, users: UserServiceDep) -> UserOut:
    user = users.update_user(
        user_id,
        username=payload.username,
        email=payload.email,
        visible_name=payload.visible_name,
    )
    return UserOut.from_user(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, users: UserServiceDep) -> Response:
    users.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
