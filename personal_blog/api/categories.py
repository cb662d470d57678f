from __future__ import annotations

from fastapi import APIRouter, Response, status
from pydantic import Field

from personal_blog.api.dependencies import CategoryServiceDep
from personal_blog.api.schemas import CamelModel
from personal_blog.models.category import Category
from personal_blog.services.categories_service import CategoryService

router = APIRouter(prefix="/api/categories", tags=["categories"])


class CategoryOut(CamelModel):
    id: int
    name: str
    posts_titles: list[str]

    @classmethod
    def build(cls, category: Category, service: CategoryService) -> CategoryOut:
        return cls(
            id=category.id,
            name=category.name,
            posts_titles=service.list_post_titles(category.id),
        )


class CategoryIn(CamelModel):
    name: str = Field(min_length=2, max_length=100)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: CategoryIn, categories: CategoryServiceDep) -> CategoryOut:
    category = categories.create_category(payload.name)
    return CategoryOut.build(category, categories)


@router.get("", response_model=list[CategoryOut])
def list_categories(categories: CategoryServiceDep):
    found = categories.list_categories()
    if not found:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return [CategoryOut.build(c, categories) for c in found]


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, categories: CategoryServiceDep) -> CategoryOut:
    return CategoryOut.build(categories.get_category(category_id), categories)


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int, payload: CategoryIn, categories: CategoryServiceDep
) -> CategoryOut:
    category = categories.update_category(category_id, payload.name)
    return CategoryOut.build(category, categories)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, categories: CategoryServiceDep) -> Response:
    categories.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
