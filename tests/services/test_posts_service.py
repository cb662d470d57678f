from __future__ import annotations

import pytest

from personal_blog.db.memory import InMemoryDatabase
from personal_blog.models.category import Category
from personal_blog.models.user import User
from personal_blog.repos.category_repo import InMemoryCategoryRepo
from personal_blog.repos.post_repo import InMemoryPostRepo
from personal_blog.repos.user_repo import InMemoryUserRepo
from personal_blog.services.cache import InMemoryCacheService
from personal_blog.services.errors import InvalidInputError, NotFoundError
from personal_blog.services.posts_service import PostDraft, PostService

CONTENT = "Long enough content for a post."


@pytest.fixture
def cache() -> InMemoryCacheService:
    return InMemoryCacheService()


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def categories(db: InMemoryDatabase) -> InMemoryCategoryRepo:
    return InMemoryCategoryRepo(db)


@pytest.fixture
def service(
    db: InMemoryDatabase, categories: InMemoryCategoryRepo, cache: InMemoryCacheService
) -> PostService:
    return PostService(InMemoryPostRepo(db), InMemoryUserRepo(db), categories, cache)


@pytest.fixture
def alice(db: InMemoryDatabase) -> User:
    return InMemoryUserRepo(db).add(
        User.new(username="alice", email="alice@example.com", visible_name="Alice")
    )


@pytest.fixture
def bob(db: InMemoryDatabase) -> User:
    return InMemoryUserRepo(db).add(
        User.new(username="bob", email="bob@example.com", visible_name="Bob")
    )


# ---- create ----


def test_create_post_resolves_and_creates_categories(
    service: PostService, alice: User, categories: InMemoryCategoryRepo
) -> None:
    post = service.create_post(
        alice.id,
        title="Hello there",
        content=CONTENT,
        category_names=["  Python ", "Web", "", "Python"],
    )
    assert post.id == 1
    assert post.author == alice
    assert post.category_names == ["Python", "Web"]
    assert post.created_at is not None
    assert [c.name for c in categories.list_all()] == ["Python", "Web"]


def test_create_post_reuses_existing_category(
    service: PostService, alice: User, categories: InMemoryCategoryRepo
) -> None:
    service.create_post(alice.id, title="First post", content=CONTENT, category_names=["Go"])
    service.create_post(alice.id, title="Second post", content=CONTENT, category_names=["Go"])
    assert len(categories.list_all()) == 1


def test_create_post_for_unknown_user_raises(service: PostService) -> None:
    with pytest.raises(NotFoundError, match="User not found"):
        service.create_post(7, title="Hello there", content=CONTENT)


def test_create_post_rejects_blank_title(service: PostService, alice: User) -> None:
    with pytest.raises(InvalidInputError):
        service.create_post(alice.id, title="   ", content=CONTENT)


def test_bulk_create_with_empty_list_touches_nothing(
    service: PostService, cache: InMemoryCacheService
) -> None:
    cache.put("posts:", ())
    # Unknown user id is never even looked up
    assert service.create_posts_bulk(999, []) == []
    assert "posts:" in cache


def test_bulk_create_creates_every_post(service: PostService, alice: User) -> None:
    created = service.create_posts_bulk(
        alice.id,
        [
            PostDraft(title="Post number one", content=CONTENT, category_names=("A1",)),
            PostDraft(title="Post number two", content=CONTENT),
        ],
    )
    assert [p.id for p in created] == [1, 2]
    assert [p.title for p in service.list_posts()] == ["Post number one", "Post number two"]


# ---- reads and caching ----


def test_list_posts_filters_case_insensitively(
    service: PostService, alice: User, bob: User
) -> None:
    service.create_post(alice.id, title="Alice python", content=CONTENT, category_names=["Python"])
    service.create_post(alice.id, title="Alice rust", content=CONTENT, category_names=["Rust"])
    service.create_post(bob.id, title="Bob python", content=CONTENT, category_names=["python"])

    assert [p.title for p in service.list_posts(category="PYTHON")] == [
        "Alice python",
        "Bob python",
    ]
    assert [p.title for p in service.list_posts(author="Alice")] == [
        "Alice python",
        "Alice rust",
    ]
    assert [p.title for p in service.list_posts(category="python", author="BOB")] == [
        "Bob python"
    ]


def test_colon_in_filter_value_does_not_collide_with_other_filters(
    service: PostService, bob: User
) -> None:
    service.create_post(bob.id, title="Bob on py", content=CONTENT, category_names=["py"])

    assert service.list_posts(category="py:author:bob") == []
    assert [p.title for p in service.list_posts(category="py", author="bob")] == ["Bob on py"]


def test_list_posts_uses_lowercased_cache_keys(
    service: PostService, alice: User, cache: InMemoryCacheService
) -> None:
    service.create_post(alice.id, title="Hello there", content=CONTENT, category_names=["Python"])

    service.list_posts()
    service.list_posts(category="Python")
    service.list_posts(author="ALICE")
    service.list_posts(category="Python", author="Alice")

    for key in (
        "posts:",
        "posts:category:python",
        "posts:author:alice",
        "posts:category:python:author:alice",
    ):
        assert key in cache


def test_cached_list_is_served_without_hitting_the_repo(
    service: PostService, alice: User, cache: InMemoryCacheService
) -> None:
    service.create_post(alice.id, title="Hello there", content=CONTENT)
    service.list_posts()
    # Pretend the cached view differs from storage to prove it is the cache answering
    cache.put("posts:", ())
    assert service.list_posts() == []


def test_every_write_invalidates_posts_and_users(
    service: PostService,
    alice: User,
    categories: InMemoryCategoryRepo,
    cache: InMemoryCacheService,
) -> None:
    post = service.create_post(alice.id, title="Hello there", content=CONTENT)
    extra = service.create_post(alice.id, title="Second post", content=CONTENT)
    news = categories.add(Category.new(name="News"))

    writes = [
        lambda: service.update_post(post.id, title="Hello again"),
        lambda: service.add_category_to_post(post.id, news.id),
        lambda: service.delete_post(extra.id),
    ]
    for write in writes:
        cache.put("posts:", ())
        cache.put("users:category:news", ())
        write()
        assert "posts:" not in cache
        assert "users:category:news" not in cache


# ---- update / delete / tagging ----


def test_update_post_replaces_given_fields_only(service: PostService, alice: User) -> None:
    post = service.create_post(
        alice.id, title="Hello there", content=CONTENT, category_names=["Old"]
    )
    updated = service.update_post(post.id, content="Completely new content.")
    assert updated.title == "Hello there"
    assert updated.content == "Completely new content."
    assert updated.category_names == ["Old"]
    assert updated.updated_at is not None

    retagged = service.update_post(post.id, category_names=["New", "Other"])
    assert retagged.category_names == ["New", "Other"]

    cleared = service.update_post(post.id, category_names=[])
    assert cleared.category_names == []


def test_update_unknown_post_raises(service: PostService) -> None:
    with pytest.raises(NotFoundError, match="Post not found"):
        service.update_post(5, title="Whatever title")


def test_add_category_to_post_is_idempotent(
    service: PostService, alice: User, categories: InMemoryCategoryRepo
) -> None:
    post = service.create_post(alice.id, title="Hello there", content=CONTENT, category_names=["Go"])
    go = categories.get_by_name("Go")
    assert go is not None

    again = service.add_category_to_post(post.id, go.id)
    assert again.category_names == ["Go"]


def test_add_unknown_category_to_post_raises(service: PostService, alice: User) -> None:
    post = service.create_post(alice.id, title="Hello there", content=CONTENT)
    with pytest.raises(NotFoundError, match="Category not found"):
        service.add_category_to_post(post.id, 404)


def test_delete_unknown_post_raises(service: PostService) -> None:
    with pytest.raises(NotFoundError):
        service.delete_post(1)
