"""End-to-end tests: ApiRepository talking to the resource controller in-process.

ASGITransport does not run the lifespan, so the app is built over repositories
seeded by the test.
"""

from datetime import datetime
from unittest.mock import AsyncMock

import httpx
import pytest

from src.domain.exceptions import NotSupportedError
from src.domain.models.blog import Blog, Post, Tag
from src.domain.repositories.blog import BlogMemoryRepository, TagMemoryRepository
from src.domain.services.blog import TagService
from src.domain.services.manager import Manager
from src.infrastructure.api.app import create_app
from src.infrastructure.api.blog import ApiBlogRepository, ApiTagRepository


@pytest.fixture
async def tag_store() -> TagMemoryRepository:
    store = TagMemoryRepository()
    await TagService(store).seed_data()
    return store


@pytest.fixture
async def blog_store() -> BlogMemoryRepository:
    store = BlogMemoryRepository()
    await store.seed_data()
    return store


@pytest.fixture
def client(tag_store, blog_store) -> httpx.AsyncClient:
    app = create_app(tags=tag_store, blogs=blog_store)
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def tags(client) -> ApiTagRepository:
    return ApiTagRepository(client)


@pytest.fixture
def blogs(client) -> ApiBlogRepository:
    return ApiBlogRepository(client)


# --- tags over the wire ---

async def test_get_all_returns_tags_ordered_by_name(tags):
    names = [t.name for t in await tags.get_all()]
    assert names == [".NET Core", "Blazor", "Data Access", "Tutorial"]


async def test_get_all_pages_on_the_server(tags):
    names = [t.name for t in await tags.get_all(skip=1, take=2)]
    assert names == ["Blazor", "Data Access"]


async def test_get_by_id_returns_tag(tags):
    assert (await tags.get_by_id(3)).name == "Blazor"


async def test_get_by_id_missing_returns_none(tags):
    assert await tags.get_by_id(99) is None


async def test_insert_allocates_key_on_server(tags, tag_store):
    tag = await tags.insert(Tag(name="C#", description="The language"))
    assert tag.id not in (0, 1, 2, 3, 4)
    assert (await tag_store.get_by_id(tag.id)).name == "C#"


async def test_insert_existing_key_returns_stored_tag(tags):
    tag = await tags.insert(Tag(id=1, name="Other"))
    assert tag.name == "Data Access"


async def test_update_replaces_stored_tag(tags, tag_store):
    await tags.update(Tag(id=2, name="Python", description="All about Python"))
    assert (await tag_store.get_by_id(2)).name == "Python"


async def test_delete_by_id_then_again(tags, tag_store):
    assert await tags.delete_by_id(4) is True
    assert await tag_store.get_by_id(4) is None
    assert await tags.delete_by_id(4) is False


async def test_delete_entity(tags):
    assert await tags.delete(Tag(id=1, name="Data Access")) is True


# --- blogs over the wire ---

async def test_blog_posts_travel_with_blog(blogs):
    [blog] = await blogs.get_all()
    assert blog.slug == "MattsRamblings"
    [post] = blog.posts
    assert post.tags == ["C#", "Data Access"]
    assert isinstance(post.date_posted, datetime)


async def test_insert_blog_with_post(blogs, blog_store):
    post = Post(
        title="Second",
        author="Matt",
        abstract="a",
        content="c",
        date_posted=datetime(2024, 5, 1),
        image_url="u",
    )
    blog = await blogs.insert(
        Blog(author="Matt", title="Another", slug="another", abstract="a", image_url="u", posts=[post])
    )
    assert blog.id != 0
    assert blog.posts[0].blog_id == blog.id
    assert len(blog_store) == 2


# --- wire format ---

async def test_list_envelope_is_camel_case(client):
    response = await client.get("/api/tags", params={"take": 1})
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "errorMessages": [],
        "data": [{"id": 2, "name": ".NET Core", "description": "All about .NET Core"}],
    }


async def test_missing_item_is_success_with_null_data(client):
    response = await client.get("/api/tags/99")
    assert response.status_code == 200
    assert response.json()["data"] is None


async def test_delete_missing_item_is_404(client):
    response = await client.delete("/api/tags/99")
    assert response.status_code == 404


async def test_post_rejects_invalid_entity(client):
    response = await client.post("/api/tags", json={"name": "x" * 17})
    assert response.status_code == 422


async def test_blog_fields_are_camel_case(client):
    blog = (await client.get("/api/blogs/1")).json()["data"]
    assert "imageUrl" in blog
    assert "datePosted" in blog["posts"][0]


# --- failures ---

async def test_swallowed_query_failure_is_500(tag_store, client):
    tag_store.get = AsyncMock(return_value=None)
    response = await client.get("/api/tags")
    assert response.status_code == 500


async def test_data_access_error_is_500(tag_store, client):
    tag_store.get_by_id = AsyncMock(side_effect=NotSupportedError("nope"))
    response = await client.get("/api/tags/1")
    assert response.status_code == 500


async def test_failed_request_surfaces_as_none_in_client(tag_store, tags):
    tag_store.get = AsyncMock(return_value=None)
    assert await tags.get_all() is None


async def test_manager_over_api_repository_cannot_query(tags):
    manager = Manager(tags)
    assert manager.supports_queries is False
    with pytest.raises(NotSupportedError):
        await manager.get(filter=lambda t: True)


# --- application ---

async def test_lifespan_seeds_default_repositories():
    app = create_app()
    async with app.router.lifespan_context(app):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        ) as client:
            tags = (await client.get("/api/tags")).json()["data"]
            blogs = (await client.get("/api/blogs")).json()["data"]
    assert len(tags) == 4
    assert blogs[0]["slug"] == "MattsRamblings"


async def test_supplied_repositories_are_not_seeded():
    empty = TagMemoryRepository()
    app = create_app(tags=empty, blogs=BlogMemoryRepository())
    async with app.router.lifespan_context(app):
        pass
    assert len(empty) == 0
