"""Tests for the in-memory blog sample repositories."""

from datetime import datetime

from src.domain.keys import KeyRegistry, KeyType
from src.domain.models.blog import Blog, Post
from src.domain.repositories.blog import BlogMemoryRepository


def _post(title: str, **kwargs) -> Post:
    return Post(
        title=title,
        author="Author",
        abstract="Abstract",
        content="<p>Content</p>",
        date_posted=datetime(2024, 5, 1),
        image_url="https://example.com/image.png",
        **kwargs,
    )


def _blog(slug: str, posts=None, **kwargs) -> Blog:
    return Blog(
        author="Author",
        title=slug.title(),
        slug=slug,
        abstract="Abstract",
        image_url="https://example.com/banner.png",
        posts=posts or [],
        **kwargs,
    )


async def test_seed_data_inserts_one_blog():
    repo = BlogMemoryRepository()
    blog = await repo.seed_data()
    assert len(repo) == 1
    assert blog.id != 0
    assert blog.slug == "MattsRamblings"


async def test_seeded_post_is_tagged_and_keyed():
    repo = BlogMemoryRepository()
    blog = await repo.seed_data()
    [post] = blog.posts
    assert post.id != 0
    assert post.blog_id == blog.id
    assert post.tags == ["C#", "Data Access"]


async def test_insert_assigns_post_keys_unique_across_blogs():
    repo = BlogMemoryRepository()
    first = await repo.insert(_blog("first", [_post("a"), _post("b")]))
    second = await repo.insert(_blog("second", [_post("c")]))
    ids = [p.id for p in first.posts + second.posts]
    assert len(set(ids)) == 3
    assert 0 not in ids


async def test_post_keys_are_shared_between_repositories():
    first, second = BlogMemoryRepository(), BlogMemoryRepository()
    a = await first.insert(_blog("first", [_post("a")]))
    b = await second.insert(_blog("second", [_post("b")]))
    assert a.posts[0].id != b.posts[0].id


async def test_insert_keeps_explicit_post_key_and_blog_id():
    repo = BlogMemoryRepository()
    blog = await repo.insert(_blog("kept", [_post("a", id=77, blog_id=5)]))
    assert blog.posts[0].id == 77
    assert blog.posts[0].blog_id == 5


async def test_insert_existing_blog_does_not_link_posts():
    repo = BlogMemoryRepository()
    await repo.insert(_blog("stored", id=1))
    duplicate = _blog("duplicate", [_post("a")], id=1)
    stored = await repo.insert(duplicate)
    assert stored.slug == "stored"
    assert duplicate.posts[0].blog_id == 0


async def test_registry_is_used_for_posts_too():
    registry = KeyRegistry()
    repo = BlogMemoryRepository(registry=registry)
    blog = await repo.insert(_blog("isolated", [_post("a")]))
    assert blog.posts[0].id == 1
    assert registry.counter(Post, KeyType.INT32).value == 1


async def test_duplicate_blog_insert_does_not_consume_post_keys():
    registry = KeyRegistry()
    repo = BlogMemoryRepository(registry=registry)
    await repo.insert(_blog("stored", id=1))
    duplicate = _blog("duplicate", [_post("a"), _post("b")], id=1)
    await repo.insert(duplicate)
    assert [p.id for p in duplicate.posts] == [0, 0]
    assert registry.counter(Post, KeyType.INT32).value == 0
