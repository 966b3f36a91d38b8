"""Tests for the blog domain models and the response envelopes."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from src.domain.keys import create_key_accessor
from src.domain.models.blog import Blog, Post, Tag
from src.domain.models.responses import EntityListResponse, EntityResponse


def test_tag_defaults_to_unassigned_key():
    assert Tag(name="C#").id == 0


@pytest.mark.parametrize("name", ["", "x" * 17])
def test_tag_name_length_is_bounded(name):
    with pytest.raises(ValidationError):
        Tag(name=name)


def test_tag_description_is_limited_to_64_characters():
    Tag(name="ok", description="d" * 64)
    with pytest.raises(ValidationError):
        Tag(name="ok", description="d" * 65)


def test_tag_assignment_is_validated():
    tag = Tag(name="ok")
    with pytest.raises(ValidationError):
        tag.name = "x" * 17


def test_models_accept_camel_case_input():
    post = Post.model_validate(
        {
            "blogId": 2,
            "datePosted": "2024-05-01T10:00:00",
            "author": "a",
            "title": "t",
            "abstract": "ab",
            "content": "c",
            "imageUrl": "https://example.com/i.png",
        }
    )
    assert post.blog_id == 2
    assert post.date_posted == datetime(2024, 5, 1, 10)


def test_models_dump_camel_case_by_alias():
    blog = Blog(author="a", title="t", slug="s", abstract="ab", image_url="u")
    assert "imageUrl" in blog.model_dump(by_alias=True)


@pytest.mark.parametrize("entity_type", [Tag, Post, Blog])
def test_every_model_marks_id_as_key(entity_type):
    assert create_key_accessor(entity_type).key_field.name == "id"


def test_entity_response_wire_shape():
    envelope = EntityResponse[Tag](success=True, data=Tag(id=1, name="C#"))
    wire = envelope.model_dump(mode="json", by_alias=True)
    assert wire == {
        "success": True,
        "errorMessages": [],
        "data": {"id": 1, "name": "C#", "description": None},
    }


def test_entity_response_defaults_to_failure_without_data():
    envelope = EntityResponse[Tag]()
    assert envelope.success is False
    assert envelope.data is None


def test_list_response_parses_camel_case_wire():
    envelope = EntityListResponse[Tag].model_validate(
        {"success": False, "errorMessages": ["boom"], "data": None}
    )
    assert envelope.error_messages == ["boom"]
    assert envelope.data is None


def test_list_response_validates_items():
    with pytest.raises(ValidationError):
        EntityListResponse[Tag].model_validate({"success": True, "data": [{"id": 1}]})
