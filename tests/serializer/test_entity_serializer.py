from datetime import datetime

import marshmallow as ma
import pytest

from blog_api.models import Comment, Post, User
from blog_api.serializers import (
    CommentSerializer,
    LinkedCommentSerializer,
    LinkedPostSerializer,
    PostDetailSerializer,
    PostSerializer,
)
from restframe.core.entity import BaseEntity
from restframe.core.field import String
from restframe.core.repository import repository_for
from restframe.core.serializer import EntitySerializer, RelatedField, serializer_for
from restframe.exceptions import ConfigurationError, ValidationError


@pytest.fixture
def post():
    return repository_for(Post).create(title="Hello", text="First post")


@pytest.fixture
def comment(post, user):
    return repository_for(Comment).create(post=post, user=user, text="Nice!")


class TestFieldInference:
    def test_fields_are_inferred_from_the_entity(self):
        fields = PostSerializer().fields

        assert list(fields) == ["id", "title", "text", "created", "comments"]
        assert isinstance(fields["title"], ma.fields.String)
        assert isinstance(fields["created"], ma.fields.DateTime)
        assert isinstance(fields["comments"], RelatedField)

    def test_generated_fields_are_read_only(self):
        fields = PostSerializer().fields

        assert fields["id"].dump_only is True
        assert fields["created"].dump_only is True
        assert fields["comments"].dump_only is True
        assert fields["title"].dump_only is False

    def test_required_fields_follow_the_entity(self):
        fields = PostSerializer().fields
        assert fields["title"].required is True

    def test_exclude_option(self):
        class ShortPostSerializer(EntitySerializer):
            class Meta:
                entity = Post
                exclude = ("text", "comments")

        assert list(ShortPostSerializer().fields) == ["id", "title", "created"]

    def test_declared_fields_take_precedence(self):
        class ShoutingPostSerializer(EntitySerializer):
            title = ma.fields.Method("shout")

            class Meta:
                entity = Post
                fields = ("id", "title")

            def shout(self, obj):
                return obj.title.upper()

        post = Post(id=1, title="hello", text="x")
        assert ShoutingPostSerializer().dump(post) == {"id": 1, "title": "HELLO"}

    def test_read_only_fields_option(self):
        class FrozenTitleSerializer(EntitySerializer):
            class Meta:
                entity = Post
                read_only_fields = ("title",)

        assert FrozenTitleSerializer().fields["title"].dump_only is True

    def test_entity_is_mandatory(self):
        class Orphan(EntitySerializer):
            pass

        with pytest.raises(ConfigurationError):
            Orphan()

    def test_invalid_relations_option_is_rejected(self):
        with pytest.raises(ConfigurationError):

            class Broken(EntitySerializer):
                class Meta:
                    entity = Post
                    relations = "nested"

    def test_serializer_for_builds_a_complete_serializer(self):
        serializer_cls = serializer_for(User)

        assert serializer_cls.__name__ == "UserSerializer"
        assert list(serializer_cls().fields) == ["id", "username"]


class TestDump:
    def test_scalar_values(self, post):
        data = PostSerializer().dump(post)

        assert data["id"] == post.id
        assert data["title"] == "Hello"
        assert data["text"] == "First post"
        assert datetime.fromisoformat(data["created"]) == post.created
        assert data["comments"] == []

    def test_relations_are_identifiers_by_default(self, post, user, comment):
        assert CommentSerializer().dump(comment) == {
            "id": comment.id,
            "post": post.id,
            "user": user.id,
            "text": "Nice!",
        }
        assert PostSerializer().dump(post)["comments"] == [comment.id]

    def test_depth_embeds_related_entities(self, post, user, comment):
        data = PostDetailSerializer().dump(post)

        assert data["comments"] == [
            {"id": comment.id, "post": post.id, "user": user.id, "text": "Nice!"}
        ]

    def test_many(self, post):
        second = repository_for(Post).create(title="Again", text="Second post")
        data = PostSerializer(many=True).dump([post, second])

        assert [item["title"] for item in data] == ["Hello", "Again"]

    def test_dangling_references_are_dumped_as_identifiers(self, post):
        comment = Comment(id=7, post=post.id, user=999, text="Ghost")
        assert CommentSerializer().dump(comment)["user"] == 999


class TestLoad:
    def test_valid_payload(self):
        data, errors = PostSerializer().validate_payload({"title": "Hi", "text": "Body"})

        assert errors == {}
        assert data == {"title": "Hi", "text": "Body"}

    def test_missing_required_field(self):
        data, errors = PostSerializer().validate_payload({"text": "Body"})

        assert data == {}
        assert errors == {"title": ["Missing data for required field."]}

    def test_title_length_is_checked(self):
        _, errors = PostSerializer().validate_payload({"title": "x" * 101, "text": "Body"})
        assert "title" in errors

    def test_read_only_and_unknown_keys_are_ignored(self):
        data, errors = PostSerializer().validate_payload(
            {"id": 10, "title": "Hi", "text": "Body", "created": "2001-01-01", "extra": 1}
        )

        assert errors == {}
        assert data == {"title": "Hi", "text": "Body"}

    def test_partial_payload(self):
        data, errors = PostSerializer().validate_payload({"text": "Body"}, partial=True)

        assert errors == {}
        assert data == {"text": "Body"}

    def test_empty_payload(self):
        _, errors = PostSerializer().validate_payload(None)
        assert set(errors) == {"title", "text"}

    def test_references_are_loaded_as_identifiers(self, post, user):
        data, errors = CommentSerializer().validate_payload(
            {"post": post.id, "user": str(user.id), "text": "Hi"}
        )

        assert errors == {}
        assert data == {"post_id": post.id, "user_id": user.id, "text": "Hi"}

    def test_references_to_missing_entities_are_rejected(self, user):
        _, errors = CommentSerializer().validate_payload(
            {"post": 999, "user": user.id, "text": "Hi"}
        )

        assert errors == {"post": ['Invalid pk "999" - object does not exist.']}

    def test_references_of_the_wrong_type_are_rejected(self, user):
        _, errors = CommentSerializer().validate_payload(
            {"post": {"id": 1}, "user": user.id, "text": "Hi"}
        )

        assert errors == {"post": ["Incorrect type. Expected pk value, received dict."]}

    def test_fractional_references_are_rejected(self, post, user):
        _, errors = CommentSerializer().validate_payload(
            {"post": post.id + 0.5, "user": user.id, "text": "Hi"}
        )

        assert errors == {"post": ["Incorrect type. Expected pk value, received float."]}

    def test_whole_number_floats_are_accepted(self, post, user):
        data, errors = CommentSerializer().validate_payload(
            {"post": float(post.id), "user": user.id, "text": "Hi"}
        )

        assert errors == {}
        assert data["post_id"] == post.id


class TestLinkedRelations:
    def test_dump_uses_urls(self, app, post, user, comment):
        data = LinkedCommentSerializer().dump(comment)

        assert data["url"] == f"http://localhost/comments/{comment.id}"
        assert data["post"] == f"http://localhost/posts/{post.id}"
        assert data["user"] == f"http://localhost/users/{user.id}"

    def test_has_many_relations_are_lists_of_urls(self, app, post, comment):
        data = LinkedPostSerializer().dump(post)
        assert data["comments"] == [f"http://localhost/comments/{comment.id}"]

    def test_load_resolves_urls(self, app, post, user):
        data, errors = LinkedCommentSerializer().validate_payload(
            {
                "post": f"http://localhost/posts/{post.id}",
                "user": f"http://localhost/users/{user.id}",
                "text": "Linked",
            }
        )

        assert errors == {}
        assert data == {"post_id": post.id, "user_id": user.id, "text": "Linked"}

    def test_urls_that_match_no_route_are_rejected(self, app, user):
        _, errors = LinkedCommentSerializer().validate_payload(
            {"post": "http://localhost/nowhere/1", "user": user.id, "text": "Hi"}
        )

        assert errors["post"] == ["Invalid hyperlink - No URL match."]

    def test_urls_of_other_resources_are_rejected(self, app, post, user):
        _, errors = LinkedCommentSerializer().validate_payload(
            {
                "post": f"http://localhost/users/{user.id}",
                "user": f"http://localhost/users/{user.id}",
                "text": "Hi",
            }
        )

        assert errors == {"post": ["Invalid hyperlink - Incorrect URL match."]}


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "Hello", "text": "World"},
        {"title": "x" * 100, "text": "t"},
        {"title": "Ünïcødé", "text": "Multi\nline\ntext"},
        {"title": "Fish & Chips", "text": "a < b && c > d"},
        {"title": "&" + "x" * 99, "text": "<p>markup</p>"},
    ],
)
def test_validated_scalars_survive_a_round_trip(payload):
    data, errors = PostSerializer().validate_payload(payload)
    assert errors == {}

    post = repository_for(Post).create(**data)
    dumped = PostSerializer().dump(post)

    assert {key: dumped[key] for key in payload} == payload


class Label(BaseEntity):
    name = String(max_length=10, required=True)


class LabelSerializer(EntitySerializer):
    class Meta:
        entity = Label


class TestSanitizedLengths:
    def test_length_is_checked_on_the_cleaned_value(self):
        name = "&" + "x" * 9
        _, errors = LabelSerializer().validate_payload({"name": name})

        assert "name" in errors
        with pytest.raises(ValidationError):
            Label(name=name)

    def test_values_that_fit_once_cleaned_are_accepted(self):
        data, errors = LabelSerializer().validate_payload({"name": "x" * 10})

        assert errors == {}
        assert repository_for(Label).create(**data).name == "x" * 10
