import pytest

from blog_api.models import Comment, Post
from restframe.core.repository import repository_for
from restframe.core.transport import (
    InvalidRequestObject,
    ResponseFailure,
    ResponseSuccess,
    ResponseSuccessCreated,
    ResponseSuccessWithNoContent,
    Status,
)
from restframe.core.usecase import (
    CreateRequestObject,
    CreateUseCase,
    DeleteRequestObject,
    DeleteUseCase,
    ListRequestObject,
    ListUseCase,
    ShowRequestObject,
    ShowUseCase,
    Tasklet,
    UpdateRequestObject,
    UpdateUseCase,
    UseCase,
)
from restframe.exceptions import UsecaseExecutionError


@pytest.fixture
def posts():
    repo = repository_for(Post)
    return [
        repo.create(title="Zebra", text="Stripes"),
        repo.create(title="Aardvark", text="Ants"),
        repo.create(title="Moose", text="Antlers"),
    ]


class TestRequestObjects:
    def test_valid_request_object(self):
        request_object = ShowRequestObject.from_dict(Post, {"identifier": 1})

        assert request_object.is_valid
        assert request_object.entity_cls is Post
        assert request_object.identifier == 1

    def test_missing_parameters_make_an_invalid_request(self):
        request_object = UpdateRequestObject.from_dict(Post, {"identifier": 1})

        assert isinstance(request_object, InvalidRequestObject)
        assert request_object.errors == [{"parameter": "data", "message": "is required"}]

    def test_missing_entity_makes_an_invalid_request(self):
        request_object = ShowRequestObject.from_dict(None, {"identifier": 1})

        assert request_object.is_valid is False

    def test_list_request_splits_filters_from_other_params(self):
        request_object = ListRequestObject.from_dict(
            Post, {"title": "Moose", "page": "2", "order_by": "-title, id"}
        )

        assert request_object.filters == {"title": "Moose"}
        assert request_object.order_by == ("-title", "id")
        assert request_object.params == {"page": "2"}

    def test_list_request_rejects_unknown_order_keys(self):
        request_object = ListRequestObject.from_dict(Post, {"order_by": ["color"]})

        assert request_object.is_valid is False
        assert request_object.errors[0]["parameter"] == "order_by"

    def test_list_request_casts_filter_values(self):
        request_object = ListRequestObject.from_dict(Comment, {"post_id": "3"})
        assert request_object.filters == {"post_id": 3}

    def test_list_request_rejects_uncastable_filter_values(self):
        request_object = ListRequestObject.from_dict(Comment, {"post_id": "three"})
        assert request_object.is_valid is False


class TestResponseObjects:
    def test_failure_value(self):
        response = ResponseFailure.build_not_found({"identifier": ["missing"]})

        assert response.success is False
        assert response.value == {"code": 404, "message": {"identifier": ["missing"]}}

    def test_system_errors_are_masked(self):
        response = ResponseFailure.build_system_error("KeyError: 'secret'")

        assert response.code == Status.SYSTEM_ERROR
        assert response.message == ResponseFailure.exception_message

    def test_invalid_requests_are_parameter_errors(self):
        invalid = InvalidRequestObject()
        invalid.add_error("data", "is required")
        response = ResponseFailure.build_from_invalid_request(invalid)

        assert response.value == {"code": 400, "message": {"data": ["is required"]}}

    def test_success_responses(self):
        assert ResponseSuccess(Status.SUCCESS, "x").success is True
        assert ResponseSuccessCreated().code == Status.SUCCESS_CREATED
        assert ResponseSuccessWithNoContent().code == Status.SUCCESS_WITH_NO_CONTENT


class TestUseCases:
    def test_show(self, posts):
        response = ShowUseCase().execute(ShowRequestObject.from_dict(Post, {"identifier": 2}))

        assert response.code == Status.SUCCESS
        assert response.value.title == "Aardvark"

    def test_show_unknown_identity(self):
        response = ShowUseCase().execute(ShowRequestObject.from_dict(Post, {"identifier": 9}))

        assert response.code == Status.NOT_FOUND
        assert response.value["message"] == {
            "identifier": ["Object with this ID does not exist."]
        }

    def test_list_with_ordering(self, posts):
        response = ListUseCase().execute(
            ListRequestObject.from_dict(Post, {"order_by": "title"})
        )

        assert [post.title for post in response.value] == ["Aardvark", "Moose", "Zebra"]

    def test_create(self):
        response = CreateUseCase().execute(
            CreateRequestObject.from_dict(Post, {"data": {"title": "New", "text": "Body"}})
        )

        assert response.code == Status.SUCCESS_CREATED
        assert response.value.id == 1
        assert repository_for(Post).count() == 1

    def test_create_with_invalid_data(self):
        response = CreateUseCase().execute(
            CreateRequestObject.from_dict(Post, {"data": {"text": "Body"}})
        )

        assert response.code == Status.PARAMETERS_ERROR
        assert response.value["message"] == {"title": ["is required"]}
        assert repository_for(Post).count() == 0

    def test_update(self, posts):
        response = UpdateUseCase().execute(
            UpdateRequestObject.from_dict(Post, {"identifier": 1, "data": {"title": "Horse"}})
        )

        assert response.code == Status.SUCCESS
        assert repository_for(Post).get(1).title == "Horse"

    def test_update_of_immutable_values_is_unprocessable(self, posts):
        response = UpdateUseCase().execute(
            UpdateRequestObject.from_dict(
                Post, {"identifier": 1, "data": {"created": "2001-01-01T00:00:00+00:00"}}
            )
        )

        assert response.code == Status.UNPROCESSABLE_ENTITY

    def test_delete(self, posts):
        response = DeleteUseCase().execute(
            DeleteRequestObject.from_dict(Post, {"identifier": 1})
        )

        assert response.code == Status.SUCCESS_WITH_NO_CONTENT
        assert repository_for(Post).exists(1) is False

    def test_unexpected_errors_are_system_errors(self, caplog):
        class ExplodingUseCase(UseCase):
            def process_request(self, request_object):
                raise KeyError("boom")

        response = ExplodingUseCase().execute(ShowRequestObject.from_dict(Post, {"identifier": 1}))

        assert response.code == Status.SYSTEM_ERROR
        assert response.value["message"] == ResponseFailure.exception_message
        assert "ExplodingUseCase execution failed" in caplog.text


class TestTasklet:
    def test_perform_returns_the_response(self, posts):
        response = Tasklet.perform(Post, ShowUseCase, ShowRequestObject, {"identifier": 1})
        assert response.value.title == "Zebra"

    def test_perform_returns_failures(self):
        response = Tasklet.perform(Post, ShowUseCase, ShowRequestObject, {"identifier": 1})
        assert isinstance(response, ResponseFailure)

    def test_perform_raises_failures_when_asked_to(self):
        with pytest.raises(UsecaseExecutionError) as exc:
            Tasklet.perform(
                Post, ShowUseCase, ShowRequestObject, {"identifier": 1}, raise_error=True
            )

        code, value = exc.value.value
        assert code == Status.NOT_FOUND
        assert value["code"] == 404
