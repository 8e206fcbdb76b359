import pytest

from restframe.core.repository import DictRepository, repository_for, reset_repositories
from restframe.exceptions import IncorrectUsageError, ObjectNotFoundError, ValidationError

from .elements import Forum, Thread


@pytest.fixture
def forums():
    repo = repository_for(Forum)
    return [
        repo.create(name="python", rank=2),
        repo.create(name="flask", rank=None),
        repo.create(name="marshmallow", rank=1),
    ]


class TestRepositoryLookup:
    def test_repository_is_cached_per_entity(self):
        assert repository_for(Forum) is repository_for(Forum)
        assert repository_for(Forum).entity_cls is Forum

    def test_only_entities_can_be_stored(self):
        with pytest.raises(IncorrectUsageError):
            DictRepository(dict)


class TestPersistence:
    def test_create_generates_sequential_identities(self, forums):
        assert [forum.id for forum in forums] == [1, 2, 3]

    def test_create_validates_values(self):
        with pytest.raises(ValidationError) as exc:
            repository_for(Forum).create(rank=1)

        assert "name" in exc.value.messages
        assert repository_for(Forum).count() == 0

    def test_get_returns_a_fresh_entity(self, forums):
        forum = repository_for(Forum).get(1)

        assert forum == forums[0]
        assert forum is not forums[0]
        assert forum.name == "python"

    def test_get_casts_the_identifier(self, forums):
        assert repository_for(Forum).get("2").name == "flask"

    def test_get_raises_for_unknown_identities(self):
        with pytest.raises(ObjectNotFoundError):
            repository_for(Forum).get(42)

    def test_exists(self, forums):
        assert repository_for(Forum).exists(1) is True
        assert repository_for(Forum).exists("abc") is False
        assert repository_for(Forum).exists(42) is False

    def test_changes_are_persisted_by_add(self, forums):
        repo = repository_for(Forum)
        forum = repo.get(1)
        forum.update({"name": "python3"})

        assert repo.get(1).name == "python"

        repo.add(forum)
        assert repo.get(1).name == "python3"
        assert repo.count() == 3

    def test_entities_of_other_types_are_rejected(self, forums):
        with pytest.raises(IncorrectUsageError):
            repository_for(Thread).add(forums[0])

    def test_reset_clears_records_and_counters(self, forums):
        reset_repositories()

        assert repository_for(Forum).count() == 0
        assert repository_for(Forum).create(name="fresh").id == 1


class TestFiltering:
    def test_filter_by_attribute(self, forums):
        results = repository_for(Forum).filter(name="flask")

        assert [forum.id for forum in results] == [2]

    def test_results_default_to_insertion_order(self, forums):
        assert [forum.name for forum in repository_for(Forum).all()] == [
            "python",
            "flask",
            "marshmallow",
        ]

    def test_order_by_ascending_puts_empty_values_last(self, forums):
        results = repository_for(Forum).filter(order_by=("rank",))

        assert [forum.name for forum in results] == ["marshmallow", "python", "flask"]

    def test_order_by_descending(self, forums):
        results = repository_for(Forum).filter(order_by="-name")

        assert [forum.name for forum in results] == ["python", "marshmallow", "flask"]

    def test_order_by_multiple_keys(self, forums):
        repository_for(Forum).create(name="flask", rank=5)
        results = repository_for(Forum).filter(order_by=("name", "-rank"))

        assert [(forum.name, forum.rank) for forum in results] == [
            ("flask", None),
            ("flask", 5),
            ("marshmallow", 1),
            ("python", 2),
        ]


class TestRemoval:
    def test_remove(self, forums):
        repo = repository_for(Forum)
        repo.remove(forums[1])

        assert repo.count() == 2
        assert repo.exists(2) is False

    def test_removing_an_absent_entity_raises(self, forums):
        repo = repository_for(Forum)
        repo.remove(forums[1])

        with pytest.raises(ObjectNotFoundError):
            repo.remove(forums[1])

    def test_removal_cascades_to_dependent_entities(self, forums):
        threads = repository_for(Thread)
        threads.create(forum=forums[0], subject="GIL")
        threads.create(forum=forums[0], subject="asyncio")
        threads.create(forum=forums[1], subject="blueprints")

        repository_for(Forum).remove(forums[0])

        assert [thread.subject for thread in threads.all()] == ["blueprints"]
