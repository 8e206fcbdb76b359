import pytest

from restframe.core.repository import repository_for
from restframe.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from .elements import Author, Book


class TestReference:
    def test_reference_stores_the_identifier_of_the_entity(self):
        author = repository_for(Author).create(name="Ursula")
        book = Book(title="Earthsea", author=author)

        assert book.author_id == author.id
        assert book.to_dict()["author_id"] == author.id

    def test_reference_accepts_identifiers(self):
        author = repository_for(Author).create(name="Ursula")
        book = Book(title="Earthsea", author=str(author.id))

        assert book.author_id == author.id

    def test_reference_accepts_the_attribute_name(self):
        author = repository_for(Author).create(name="Ursula")
        book = Book(title="Earthsea", author_id=author.id)

        assert book.author == author

    def test_reading_a_reference_fetches_the_entity(self):
        author = repository_for(Author).create(name="Ursula")
        book = Book(title="Earthsea", author=author.id)

        assert isinstance(book.author, Author)
        assert book.author.name == "Ursula"

    def test_reading_a_dangling_reference_raises(self):
        book = Book(title="Earthsea", author=999)

        with pytest.raises(ObjectNotFoundError):
            book.author

    def test_unsaved_entities_cannot_be_referenced(self):
        with pytest.raises(ValidationError) as exc:
            Book(title="Earthsea", author=Author(name="Ursula"))

        assert "author" in exc.value.messages

    def test_empty_reference_is_none(self):
        assert Book(title="Earthsea").author is None


class TestHasMany:
    def test_related_entities_are_read_from_the_repository(self):
        author = repository_for(Author).create(name="Ursula")
        repository_for(Book).create(title="Earthsea", author=author)
        repository_for(Book).create(title="The Dispossessed", author=author)
        repository_for(Book).create(title="Orphan")

        assert [book.title for book in author.books] == ["Earthsea", "The Dispossessed"]

    def test_unsaved_entity_has_no_related_entities(self):
        assert Author(name="Ursula").books == []

    def test_linked_attribute_is_derived_from_the_owner(self):
        assert Author.books.linked_attribute == "author_id"

    def test_related_entities_cannot_be_assigned(self):
        author = repository_for(Author).create(name="Ursula")

        with pytest.raises(InvalidOperationError):
            author.books = []
