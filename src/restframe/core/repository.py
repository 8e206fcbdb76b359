"""In-memory storage of entities, one dictionary per entity class"""

import logging

from collections import defaultdict
from itertools import count
from threading import Lock

from restframe.core.entity import BaseEntity
from restframe.exceptions import (
    IncorrectUsageError,
    ObjectNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Global in-memory store of dict data, keyed by entity name
_databases = defaultdict(dict)
_counters = defaultdict(lambda: count(1))
_lock = Lock()

_repositories = {}


def _sort_key(value):
    # Empty values sort last, and are never compared with real values
    return (value is None, "" if value is None else value)


class DictRepository:
    """Stores the entities of one class, keyed by identity

    Records are stored as plain dictionaries of attribute values and
    rebuilt into entities when read, so callers never share state with
    the store.
    """

    def __init__(self, entity_cls):
        if not (isinstance(entity_cls, type) and issubclass(entity_cls, BaseEntity)):
            raise IncorrectUsageError(f"{entity_cls} is not an Entity class")

        self.entity_cls = entity_cls
        self.model_name = entity_cls.meta_.entity_name

    @property
    def _data(self):
        return _databases[self.model_name]

    def _set_auto_fields(self, record):
        """Number `Auto` fields left empty from per-entity counters"""
        for field_name, _ in self.entity_cls.meta_.auto_fields:
            counter_key = f"{self.model_name}_{field_name}"
            if record.get(field_name) is None:
                record[field_name] = next(_counters[counter_key])
        return record

    def _to_entity(self, record):
        return self.entity_cls(**record)

    def add(self, entity):
        """Persist a new or changed entity and return it with generated values"""
        if not isinstance(entity, self.entity_cls):
            raise IncorrectUsageError(
                f"{entity!r} cannot be stored in the `{self.model_name}` repository"
            )

        id_field_name = self.entity_cls.meta_.id_field.field_name
        with _lock:
            record = self._set_auto_fields(entity.to_dict())
            self._data[record[id_field_name]] = record

        # Reflect generated values back on the entity
        for field_name, _ in self.entity_cls.meta_.auto_fields:
            setattr(entity, field_name, record[field_name])

        logger.debug(f"Stored {self.model_name} with identity {record[id_field_name]}")
        return entity

    def create(self, **values):
        """Build an entity from `values`, persist and return it"""
        return self.add(self.entity_cls(**values))

    def get(self, identifier):
        """Fetch an entity by its identifier"""
        record = self._data.get(self._cast_identifier(identifier))
        if record is None:
            raise ObjectNotFoundError(
                f"`{self.model_name}` object with identifier {identifier} does not exist."
            )
        return self._to_entity(dict(record))

    def exists(self, identifier):
        return self._cast_identifier(identifier) in self._data

    def filter(self, order_by=(), **filters):
        """Return entities whose attributes match all `filters`

        `order_by` is a sequence of attribute names; prefix a name with
        `-` to sort in descending order. Results default to insertion order.
        """
        records = [
            record
            for record in self._data.values()
            if all(record.get(key) == value for key, value in filters.items())
        ]

        if isinstance(order_by, str):
            order_by = (order_by,)

        # Sort by the least significant key first, so the first key wins
        for o_key in reversed(tuple(order_by)):
            reverse = o_key.startswith("-")
            key = o_key.lstrip("-")
            records = sorted(
                records,
                key=lambda record: _sort_key(record.get(key)),
                reverse=reverse,
            )

        return [self._to_entity(dict(record)) for record in records]

    def all(self, order_by=()):
        return self.filter(order_by=order_by)

    def count(self):
        return len(self._data)

    def remove(self, entity):
        """Remove the entity, and entities that depend on it"""
        identifier = entity.identity
        with _lock:
            if self._data.pop(identifier, None) is None:
                raise ObjectNotFoundError(
                    f"`{self.model_name}` object with identifier {identifier} does not exist."
                )

        for field_obj in self.entity_cls.meta_.has_many.values():
            related_repo = repository_for(field_obj.to_cls)
            for related in related_repo.filter(**{field_obj.linked_attribute: identifier}):
                related_repo.remove(related)

        logger.debug(f"Removed {self.model_name} with identity {identifier}")

    def _cast_identifier(self, identifier):
        try:
            return self.entity_cls.meta_.id_field._cast_to_type(identifier)
        except ValidationError:
            return identifier


def repository_for(entity_cls):
    """Return the repository that stores `entity_cls` records"""
    name = entity_cls.meta_.entity_name
    if name not in _repositories or _repositories[name].entity_cls is not entity_cls:
        _repositories[name] = DictRepository(entity_cls)
    return _repositories[name]


def reset_repositories():
    """Clear all stored records and identity counters"""
    with _lock:
        _databases.clear()
        _counters.clear()
