"""Entities: the resources RestFrame exposes

An entity class declares its fields as class attributes. Declaring the class
registers it by name, so relations can point at entities defined later.
"""

import logging

from collections import defaultdict

from restframe.core.field import Auto, Field, HasMany, Reference
from restframe.exceptions import (
    IncorrectUsageError,
    InvalidOperationError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Entity classes by name, used to resolve string references like `HasMany("Comment")`
entity_registry = {}


def _collect_errors(errors, exc):
    for key, messages in exc.messages.items():
        errors[key].extend(messages)


class _EntityMetaclass(type):
    """Gathers the fields of an entity class into its `meta_`.

    Inherited fields come first, in their original order. Entities without
    an identifier field get an `Auto` field named `id`.
    """

    def __new__(mcs, name, bases, attrs, **kwargs):
        new_class = super().__new__(mcs, name, bases, attrs, **kwargs)

        # `BaseEntity` itself has no fields
        if not any(isinstance(base, _EntityMetaclass) for base in bases):
            return new_class

        fields = {}
        for base in reversed(bases):
            base_meta = getattr(base, "meta_", None)
            if base_meta is not None:
                fields.update(
                    (field_name, field_obj)
                    for field_name, field_obj in base_meta.declared_fields.items()
                    if field_name not in attrs
                )
        fields.update((key, value) for key, value in attrs.items() if isinstance(value, Field))

        identifiers = [field_name for field_name, field_obj in fields.items() if field_obj.identifier]
        if len(identifiers) > 1:
            raise IncorrectUsageError(
                f"Entity `{name}` declares more than one identifier field: {identifiers}"
            )
        if not identifiers:
            id_field = Auto()
            id_field.__set_name__(new_class, "id")
            new_class.id = id_field
            fields = {"id": id_field, **fields}

        new_class.meta_ = EntityMeta(name, fields)
        entity_registry[name] = new_class
        logger.debug(f"Registered entity {name} with fields {list(fields)}")

        return new_class


class EntityMeta:
    """Introspection data of an entity class, available as `meta_`

    :param entity_name: Name of the entity class
    :param declared_fields: All fields, inherited ones included, by name
    """

    def __init__(self, entity_name, declared_fields):
        self.entity_name = entity_name
        self.declared_fields = declared_fields

    def _fields_of_type(self, field_type):
        return {
            field_name: field_obj
            for field_name, field_obj in self.declared_fields.items()
            if isinstance(field_obj, field_type)
        }

    @property
    def id_field(self):
        return next(field for field in self.declared_fields.values() if field.identifier)

    @property
    def auto_fields(self):
        return list(self._fields_of_type(Auto).items())

    @property
    def has_many(self):
        return self._fields_of_type(HasMany)

    @property
    def attributes(self):
        """Fields holding a value on the entity, by attribute name. A
        `Reference` named `post` is listed as `post_id`.
        """
        return {
            field_obj.attribute_name: field_obj
            for field_obj in self.declared_fields.values()
            if not isinstance(field_obj, HasMany)
        }


class BaseEntity(metaclass=_EntityMetaclass):
    """Base of all entities.

    ::

        class Post(BaseEntity):
            title = String(max_length=100, required=True)
            text = Text()
            created = DateTime(auto_now_add=True)

    Keyword arguments are loaded through the fields. Every problem found,
    unknown keys included, is reported in a single :exc:`ValidationError`.
    References can be given by field name or by attribute name.
    """

    def __init__(self, **kwargs):
        if type(self) is BaseEntity:
            raise TypeError("BaseEntity cannot be instantiated")

        errors = defaultdict(list)

        for field_name, field_obj in self.meta_.declared_fields.items():
            if isinstance(field_obj, HasMany):
                continue

            value = kwargs.pop(field_name, None)
            if isinstance(field_obj, Reference):
                by_attribute = kwargs.pop(field_obj.attribute_name, None)
                if value is None:
                    value = by_attribute

            try:
                setattr(self, field_name, value)
            except ValidationError as err:
                _collect_errors(errors, err)

        for key in kwargs:
            errors[key].append("is not a recognized attribute")

        if errors:
            logger.debug(f"Invalid {self.__class__.__name__}: {dict(errors)}")
            raise ValidationError(dict(errors))

    def update(self, data):
        """Change the attributes named in `data` and return the entity.

        Nothing is changed unless every value is valid.
        """
        errors = defaultdict(list)
        loaded = []

        for key, value in data.items():
            field_obj = self.meta_.declared_fields.get(key) or self.meta_.attributes.get(key)
            if field_obj is None or isinstance(field_obj, HasMany):
                errors[key].append("is not a recognized attribute")
                continue

            try:
                loaded.append((field_obj, field_obj._load(value)))
            except ValidationError as err:
                _collect_errors(errors, err)

        if errors:
            raise ValidationError(dict(errors))

        for field_obj, value in loaded:
            current = self.__dict__.get(field_obj.attribute_name)
            if getattr(field_obj, "auto_now_add", False) and current not in (None, value):
                raise InvalidOperationError(f"`{field_obj.field_name}` cannot be changed once set")

        for field_obj, value in loaded:
            self.__dict__[field_obj.attribute_name] = value

        return self

    def to_dict(self):
        """Stored values by attribute name"""
        return {name: self.__dict__.get(name) for name in self.meta_.attributes}

    @property
    def identity(self):
        return self.__dict__.get(self.meta_.id_field.attribute_name)

    def __eq__(self, other):
        return (
            type(other) is type(self)
            and self.identity is not None
            and self.identity == other.identity
        )

    def __hash__(self):
        return hash((type(self).__name__, self.identity))

    def __repr__(self):
        return f"<{type(self).__name__}: {self.identity}>"
