"""Typed attributes of entities

Fields are descriptors. Assigning to one on an entity instance casts the
value to the field's type, applies the default or the required check and
runs the validators, raising :exc:`ValidationError` keyed by field name.
"""

import datetime

from abc import ABCMeta, abstractmethod
from typing import Any, Iterable

import bleach
import inflection

from dateutil.parser import parse as parse_datetime

from restframe.core import validators
from restframe.exceptions import (
    ConfigurationError,
    InvalidOperationError,
    ValidationError,
)

# Values treated as "not provided"
EMPTY_VALUES = (None, "", [], (), {})


def fetch_entity_cls(name):
    """Resolve an entity class registered under `name`"""
    from restframe.core.entity import entity_registry

    try:
        return entity_registry[name]
    except KeyError:
        raise ConfigurationError(f"Entity `{name}` has not been defined")


class Field(metaclass=ABCMeta):
    """Base of all entity fields.

    :param identifier: The field holds the identity of the entity. Identity
        fields are always required.
    :param default: Value, or callable producing one, used when no value is given.
    :param required: Reject empty values.
    :param validators: Callables run on every non-empty value, after casting.
    :param error_messages: Overrides of the messages in `default_error_messages`.
    """

    default_error_messages = {
        "invalid": "Value is not a valid type for this field.",
        "required": "is required",
    }
    default_validators = []
    empty_values = EMPTY_VALUES

    def __init__(
        self,
        identifier: bool = False,
        default: Any = None,
        required: bool = False,
        validators: Iterable = (),
        error_messages: dict = None,
    ):
        self.identifier = identifier
        self.default = default
        self.required = required or identifier
        self._validators = list(validators)

        self.error_messages = {}
        for klass in reversed(type(self).__mro__):
            self.error_messages.update(getattr(klass, "default_error_messages", {}))
        self.error_messages.update(error_messages or {})

        # Known once the field is bound to an entity class
        self.field_name = None
        self.attribute_name = None
        self._entity_cls = None

    def __set_name__(self, entity_cls, name):
        self._entity_cls = entity_cls
        self.field_name = name
        self.attribute_name = self.get_attribute_name()

    def get_attribute_name(self):
        """Key of the value in the instance `__dict__`"""
        return self.field_name

    @property
    def label(self):
        """Key of the field in error messages"""
        return self.field_name or "unlinked"

    @property
    def validators(self):
        return [*self.default_validators, *self._validators]

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance.__dict__.get(self.attribute_name)

    def __set__(self, instance, value):
        instance.__dict__[self.attribute_name] = self._load(value)

    def __delete__(self, instance):
        instance.__dict__.pop(self.attribute_name, None)

    def fail(self, key, **kwargs):
        """Raise a `ValidationError` with the message registered under `key`"""
        if key not in self.error_messages:
            raise AssertionError(
                f"`{type(self).__name__}` has no error message for `{key}`"
            )

        message = self.error_messages[key]
        if isinstance(message, str):
            message = message.format(**kwargs)
        raise ValidationError({self.label: [message]})

    @abstractmethod
    def _cast_to_type(self, value: Any):
        """Convert a non-empty value to the field's type, or `fail("invalid")`"""

    def as_dict(self, value):
        """JSON friendly form of `value`"""
        return value

    def _run_validators(self, value):
        messages = []
        for validator in self.validators:
            try:
                validator(value)
            except ValidationError as err:
                messages.append(err.messages)

        if messages:
            raise ValidationError({self.label: messages})

    def _load(self, value: Any):
        """Cast and validate `value`, returning what is stored on the entity"""
        if value in self.empty_values:
            if self.default is not None:
                return self.default() if callable(self.default) else self.default
            if self.required:
                self.fail("required")
            if value is None:
                return None

        value = self._cast_to_type(value)
        if value not in self.empty_values:
            self._run_validators(value)
        return value

    def __repr__(self):
        return f"{type(self).__name__}(field_name={self.field_name!r})"


class Auto(Field):
    """Integer identity assigned by the repository when the entity is first saved"""

    default_error_messages = {"invalid": '"{value}" value must be an integer.'}

    def __init__(self, **kwargs):
        kwargs.setdefault("identifier", True)
        super().__init__(**kwargs)
        self.required = False

    def _cast_to_type(self, value):
        try:
            return int(value)
        except (TypeError, ValueError):
            self.fail("invalid", value=value)


class Text(Field):
    """Free text of any length.

    :param sanitize: Escape markup outside of `bleach`'s allowed tags.
    """

    def __init__(self, sanitize=True, **kwargs):
        self.sanitize = sanitize
        super().__init__(**kwargs)

    def _cast_to_type(self, value):
        if not isinstance(value, str):
            value = str(value)
        if self.sanitize:
            value = bleach.clean(value)
        return value


class String(Text):
    """Text bounded in length, 255 characters at most by default"""

    def __init__(self, max_length=255, min_length=None, **kwargs):
        self.max_length = max_length
        self.min_length = min_length
        self.default_validators = [
            validators.MinLengthValidator(min_length),
            validators.MaxLengthValidator(max_length),
        ]
        super().__init__(**kwargs)


class Integer(Field):
    """Whole numbers, optionally within `min_value` and `max_value`"""

    default_error_messages = {"invalid": '"{value}" value must be an integer.'}

    def __init__(self, min_value=None, max_value=None, **kwargs):
        self.min_value = min_value
        self.max_value = max_value
        self.default_validators = [
            validators.MinValueValidator(min_value),
            validators.MaxValueValidator(max_value),
        ]
        super().__init__(**kwargs)

    def _cast_to_type(self, value):
        try:
            return int(value)
        except (TypeError, ValueError):
            self.fail("invalid", value=value)


class Boolean(Field):
    """Booleans, also accepting the usual string spellings from query strings and forms"""

    default_error_messages = {"invalid": '"{value}" value must be either True or False.'}

    TRUE_VALUES = ("t", "True", "true", "1")
    FALSE_VALUES = ("f", "False", "false", "0")

    def _cast_to_type(self, value):
        if value is True or value is False:
            return value
        if value in self.TRUE_VALUES or value == 1:
            return True
        if value in self.FALSE_VALUES or value == 0:
            return False
        self.fail("invalid", value=value)


class DateTime(Field):
    """Timestamps. Strings are parsed with `dateutil`.

    :param auto_now_add: Default to the current UTC time, and refuse changes
        once a value is set.
    """

    default_error_messages = {"invalid": '"{value}" has an invalid date format.'}

    def __init__(self, auto_now_add=False, **kwargs):
        self.auto_now_add = auto_now_add
        if auto_now_add:
            kwargs.setdefault("default", lambda: datetime.datetime.now(datetime.timezone.utc))
        super().__init__(**kwargs)

    def __set__(self, instance, value):
        existing = instance.__dict__.get(self.attribute_name)
        if not self.auto_now_add or existing is None:
            return super().__set__(instance, value)

        if value is None or self._load(value) != existing:
            raise InvalidOperationError(f"`{self.field_name}` cannot be changed once set")

    def _cast_to_type(self, value):
        if isinstance(value, datetime.datetime):
            return value
        if isinstance(value, datetime.date):
            return datetime.datetime.combine(value, datetime.time())

        try:
            return parse_datetime(str(value))
        except (TypeError, ValueError, OverflowError):
            self.fail("invalid", value=value)

    def as_dict(self, value):
        if value is None:
            return None
        return value.isoformat()


class _Relation(Field):
    """Common ground of fields pointing at another entity class, possibly by name"""

    def __init__(self, to_cls, **kwargs):
        self._to_cls = to_cls
        super().__init__(**kwargs)

    @property
    def to_cls(self):
        if isinstance(self._to_cls, str):
            self._to_cls = fetch_entity_cls(self._to_cls)
        return self._to_cls

    def _repository(self):
        from restframe.core.repository import repository_for

        return repository_for(self.to_cls)


class Reference(_Relation):
    """Many-to-one link to another entity.

    Only the identifier is kept, under `<field_name>_id`, and the related
    entity is looked up in its repository on every read. Saved entities and
    plain identifiers are both accepted on assignment.
    """

    default_error_messages = {"invalid": "Reference must be an entity or an identifier."}

    def get_attribute_name(self):
        return f"{self.field_name}_id"

    def __get__(self, instance, owner):
        if instance is None:
            return self

        identifier = instance.__dict__.get(self.attribute_name)
        return None if identifier is None else self._repository().get(identifier)

    def _cast_to_type(self, value):
        from restframe.core.entity import BaseEntity

        if isinstance(value, BaseEntity):
            if not isinstance(value, self.to_cls) or value.identity is None:
                self.fail("invalid")
            return value.identity

        if isinstance(value, (dict, list, tuple, set)):
            self.fail("invalid")

        return self.to_cls.meta_.id_field._cast_to_type(value)


class HasMany(_Relation):
    """One-to-many link, the reverse side of a `Reference`.

    Nothing is stored on the owning entity. Reading the field queries the
    related repository for entities whose `via` attribute holds the owner's
    identity.

    :param via: Attribute of the related entity to match. Defaults to
        `<owner entity name>_id`.
    """

    def __init__(self, to_cls, via=None, **kwargs):
        self.via = via
        super().__init__(to_cls, **kwargs)

    @property
    def linked_attribute(self):
        if self.via:
            return self.via
        return inflection.underscore(self._entity_cls.__name__) + "_id"

    def __get__(self, instance, owner):
        if instance is None:
            return self
        if instance.identity is None:
            return []
        return self._repository().filter(**{self.linked_attribute: instance.identity})

    def __set__(self, instance, value):
        raise InvalidOperationError(
            f"`{self.field_name}` is managed through `{self.to_cls.__name__}`"
        )

    def _cast_to_type(self, value):
        return value
