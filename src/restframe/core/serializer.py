"""Serializer Object Functionality and Classes

Serializers translate between entities and plain dictionaries. They are
marshmallow schemas whose fields are inferred from an entity's fields, so
the usual marshmallow `dump`/`load` machinery works unchanged.
"""

import logging

from urllib.parse import urlparse

import bleach
import marshmallow as ma

from flask import current_app, url_for
from werkzeug.exceptions import HTTPException

from restframe.core.entity import BaseEntity
from restframe.core.field import (
    Auto,
    Boolean,
    DateTime,
    HasMany,
    Integer,
    Reference,
    String,
    Text,
)
from restframe.core.repository import repository_for
from restframe.exceptions import ConfigurationError, ObjectNotFoundError
from restframe.utils import resource_plural

logger = logging.getLogger(__name__)

RELATION_MODES = ("pk", "link")


def _as_stored(validator):
    """Run `validator` on the value as a sanitizing field stores it"""

    def validate(value):
        return validator(bleach.clean(value))

    return validate


def detail_endpoint(entity_cls):
    """Endpoint name of the item route the router generates for `entity_cls`"""
    return f"show_{resource_plural(entity_cls)}"


class RelatedField(ma.fields.Field):
    """Represent a related entity by its identifier, its URL, or nested.

    On dump, the value read from the entity is an identifier (for references)
    or a list of entities (for one-to-many relations). On load, identifiers
    or URLs are checked against the related repository and returned as
    identifiers.

    :param to_cls: The related entity class, or its name.
    :param mode: `pk` or `link`.
    :param many: The relation holds a collection.
    :param nested: A serializer class used to embed the related entity.
    :param endpoint: Flask endpoint of the related item route, for `link` mode.
    :param pk_name: Name of the identifier argument of that route.
    """

    default_error_messages = {
        "does_not_exist": 'Invalid pk "{value}" - object does not exist.',
        "incorrect_type": "Incorrect type. Expected pk value, received {data_type}.",
        "no_match": "Invalid hyperlink - No URL match.",
        "incorrect_match": "Invalid hyperlink - Incorrect URL match.",
    }

    def __init__(
        self,
        to_cls,
        mode="pk",
        many=False,
        nested=None,
        endpoint=None,
        pk_name="identifier",
        **kwargs,
    ):
        if mode not in RELATION_MODES:
            raise ConfigurationError(f"Relation mode must be one of {RELATION_MODES}")

        super().__init__(**kwargs)
        self._to_cls = to_cls
        self.mode = mode
        self.many = many
        self.nested = nested
        self._endpoint = endpoint
        self.pk_name = pk_name

    @property
    def to_cls(self):
        if isinstance(self._to_cls, str):
            from restframe.core.field import fetch_entity_cls

            self._to_cls = fetch_entity_cls(self._to_cls)
        return self._to_cls

    @property
    def endpoint(self):
        return self._endpoint or detail_endpoint(self.to_cls)

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return [] if self.many else None

        if self.many:
            return [self._serialize_one(item) for item in value]
        return self._serialize_one(value)

    def _serialize_one(self, value):
        if isinstance(value, BaseEntity):
            entity, identifier = value, value.identity
        else:
            entity, identifier = None, value

        if self.nested is not None:
            if entity is None:
                try:
                    entity = repository_for(self.to_cls).get(identifier)
                except ObjectNotFoundError:
                    logger.warning(
                        f"Dangling reference to {self.to_cls.__name__} {identifier}"
                    )
                    return None
            return self.nested().dump(entity)

        if self.mode == "link":
            return url_for(self.endpoint, _external=True, **{self.pk_name: identifier})

        return identifier

    def _deserialize(self, value, attr, data, **kwargs):
        if self.many:
            if not isinstance(value, (list, tuple)):
                raise self.make_error("incorrect_type", data_type=type(value).__name__)
            return [self._deserialize_one(item) for item in value]
        return self._deserialize_one(value)

    def _deserialize_one(self, value):
        if self.mode == "link":
            value = self._identifier_from_link(value)

        if isinstance(value, (bool, dict, list, tuple)) or value is None:
            raise self.make_error("incorrect_type", data_type=type(value).__name__)
        if isinstance(value, float) and not value.is_integer():
            raise self.make_error("incorrect_type", data_type=type(value).__name__)

        repository = repository_for(self.to_cls)
        if not repository.exists(value):
            raise self.make_error("does_not_exist", value=value)

        return repository.get(value).identity

    def _identifier_from_link(self, value):
        if not isinstance(value, str):
            raise self.make_error("incorrect_type", data_type=type(value).__name__)

        adapter = current_app.url_map.bind("localhost")
        try:
            endpoint, args = adapter.match(urlparse(value).path, method="GET")
        except HTTPException:
            raise self.make_error("no_match")

        if endpoint != self.endpoint or self.pk_name not in args:
            raise self.make_error("incorrect_match")

        return args[self.pk_name]


class EntitySerializerOpts(ma.SchemaOpts):
    """Options for the entity serializer

    * `entity`: the entity class whose fields are inferred
    * `depth`: levels of related entities to embed instead of linking
    * `relations`: `pk` or `link`, how related entities are represented
    * `read_only_fields`: fields that are dumped, but never loaded
    * `endpoint`: Flask endpoint of this entity's item route, for `link` mode
    """

    def __init__(self, meta, *args, **kwargs):
        super().__init__(meta, *args, **kwargs)

        # Unknown and read-only input is ignored, not rejected
        self.unknown = getattr(meta, "unknown", ma.EXCLUDE)

        self.entity_cls = getattr(meta, "entity", None)
        self.depth = getattr(meta, "depth", 0)
        self.relations = getattr(meta, "relations", "pk")
        self.read_only_fields = getattr(meta, "read_only_fields", ())
        self.endpoint = getattr(meta, "endpoint", None)

        if self.relations not in RELATION_MODES:
            raise ConfigurationError(f"`Meta.relations` must be one of {RELATION_MODES}")
        if not isinstance(self.depth, int) or self.depth < 0:
            raise ConfigurationError("`Meta.depth` must be a non-negative integer")


class EntitySerializerMeta(ma.schema.SchemaMeta):
    """Adds fields inferred from `Meta.entity` to the declared fields"""

    @classmethod
    def get_declared_fields(mcs, klass, cls_fields, inherited_fields, dict_cls=dict):
        declared_fields = super().get_declared_fields(
            klass, cls_fields, inherited_fields, dict_cls
        )

        opts = klass.opts
        if opts.entity_cls is None:
            return declared_fields

        fields = dict_cls()
        fields.update(mcs.get_entity_fields(opts, declared_fields))
        fields.update(declared_fields)
        return fields

    @classmethod
    def get_entity_fields(mcs, opts, declared_fields):
        entity_fields = {}

        if opts.relations == "link" and "url" not in declared_fields:
            entity_fields["url"] = RelatedField(
                opts.entity_cls,
                mode="link",
                endpoint=opts.endpoint,
                attribute=opts.entity_cls.meta_.id_field.field_name,
                dump_only=True,
            )

        for field_name, field_obj in opts.entity_cls.meta_.declared_fields.items():
            # `exclude` is applied by marshmallow, which expects the names to exist
            if opts.fields and field_name not in opts.fields:
                continue
            elif field_name in declared_fields:
                continue

            entity_fields[field_name] = mcs.build_field(opts, field_name, field_obj)

        return entity_fields

    @classmethod
    def build_field(mcs, opts, field_name, field_obj):
        """Map the Entity field to a Marshmallow field"""
        dump_only = (
            field_obj.identifier
            or isinstance(field_obj, Auto)
            or getattr(field_obj, "auto_now_add", False)
            or field_name in opts.read_only_fields
        )
        field_opts = {"dump_only": dump_only}
        if not dump_only:
            field_opts["required"] = field_obj.required
            field_opts["allow_none"] = not field_obj.required

        if isinstance(field_obj, (Reference, HasMany)):
            nested = None
            if opts.depth > 0:
                nested = serializer_for(
                    field_obj.to_cls, depth=opts.depth - 1, relations=opts.relations
                )

            if isinstance(field_obj, Reference):
                field_opts["attribute"] = field_obj.attribute_name
            else:
                field_opts.update({"dump_only": True, "many": True})
                field_opts.pop("required", None)
                field_opts.pop("allow_none", None)

            return RelatedField(field_obj.to_cls, mode=opts.relations, nested=nested, **field_opts)

        if isinstance(field_obj, Auto):
            return ma.fields.Integer(**field_opts)
        elif isinstance(field_obj, String):
            length = ma.validate.Length(min=field_obj.min_length, max=field_obj.max_length)
            return ma.fields.String(
                validate=_as_stored(length) if field_obj.sanitize else length,
                **field_opts,
            )
        elif isinstance(field_obj, Text):
            return ma.fields.String(**field_opts)
        elif isinstance(field_obj, Integer):
            return ma.fields.Integer(
                validate=ma.validate.Range(min=field_obj.min_value, max=field_obj.max_value),
                **field_opts,
            )
        elif isinstance(field_obj, Boolean):
            return ma.fields.Boolean(**field_opts)
        elif isinstance(field_obj, DateTime):
            return ma.fields.DateTime(**field_opts)

        # Default to a String field for anything else
        return ma.fields.String(**field_opts)


class EntitySerializer(ma.Schema, metaclass=EntitySerializerMeta):
    """Serializer which uses an Entity class to automatically infer fields.

    Basic Usage::

        class PostSerializer(EntitySerializer):
            class Meta:
                entity = Post
                fields = ("id", "title", "text", "created", "comments")
                depth = 1

    Fields declared explicitly on the serializer take precedence over the
    inferred ones.
    """

    OPTIONS_CLASS = EntitySerializerOpts

    def __init__(self, *args, **kwargs):
        if not self.opts.entity_cls or not issubclass(self.opts.entity_cls, BaseEntity):
            raise ConfigurationError(
                "`Meta.entity` option must be set and a subclass of `BaseEntity`."
            )

        super().__init__(*args, **kwargs)
        self.context = {}

    def validate_payload(self, payload, partial=False):
        """Validate `payload` and return a `(data, errors)` tuple.

        Exactly one of the two is non-empty. Validation failures are
        reported as a mapping of field names to lists of messages and are
        never raised.
        """
        try:
            data = self.load(payload if payload is not None else {}, partial=partial)
        except ma.ValidationError as err:
            logger.debug(f"{self.__class__.__name__} rejected input: {err.messages}")
            errors = err.messages
            if not isinstance(errors, dict):
                errors = {"_schema": errors}
            return {}, errors

        return data, {}


def serializer_for(entity_cls, depth=0, relations="pk", base_cls=EntitySerializer):
    """Construct a serializer class for `entity_cls` with all its fields"""
    if isinstance(entity_cls, str):
        from restframe.core.field import fetch_entity_cls

        entity_cls = fetch_entity_cls(entity_cls)

    meta = type(
        "Meta",
        (base_cls.Meta,),
        {"entity": entity_cls, "depth": depth, "relations": relations, "register": False},
    )
    return type(f"{entity_cls.__name__}Serializer", (base_cls,), {"Meta": meta})
