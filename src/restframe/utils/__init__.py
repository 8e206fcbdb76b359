"""Helpers shared across RestFrame"""

from importlib import import_module

import inflection


def import_from_string(dotted_path, package=None):
    """Import the attribute named by `dotted_path`, like `package.module.Class`"""
    try:
        module_name, attribute = dotted_path.rsplit(".", 1)
        return getattr(import_module(module_name, package=package), attribute)
    except (ImportError, AttributeError, ValueError) as exc:
        raise ImportError(f"Could not import {dotted_path}. {type(exc).__name__}: {exc}")


def perform_import(value):
    """Resolve a setting that may hold dotted paths.

    Strings are imported, lists and tuples are resolved item by item, and
    anything else is returned unchanged.
    """
    if isinstance(value, str):
        return import_from_string(value)
    if isinstance(value, (list, tuple)):
        return [perform_import(item) if isinstance(item, str) else item for item in value]
    return value


def resource_name(entity_cls):
    """Singular, underscored name of the resource backed by `entity_cls`

    >>> resource_name(BlogPost)
    'blog_post'
    """
    return inflection.underscore(entity_cls.__name__)


def resource_plural(entity_cls):
    """Plural, underscored name of the resource backed by `entity_cls`"""
    return inflection.pluralize(resource_name(entity_cls))
