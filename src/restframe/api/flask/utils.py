"""Helpers for reading Flask request data"""


def multidict_to_dict(multi_dict):
    """Flatten a werkzeug `MultiDict` into a plain dict.

    Keys with a single value map to that value. Keys with several values,
    or named with a `[]` suffix (`?order_by[]=name`), map to the list of
    values under the name without the suffix.
    """
    flat = {}
    for key, values in multi_dict.lists():
        if key.endswith("[]"):
            flat[key[:-2]] = values
        elif len(values) > 1:
            flat[key] = values
        else:
            flat[key] = values[0]
    return flat
