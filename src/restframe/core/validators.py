"""Bound checks used by the length and value limited field types"""

from restframe.exceptions import ValidationError


class _LimitValidator:
    """Check a value against a single bound. A `None` limit disables the check."""

    message = ""

    def __init__(self, limit):
        self.limit = limit

    def exceeds(self, value) -> bool:
        raise NotImplementedError

    def __call__(self, value):
        if self.limit is not None and self.exceeds(value):
            raise ValidationError(self.message.format(limit=self.limit))


class MinLengthValidator(_LimitValidator):
    message = "value has less than {limit} characters"

    def exceeds(self, value):
        return len(value) < self.limit


class MaxLengthValidator(_LimitValidator):
    message = "value has more than {limit} characters"

    def exceeds(self, value):
        return len(value) > self.limit


class MinValueValidator(_LimitValidator):
    message = "value is lesser than {limit}"

    def exceeds(self, value):
        return value < self.limit


class MaxValueValidator(_LimitValidator):
    message = "value is greater than {limit}"

    def exceeds(self, value):
        return value > self.limit
