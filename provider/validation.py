"""Value validators usable as ``Schema(validate=...)``.

A validator receives the coerced value and the attribute path and returns the
list of problems found, empty when the value is valid.
"""

import re


def string_len_between(min_len, max_len):
    def _validate(value, key):
        if not min_len <= len(value) <= max_len:
            return [
                f'"{key}": expected length to be in the range ({min_len} - {max_len}), '
                f"got {value!r}"
            ]
        return []

    return _validate


def string_match(pattern, message):
    regex = re.compile(pattern)

    def _validate(value, key):
        if not regex.fullmatch(value):
            return [f'"{key}": {message}, got {value!r}']
        return []

    return _validate


def string_in_slice(choices):
    def _validate(value, key):
        if value not in choices:
            return [f'"{key}": expected to be one of {list(choices)}, got {value!r}']
        return []

    return _validate


def all_of(*validators):
    def _validate(value, key):
        errors = []
        for v in validators:
            errors.extend(v(value, key))
        return errors

    return _validate
