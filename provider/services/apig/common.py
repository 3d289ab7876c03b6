"""Schemas shared by the APIG resources."""

from provider.schema import Schema, ValueType
from provider.validation import all_of, string_len_between, string_match

NAME_PATTERN = r"[A-Za-z][\w]*"


def name_schema():
    return Schema(
        ValueType.STRING,
        required=True,
        validate=all_of(
            string_len_between(3, 64),
            string_match(
                NAME_PATTERN,
                "only letters, digits and underscores (_) are allowed, "
                "and the name must start with a letter",
            ),
        ),
    )


def description_schema():
    return Schema(
        ValueType.STRING, optional=True, validate=string_len_between(0, 255)
    )
