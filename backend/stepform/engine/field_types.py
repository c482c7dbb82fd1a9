"""Field type registry.

Every field type tag maps to a fixed `FieldTypeSpec` describing which
validation rules apply to it. The validation engine consults this table
and never switches on individual type names.
"""

from dataclasses import dataclass
from enum import Enum


class FieldType(str, Enum):
    TEXT = "TEXT"
    TEXTAREA = "TEXTAREA"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    NUMBER = "NUMBER"
    SELECT = "SELECT"
    MULTISELECT = "MULTISELECT"
    RADIO = "RADIO"
    CHECKBOX = "CHECKBOX"
    DATE = "DATE"
    FILE = "FILE"
    RATING = "RATING"
    SCALE = "SCALE"


@dataclass(frozen=True)
class FieldTypeSpec:
    needs_options: bool = False     # value(s) must be one of field.options
    multi_valued: bool = False      # answer is a list of option values
    numeric_bounds: bool = False    # validation.min / validation.max
    length_bounds: bool = False     # validation.minLength / maxLength
    pattern_check: bool = False     # validation.pattern (full match)
    format_check: str | None = None  # named format, e.g. "email"


FIELD_TYPE_REGISTRY: dict[FieldType, FieldTypeSpec] = {
    FieldType.TEXT: FieldTypeSpec(length_bounds=True, pattern_check=True),
    FieldType.TEXTAREA: FieldTypeSpec(length_bounds=True, pattern_check=True),
    FieldType.EMAIL: FieldTypeSpec(pattern_check=True, format_check="email"),
    FieldType.PHONE: FieldTypeSpec(pattern_check=True),
    FieldType.NUMBER: FieldTypeSpec(numeric_bounds=True),
    FieldType.SELECT: FieldTypeSpec(needs_options=True),
    FieldType.MULTISELECT: FieldTypeSpec(needs_options=True, multi_valued=True),
    FieldType.RADIO: FieldTypeSpec(needs_options=True),
    FieldType.CHECKBOX: FieldTypeSpec(),
    FieldType.DATE: FieldTypeSpec(),
    FieldType.FILE: FieldTypeSpec(),
    FieldType.RATING: FieldTypeSpec(numeric_bounds=True),
    FieldType.SCALE: FieldTypeSpec(numeric_bounds=True),
}


def spec_for(field_type: FieldType | str) -> FieldTypeSpec:
    """Return the validation contract for a field type tag."""
    return FIELD_TYPE_REGISTRY[FieldType(field_type)]
