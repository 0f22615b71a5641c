"""
Settings Schema.

This module provides typed field declarations for registry settings and
plugin options.

Key features:
- Field type, default, description and constraints
- Range checks for numbers, length checks for strings and lists
- Whole-table validation with defaults filled in
"""

from dataclasses import dataclass
from typing import Any


class SchemaError(Exception):
    """Raised when a field declaration is invalid."""

    pass


class ValidationError(SchemaError):
    """Raised when a value does not satisfy its field."""

    pass


_RANGED_TYPES = (int, float, str, list)


@dataclass
class ConfigField:
    """
    A typed settings field.

    Attributes:
        type_: Expected value type
        default: Value used when the field is absent
        description: Human-readable description (written as a TOML comment)
        min: Minimum value (numbers) or minimum length (str/list)
        max: Maximum value (numbers) or maximum length (str/list)
        choices: Allowed values
    """

    type_: type
    default: Any
    description: str = ""
    min: Any = None
    max: Any = None
    choices: list[Any] | None = None

    def __post_init__(self):
        if not isinstance(self.default, self.type_):
            raise SchemaError(
                f"Default value {self.default!r} does not match type {self.type_.__name__}"
            )

        has_range = self.min is not None or self.max is not None
        if has_range and self.type_ not in _RANGED_TYPES:
            raise SchemaError(
                f"min/max constraints only supported for int, float, str, list. Got {self.type_.__name__}"
            )

        if self.choices is not None:
            for choice in self.choices:
                if not isinstance(choice, self.type_):
                    raise SchemaError(
                        f"Choice {choice!r} does not match type {self.type_.__name__}"
                    )
            if self.default not in self.choices:
                raise SchemaError(
                    f"Default value {self.default!r} not in choices {self.choices}"
                )

    def validate(self, value: Any) -> None:
        """
        Check a value against this field.

        Raises:
            ValidationError: If the value has the wrong type or breaks a constraint
        """
        if not isinstance(value, self.type_):
            raise ValidationError(
                f"Expected type {self.type_.__name__}, got {type(value).__name__}"
            )

        if self.choices is not None and value not in self.choices:
            raise ValidationError(
                f"Value {value!r} not in allowed choices {self.choices}"
            )

        if self.type_ in (str, list):
            measured, what = len(value), "Length"
        else:
            measured, what = value, "Value"

        if self.min is not None and measured < self.min:
            raise ValidationError(f"{what} {measured} is less than minimum {self.min}")
        if self.max is not None and measured > self.max:
            raise ValidationError(
                f"{what} {measured} is greater than maximum {self.max}"
            )


def generate_default_config(schema: dict[str, ConfigField]) -> dict[str, Any]:
    """Build a table holding every field's default."""
    return {name: field.default for name, field in schema.items()}


def validate_config(
    config: dict[str, Any], schema: dict[str, ConfigField]
) -> dict[str, Any]:
    """
    Validate a settings table against a schema.

    Absent fields take their defaults; unknown fields are rejected.

    Args:
        config: Table to validate
        schema: Field name -> ConfigField

    Returns:
        A new table with defaults filled in

    Raises:
        ValidationError: If a field is unknown or invalid
    """
    for key in config:
        if key not in schema:
            raise ValidationError(f"Unknown configuration field: {key}")

    result = generate_default_config(schema)
    for name, value in config.items():
        try:
            schema[name].validate(value)
        except ValidationError as e:
            raise ValidationError(f"Field '{name}': {e}") from e
        result[name] = value

    return result
