"""
TOML File I/O.

Settings files are parsed with tomllib and written with tomlkit so that
generated files carry field descriptions as comments.
"""

import tomllib
from pathlib import Path
from typing import Any

import tomlkit

from plugworks.config.schema import ConfigField


class TOMLError(Exception):
    """Raised when a TOML file cannot be read or written."""

    pass


def read_toml(file_path: Path) -> dict[str, Any]:
    """
    Read and parse a TOML file.

    Raises:
        TOMLError: If the file is missing or malformed
    """
    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise TOMLError(f"TOML file not found: {file_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise TOMLError(f"Failed to parse TOML file {file_path}: {e}") from e
    except OSError as e:
        raise TOMLError(f"Failed to read TOML file {file_path}: {e}") from e


def write_toml(file_path: Path, content: str) -> None:
    """
    Write TOML text to a file, creating parent directories.

    Raises:
        TOMLError: If the file cannot be written
    """
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise TOMLError(f"Failed to write TOML file {file_path}: {e}") from e


def generate_toml_from_schema(
    section: str,
    schema: dict[str, ConfigField],
    values: dict[str, Any] | None = None,
) -> str:
    """
    Render one schema-backed table as commented TOML.

    Args:
        section: Table name
        schema: Field name -> ConfigField
        values: Values to write (fields missing here use their default)

    Returns:
        TOML document text
    """
    values = values or {}
    doc = tomlkit.document()
    doc.add(tomlkit.comment(f"plugworks {section} settings"))
    doc.add(tomlkit.nl())

    table = tomlkit.table()
    for name, field in schema.items():
        if field.description:
            table.add(tomlkit.comment(field.description))
        if field.choices is not None:
            table.add(tomlkit.comment(f"Choices: {', '.join(map(str, field.choices))}"))
        table.add(name, values.get(name, field.default))

    doc.add(section, table)
    return tomlkit.dumps(doc)
