"""Name conversions shared by the generators."""

import keyword
import re

from .errors import InvalidPackageNameError

# Builtins that generated method parameters must not shadow
RESERVED_NAMES = {"type", "self"}

# BaseModel attributes a generated field would shadow
MODEL_RESERVED_NAMES = {
    "construct", "copy", "dict", "json", "parse_obj", "parse_raw", "schema",
    "schema_json", "validate", "update_forward_refs", "model_config",
    "model_fields", "model_computed_fields",
}


def to_snake_case(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def to_pascal_case(name: str) -> str:
    """Convert snake_case or camelCase to PascalCase."""
    snake = to_snake_case(name)
    return "".join(word[:1].upper() + word[1:] for word in snake.split("_"))


def upper_case(name: str) -> str:
    """Convert to UPPER_CASE."""
    return to_snake_case(name).upper()


def safe_identifier(name: str) -> str:
    """Suffix Python keywords with an underscore."""
    if keyword.iskeyword(name) or name in RESERVED_NAMES:
        return f"{name}_"
    return name


def safe_field_name(name: str) -> str:
    """Snake-case a GraphQL field name into a usable model attribute."""
    snake = to_snake_case(name)
    if snake.startswith("_"):
        # pydantic treats underscored attributes as private
        snake = snake.lstrip("_") + "_"
    if keyword.iskeyword(snake) or snake in MODEL_RESERVED_NAMES:
        return f"{snake}_"
    return snake


def safe_docstring(text: str | None) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


def safe_comment(text: str | None) -> str:
    """Make text safe for a single-line Python comment."""
    if not text:
        return ""
    text = text.replace("\n", " ").replace("\r", "")
    text = text.replace("**", "").replace("*", "")
    text = re.sub(r"\s+", " ", text)
    if len(text) > 120:
        text = text[:117] + "..."
    return text.strip()


def validate_package_name(package_name: str) -> list[str]:
    """Split a dotted package name, rejecting anything Python can't import.

    Raises:
        InvalidPackageNameError: if any segment is empty, not an identifier,
            or a keyword.
    """
    parts = package_name.split(".")
    for part in parts:
        if not part.isidentifier() or keyword.iskeyword(part):
            raise InvalidPackageNameError(package_name)
    return parts
