"""Map GraphQL scalars to the Python types used in generated bindings.

Values are converted by pydantic when models validate responses, so a
scalar only needs a Python type and the import that provides it. Imports
are aliased (``import datetime as _datetime``) so that no schema type can
shadow them in the generated modules.

Example usage:
    registry = ScalarRegistry()
    registry.register("Money", "decimal.Decimal")
    registry.python_type("Money")  # "_decimal.Decimal"
"""

from dataclasses import dataclass

BUILTIN_TYPES = {
    "String": "str",
    "Int": "int",
    "Float": "float",
    "Boolean": "bool",
    "ID": "str",
}

# Every generated module imports typing under this alias
TYPING_IMPORT = "import typing as _t"
ANY = "_t.Any"


@dataclass(frozen=True)
class ScalarType:
    """The Python side of a scalar: a type expression and its import."""
    python_type: str
    import_statement: str = ""

    @classmethod
    def from_path(cls, dotted_path: str) -> "ScalarType":
        """Build from ``module.attr`` (``"decimal.Decimal"``) or a builtin name (``"int"``)."""
        module, _, attr = dotted_path.rpartition(".")
        parts = dotted_path.split(".")
        if not all(part.isidentifier() for part in parts):
            raise ValueError(f"Invalid Python type path: {dotted_path!r}")
        if not module:
            return cls(python_type=attr)
        alias = "_" + module.replace(".", "_")
        return cls(python_type=f"{alias}.{attr}", import_statement=f"import {module} as {alias}")


DEFAULT_SCALARS = {
    "DateTime": "datetime.datetime",
    "Date": "datetime.date",
    "Time": "datetime.time",
    "UUID": "uuid.UUID",
    "BigDecimal": "decimal.Decimal",
    "Decimal": "decimal.Decimal",
    "Long": "int",
    "BigInteger": "int",
}


class ScalarRegistry:
    """Custom scalar name to Python type.

    Unregistered custom scalars (``JSON`` included) map to ``typing.Any``.
    """

    def __init__(self, overrides: dict[str, str] | None = None):
        self._types: dict[str, ScalarType] = {}
        for name, path in {**DEFAULT_SCALARS, **(overrides or {})}.items():
            self.register(name, path)

    def register(self, scalar_name: str, python_type: str | ScalarType):
        if isinstance(python_type, str):
            python_type = ScalarType.from_path(python_type)
        self._types[scalar_name] = python_type

    def get(self, scalar_name: str) -> ScalarType | None:
        return self._types.get(scalar_name)

    def python_type(self, scalar_name: str) -> str:
        """Return the Python type expression for a scalar name."""
        if scalar_name in BUILTIN_TYPES:
            return BUILTIN_TYPES[scalar_name]
        scalar = self.get(scalar_name)
        return scalar.python_type if scalar else ANY

    def imports_for(self, scalar_names) -> list[str]:
        """Sorted import statements for the given scalars, typing always included."""
        imports = {TYPING_IMPORT}
        for name in scalar_names:
            scalar = self.get(name)
            if scalar and scalar.import_statement:
                imports.add(scalar.import_statement)
        return sorted(imports)
