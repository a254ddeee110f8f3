"""Query builder for GraphQL operations.

Constructs GraphQL query/mutation documents from operation metadata,
with support for field selection.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from .ir import IRArgument, IROperation, IRSchema
from .naming import to_pascal_case

INDENT = "  "


class FieldSelectionMode(Enum):
    """Field selection modes for queries."""
    ALL = "all"          # Request all fields recursively
    MINIMAL = "minimal"  # Request only __typename and identifying fields
    CUSTOM = "custom"    # User-specified dot paths


@dataclass
class FieldSelection:
    """Configuration for which fields to include in a query."""
    mode: FieldSelectionMode = FieldSelectionMode.ALL
    custom_fields: list[str] = field(default_factory=list)
    max_depth: int = 5  # Prevent runaway documents on deep schemas

    ALL: ClassVar["FieldSelection"]
    MINIMAL: ClassVar["FieldSelection"]

    @classmethod
    def select(cls, *fields: str) -> "FieldSelection":
        """Create a custom selection, e.g. select("id", "owner.name", "tags.*")."""
        return cls(mode=FieldSelectionMode.CUSTOM, custom_fields=list(fields))


FieldSelection.ALL = FieldSelection(mode=FieldSelectionMode.ALL)
FieldSelection.MINIMAL = FieldSelection(mode=FieldSelectionMode.MINIMAL)

MINIMAL_FIELD_NAMES = ("id", "ID", "name", "status")


def variable_mapping(operation: IROperation) -> list[tuple[IRArgument, str]]:
    """Pair every argument of an operation with a unique variable name.

    Parent namespace arguments come first. A name already taken gets a
    suffix derived from the argument type, e.g. ``input_addRule``.
    """
    mapping = []
    seen_names: set[str] = set()

    for arg in operation.all_arguments:
        var_name = arg.name
        if var_name in seen_names:
            var_name = f"{arg.name}_{type_to_var_suffix(arg.type.name)}"
        counter = 2
        base_name = var_name
        while var_name in seen_names:
            var_name = f"{base_name}{counter}"
            counter += 1
        seen_names.add(var_name)
        mapping.append((arg, var_name))

    return mapping


def type_to_var_suffix(type_name: str) -> str:
    """Convert a type name to a camelCase variable name suffix."""
    name = type_name
    for suffix in ("Input", "Mutation", "Payload"):
        if name.endswith(suffix) and name != suffix:
            name = name[:-len(suffix)]
    return name[0].lower() + name[1:] if name else "arg"


class QueryBuilder:
    """Builds GraphQL documents from operation metadata."""

    def __init__(self, schema: IRSchema):
        self.schema = schema
        self._query_cache: dict[str, str] = {}

    def build(
        self,
        operation: IROperation,
        fields: FieldSelection = FieldSelection.ALL,
    ) -> str:
        """Build a GraphQL query/mutation document.

        Args:
            operation: The operation metadata
            fields: Field selection configuration

        Returns:
            Complete GraphQL document
        """
        cache_key = f"{operation.operation_type}:{operation.full_name}:{fields.mode.value}:{fields.max_depth}"
        cacheable = fields.mode != FieldSelectionMode.CUSTOM
        if cacheable and cache_key in self._query_cache:
            return self._query_cache[cache_key]

        var_mapping = variable_mapping(operation)
        var_name_by_arg = {id(arg): var_name for arg, var_name in var_mapping}

        declarations = ", ".join(f"${var_name}: {arg.graphql_type}" for arg, var_name in var_mapping)
        op_name = to_pascal_case(operation.full_name)
        header = f"{operation.operation_type} {op_name}"
        if declarations:
            header += f"({declarations})"

        lines = [f"{header} {{"]
        lines.extend(self._build_operation_body(operation, fields, var_name_by_arg))
        lines.append("}")
        query = "\n".join(lines)

        if cacheable:
            self._query_cache[cache_key] = query
        return query

    def _build_operation_body(
        self,
        operation: IROperation,
        fields: FieldSelection,
        var_name_by_arg: dict[int, str],
    ) -> list[str]:
        """Build the nested path, e.g. policy { internetFirewall { addRule { ... } } }"""
        path = operation.path
        level_args = list(operation.namespace_arguments[:len(path) - 1])
        level_args += [[] for _ in range(len(path) - 1 - len(level_args))]
        level_args.append(operation.arguments)

        selection = self._selection(operation.returns.name, fields, depth=1, visited=frozenset())

        lines = []
        for i, segment in enumerate(path):
            indent = INDENT * (i + 1)
            field_call = f"{segment}{self._field_arguments(level_args[i], var_name_by_arg)}"
            if i == len(path) - 1 and not selection:
                lines.append(f"{indent}{field_call}")
            else:
                lines.append(f"{indent}{field_call} {{")

        if selection:
            body_indent = INDENT * (len(path) + 1)
            lines.extend(f"{body_indent}{line}" for line in selection)
            for i in range(len(path) - 1, -1, -1):
                lines.append(f"{INDENT * (i + 1)}}}")
        else:
            for i in range(len(path) - 2, -1, -1):
                lines.append(f"{INDENT * (i + 1)}}}")

        return lines

    @staticmethod
    def _field_arguments(args: list[IRArgument], var_name_by_arg: dict[int, str]) -> str:
        """Build an argument string: (accountId: $accountId, input: $input)"""
        if not args:
            return ""
        arg_strs = [f"{arg.name}: ${var_name_by_arg.get(id(arg), arg.name)}" for arg in args]
        return f"({', '.join(arg_strs)})"

    def _selection(
        self,
        type_name: str,
        fields: FieldSelection,
        depth: int,
        visited: frozenset,
        custom_tree: dict[str, Any] | None = None,
    ) -> list[str]:
        """Return the selection-set lines for a type, relative to its braces."""
        if self._is_leaf(type_name):
            return []

        union = self.schema.unions.get(type_name)
        if union:
            lines = ["__typename"]
            for member in union.members:
                member_lines = self._selection(member, fields, depth, visited, custom_tree)
                if member_lines:
                    lines.append(f"... on {member} {{")
                    lines.extend(f"{INDENT}{line}" for line in member_lines)
                    lines.append("}")
            return lines

        type_def = self.schema.get_type_by_name(type_name)
        cyclic = type_name in visited and fields.mode != FieldSelectionMode.CUSTOM
        if not type_def or depth > fields.max_depth or cyclic:
            return ["__typename"]
        visited = visited | {type_name}

        if fields.mode == FieldSelectionMode.MINIMAL:
            return ["__typename"] + [
                f.name for f in type_def.fields
                if f.name in MINIMAL_FIELD_NAMES and self._is_leaf(f.type.name)
            ]

        if fields.mode == FieldSelectionMode.CUSTOM and custom_tree is None:
            custom_tree = self._custom_tree(fields.custom_fields)

        lines = ["__typename"]
        for ir_field in type_def.fields:
            if any(arg.is_required for arg in ir_field.arguments):
                # Needs arguments this document cannot supply
                continue

            subtree = None
            if custom_tree is not None:
                if ir_field.name in custom_tree:
                    subtree = custom_tree[ir_field.name]
                elif "*" in custom_tree and self._is_leaf(ir_field.type.name):
                    subtree = {}
                else:
                    continue

            if self._is_leaf(ir_field.type.name):
                lines.append(ir_field.name)
                continue

            if custom_tree is not None and not subtree:
                # A bare object path selects its scalar fields
                subtree = {"*": {}}
            nested = self._selection(ir_field.type.name, fields, depth + 1, visited, subtree)
            if nested == ["__typename"] and fields.mode == FieldSelectionMode.ALL and (
                depth + 1 > fields.max_depth or ir_field.type.name in visited
            ):
                continue
            lines.append(f"{ir_field.name} {{")
            lines.extend(f"{INDENT}{line}" for line in nested)
            lines.append("}")

        return lines

    @staticmethod
    def _custom_tree(custom_fields: list[str]) -> dict[str, Any]:
        """Parse dot paths into a nested dict: ["a.b", "c"] -> {"a": {"b": {}}, "c": {}}"""
        tree: dict[str, Any] = {}
        for field_path in custom_fields:
            current = tree
            for part in field_path.split("."):
                current = current.setdefault(part, {})
        return tree

    def _is_leaf(self, type_name: str) -> bool:
        """Scalars, enums and names the schema does not define have no subfields."""
        return not self.schema.has_fields(type_name)
