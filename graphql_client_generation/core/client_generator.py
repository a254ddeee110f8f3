"""Client class generator for GraphQL operations.

Generates a nested client structure like:
    client.mutation.account.update_status(tenant_id, id, input)

Helpers are imported under underscore aliases (``_t``, ``_pd``,
``_GraphQLExecutor``) so schema types named ``Field`` or ``List`` cannot
shadow them; star imports never re-export underscored names.
"""

from dataclasses import dataclass, field

from .ir import ENUM, INTERFACE, OBJECT, SCALAR, UNION, IRArgument, IROperation, IRSchema, TypeRef
from .naming import safe_docstring, safe_identifier, to_pascal_case, to_snake_case
from .query_builder import variable_mapping
from .scalars import ScalarRegistry

RUNTIME_PACKAGE = "graphql_client_generation"


def python_hint(schema: IRSchema, scalars: ScalarRegistry, ref: TypeRef) -> str:
    """Type hint for a reference, e.g. ``_t.Optional[_t.List[_t.Optional[User]]]`` for ``[User]``."""
    hint = ref.name if schema.kind_of(ref.name) else scalars.python_type(ref.name)
    if ref.is_list:
        item = f"_t.Optional[{hint}]" if ref.is_item_optional else hint
        hint = f"_t.List[{item}]"
    if ref.is_optional:
        hint = f"_t.Optional[{hint}]"
    return hint


@dataclass
class ClientNode:
    """One level of the client hierarchy."""
    name: str  # e.g. "account"
    snake_name: str
    children: dict[str, "ClientNode"] = field(default_factory=dict)
    operations: list[IROperation] = field(default_factory=list)

    def add_operation(self, path: list[str], operation: IROperation):
        if len(path) == 1:
            self.operations.append(operation)
            return
        child = self.children.get(path[0])
        if child is None:
            child = self.children[path[0]] = ClientNode(
                name=path[0],
                snake_name=safe_identifier(to_snake_case(path[0])),
            )
        child.add_operation(path[1:], operation)

    @property
    def is_empty(self) -> bool:
        return not (self.operations or self.children)


class ClientGenerator:
    """Generates the client module of a bindings package from schema operations."""

    def __init__(
        self,
        schema: IRSchema,
        client_name: str = "GraphQLClient",
        scalar_registry: ScalarRegistry | None = None,
    ):
        self.schema = schema
        self.client_name = client_name
        self.scalars = scalar_registry or ScalarRegistry()
        self.query_tree = ClientNode(name="Query", snake_name="query")
        self.mutation_tree = ClientNode(name="Mutation", snake_name="mutation")
        for op in schema.queries:
            self.query_tree.add_operation(op.path, op)
        for op in schema.mutations:
            self.mutation_tree.add_operation(op.path, op)

    def generate_client_code(self) -> str:
        """Generate the complete client module code."""
        lines = [
            '"""Generated GraphQL client. Do not edit."""',
            "",
            "from __future__ import annotations",
            "",
            "import typing as _t",
            "",
            "import httpx as _httpx",
            "import pydantic as _pd",
            "",
            f"from {RUNTIME_PACKAGE}.core.executor import GraphQLExecutor as _GraphQLExecutor",
            f"from {RUNTIME_PACKAGE}.core.query_builder import FieldSelection as _FieldSelection",
            "",
            "from .enums import *",
            "from .models import *",
            "from .scalars import *",
            "from .schema import load_schema as _load_schema",
            "",
            "",
        ]

        if not self.query_tree.is_empty:
            lines.extend(self._generate_client_classes(self.query_tree, "Query"))
        if not self.mutation_tree.is_empty:
            lines.extend(self._generate_client_classes(self.mutation_tree, "Mutation"))

        lines.extend(self._generate_root_client())
        return "\n".join(lines)

    def _generate_client_classes(self, node: ClientNode, prefix: str) -> list[str]:
        """Classes for a node's children first, then the node itself."""
        lines = []
        for child_name, child in sorted(node.children.items()):
            lines.extend(self._generate_client_classes(child, f"{prefix}_{to_pascal_case(child_name)}"))

        lines.extend([
            f"class {prefix}Client:",
            f'    """Client for {node.name} operations."""',
            "",
            "    def __init__(self, executor: _GraphQLExecutor):",
            "        self._executor = executor",
        ])
        for child_name, child in sorted(node.children.items()):
            lines.append(f"        self.{child.snake_name} = {prefix}_{to_pascal_case(child_name)}Client(executor)")
        lines.append("")

        for op in node.operations:
            lines.extend(self._generate_operation_method(op))
        lines.append("")
        return lines

    def _generate_operation_method(self, op: IROperation) -> list[str]:
        """Generate an async method for an operation."""
        method_name = safe_identifier(to_snake_case(op.name))

        params: list[tuple[IRArgument, str, str]] = []  # (arg, param_name, var_name)
        used_param_names: set[str] = set()
        for arg, var_name in variable_mapping(op):
            param_name = safe_identifier(to_snake_case(var_name))
            while param_name in used_param_names:
                param_name = f"{param_name}_"
            used_param_names.add(param_name)
            params.append((arg, param_name, var_name))

        required = [
            f"{name}: {self._hint(arg.type)}" for arg, name, _ in params if not arg.type.is_optional
        ]
        optional = [
            f"{name}: {self._hint(arg.type)} = None" for arg, name, _ in params if arg.type.is_optional
        ]

        # An operation argument may already be called 'fields'
        selection_param = "field_selection" if "fields" in used_param_names else "fields"

        lines = [f"    async def {method_name}(", "        self,"]
        for param in required + optional:
            lines.append(f"        {param},")
        lines.append(f"        {selection_param}: _FieldSelection = _FieldSelection.ALL,")
        lines.append(f"    ) -> {self._hint(op.returns)}:")

        desc = safe_docstring(op.description) or f"Execute the {'.'.join(op.path)} {op.operation_type}."
        lines.append(f'        """{desc}"""')

        lines.append("        variables = {")
        for _, param_name, var_name in params:
            lines.append(f'            "{var_name}": {param_name},')
        lines.append("        }")

        lines.extend([
            "        result = await self._executor.execute_operation(",
            f"            operation_path={op.path!r},",
            "            variables=variables,",
            f"            fields={selection_param},",
            f'            operation_type="{op.operation_type}",',
            "        )",
        ])
        lines.extend(self._result_lines(op.returns))
        lines.append("")
        return lines

    def _result_lines(self, ref: TypeRef) -> list[str]:
        """Convert the raw response into the declared return type."""
        converter = self._converter(ref.name)
        if converter is None:
            if ref.is_list and not ref.is_optional:
                return ["        return result if result is not None else []"]
            return ["        return result"]

        lines = []
        if ref.is_list:
            lines.append("        if result is None:")
            lines.append("            return None" if ref.is_optional else "            return []")
            item = converter.format("item")
            if ref.is_item_optional:
                item = f"{item} if item is not None else None"
            lines.append(f"        return [{item} for item in result]")
        else:
            if ref.is_optional:
                lines.append("        if result is None:")
                lines.append("            return None")
            lines.append(f"        return {converter.format('result')}")
        return lines

    def _converter(self, type_name: str) -> str | None:
        """Format string turning a raw value into the Python type, or None to pass it through."""
        kind = self.schema.kind_of(type_name)
        if kind in (OBJECT, INTERFACE):
            return f"{type_name}.model_validate({{}})"
        if kind in (UNION, SCALAR):
            return f"_pd.TypeAdapter({type_name}).validate_python({{}})"
        if kind == ENUM:
            return f"{type_name}({{}})"
        return None

    def _hint(self, ref: TypeRef) -> str:
        return python_hint(self.schema, self.scalars, ref)

    def _generate_root_client(self) -> list[str]:
        """Generate the root client class."""
        lines = [
            f"class {self.client_name}:",
            '    """Generated GraphQL client.',
            "",
            "    Usage:",
            f"        async with {self.client_name}(url, auth=BearerAuth(token)) as client:",
            "            result = await client.query.some_operation(...)",
            '    """',
            "",
            "    def __init__(",
            "        self,",
            "        url: str,",
            "        auth: _t.Optional[_httpx.Auth] = None,",
            "        *,",
            "        timeout: float = 30.0,",
            "        transport: _t.Optional[_httpx.AsyncBaseTransport] = None,",
            "    ):",
            "        self._executor = _GraphQLExecutor(",
            "            url,",
            "            auth=auth,",
            "            schema=_load_schema(),",
            "            timeout=timeout,",
            "            transport=transport,",
            "        )",
        ]
        if not self.query_tree.is_empty:
            lines.append("        self.query = QueryClient(self._executor)")
        if not self.mutation_tree.is_empty:
            lines.append("        self.mutation = MutationClient(self._executor)")

        lines.extend([
            "",
            "    async def execute(self, query: str, variables: _t.Optional[dict] = None) -> dict:",
            '        """Execute a raw GraphQL document and return its data."""',
            "        return await self._executor.execute(query, variables)",
            "",
            "    async def close(self):",
            "        await self._executor.close()",
            "",
            "    async def __aenter__(self):",
            "        return self",
            "",
            "    async def __aexit__(self, exc_type, exc_val, exc_tb):",
            "        await self.close()",
            "",
        ])
        return lines
