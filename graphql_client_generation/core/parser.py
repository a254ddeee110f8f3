"""GraphQL schema parser using graphql-core.

Parses SDL files (or strings) and produces an IRSchema.
"""

from pathlib import Path

from graphql import (
    DocumentNode,
    EnumTypeDefinitionNode,
    GraphQLSyntaxError,
    InputObjectTypeDefinitionNode,
    InterfaceTypeDefinitionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    TypeNode,
    UnionTypeDefinitionNode,
    parse,
    print_ast,
    value_from_ast_untyped,
)
from loguru import logger

from .errors import SchemaParseError
from .ir import (
    IRArgument,
    IREnum,
    IREnumValue,
    IRField,
    IROperation,
    IRScalar,
    IRSchema,
    IRType,
    IRUnion,
    TypeRef,
)
from .locator import locate_schema_files

DEFAULT_SCHEMA_PATTERN = "**/*.graphql*"


class SchemaParser:
    """Parses GraphQL schema files into IR."""

    def __init__(self, schema_path: str | Path | None = None, pattern: str = DEFAULT_SCHEMA_PATTERN):
        """Initialize a parser with a path to a schema file or directory."""
        self.schema_path = schema_path
        self.pattern = pattern
        self.ir = IRSchema()
        # Root operation type names, renamed by a `schema { ... }` block
        self.root_types = {"Query": "query", "Mutation": "mutation"}
        self.ignored_roots = {"Subscription"}

    def parse_all(self) -> IRSchema:
        """Parse all located schema files and return the complete IR."""
        if self.schema_path is None:
            raise ValueError("SchemaParser needs a schema_path to parse files")

        root = Path(self.schema_path)
        documents = []
        for file_path in locate_schema_files(root, self.pattern):
            # Unique per file, even when a recursive pattern matches equal names
            source_name = file_path.name if root.is_file() else file_path.relative_to(root).as_posix()
            content = file_path.read_text(encoding="utf-8")
            documents.append((source_name, content, self._parse_document(source_name, content)))
        return self._build(documents)

    def parse_sdl(self, sdl: str, source_name: str = "schema.graphql") -> IRSchema:
        """Parse an SDL string and return the IR."""
        return self._build([(source_name, sdl, self._parse_document(source_name, sdl))])

    @staticmethod
    def _parse_document(source_name: str, content: str) -> DocumentNode:
        try:
            return parse(content)
        except GraphQLSyntaxError as e:
            logger.error(f"Error parsing {source_name}: {e.message}")
            raise SchemaParseError(source_name, e.message) from e

    def _build(self, documents: list[tuple[str, str, DocumentNode]]) -> IRSchema:
        # Root names must be known before any type is classified
        for _, _, ast in documents:
            self._collect_root_types(ast)

        for source_name, content, ast in documents:
            self.ir.sources[source_name] = content
            self._process_ast(ast)

        self._discover_nested_operations()
        logger.debug(
            f"Parsed {len(documents)} schema source(s): {len(self.ir.types)} types, "
            f"{len(self.ir.queries)} queries, {len(self.ir.mutations)} mutations"
        )
        return self.ir

    def _collect_root_types(self, ast: DocumentNode):
        for definition in ast.definitions:
            if isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
                for op_def in definition.operation_types or ():
                    op_type = op_def.operation.value
                    type_name = op_def.type.name.value
                    if op_type == "subscription":
                        self.ignored_roots = {type_name}
                        continue
                    self.root_types = {
                        name: kind for name, kind in self.root_types.items() if kind != op_type
                    }
                    self.root_types[type_name] = op_type

    def _process_ast(self, ast: DocumentNode):
        """Process GraphQL AST and populate IR."""
        for definition in ast.definitions:
            if isinstance(definition, ScalarTypeDefinitionNode):
                self._process_scalar(definition)
            elif isinstance(definition, EnumTypeDefinitionNode):
                self._process_enum(definition)
            elif isinstance(definition, InterfaceTypeDefinitionNode):
                self._process_interface(definition)
            elif isinstance(definition, UnionTypeDefinitionNode):
                self._process_union(definition)
            elif isinstance(definition, ObjectTypeDefinitionNode):
                self._process_object_type(definition)
            elif isinstance(definition, ObjectTypeExtensionNode):
                # Handle 'extend type Query/Mutation' as operations
                self._process_object_extension(definition)
            elif isinstance(definition, InputObjectTypeDefinitionNode):
                self._process_input_type(definition)

    @staticmethod
    def _description(node) -> str | None:
        return node.description.value if node.description else None

    def _process_scalar(self, node: ScalarTypeDefinitionNode):
        name = node.name.value
        self.ir.scalars[name] = IRScalar(name=name, description=self._description(node))

    def _process_enum(self, node: EnumTypeDefinitionNode):
        name = node.name.value
        values = [
            IREnumValue(name=v.name.value, description=self._description(v))
            for v in node.values or ()
        ]
        self.ir.enums[name] = IREnum(name=name, values=values, description=self._description(node))

    def _process_interface(self, node: InterfaceTypeDefinitionNode):
        name = node.name.value
        self.ir.interfaces[name] = IRType(
            name=name,
            fields=self._process_fields(node.fields or ()),
            description=self._description(node),
        )

    def _process_union(self, node: UnionTypeDefinitionNode):
        name = node.name.value
        self.ir.unions[name] = IRUnion(
            name=name,
            members=[t.name.value for t in node.types or ()],
            description=self._description(node),
        )

    def _process_object_type(self, node: ObjectTypeDefinitionNode):
        name = node.name.value
        if name in self.root_types:
            self._process_operations(node)
            return
        if name in self.ignored_roots:
            return

        fields = self._process_fields(node.fields or ())
        interfaces = [i.name.value for i in node.interfaces or ()]

        if name in self.ir.types:
            # An extension was seen first: keep its fields, take the base metadata
            existing = self.ir.types[name]
            existing_names = {f.name for f in existing.fields}
            existing.fields = [f for f in fields if f.name not in existing_names] + existing.fields
            existing.interfaces = interfaces + [i for i in existing.interfaces if i not in interfaces]
            existing.description = self._description(node)
        else:
            self.ir.types[name] = IRType(
                name=name,
                fields=fields,
                interfaces=interfaces,
                description=self._description(node),
            )

    def _process_input_type(self, node: InputObjectTypeDefinitionNode):
        name = node.name.value
        self.ir.inputs[name] = IRType(
            name=name,
            fields=self._process_fields(node.fields or ()),
            description=self._description(node),
            is_input=True,
        )

    def _process_object_extension(self, node: ObjectTypeExtensionNode):
        """Process 'extend type' definitions.

        For root types: treats fields as operations.
        For other types: merges fields into the existing type definition.
        """
        name = node.name.value
        if name in self.root_types:
            self._process_operations(node)
        elif name not in self.ignored_roots:
            self._merge_extension_fields(name, node)

    def _merge_extension_fields(self, type_name: str, node: ObjectTypeExtensionNode):
        """Merge extension fields into an existing type, creating it if needed."""
        extension_fields = self._process_fields(node.fields or ())

        if type_name in self.ir.types:
            existing_type = self.ir.types[type_name]
            existing_names = {f.name for f in existing_type.fields}
            for field in extension_fields:
                if field.name not in existing_names:
                    existing_type.fields.append(field)
                    existing_names.add(field.name)
            for iface in node.interfaces or ():
                if iface.name.value not in existing_type.interfaces:
                    existing_type.interfaces.append(iface.name.value)
        else:
            self.ir.types[type_name] = IRType(
                name=type_name,
                fields=extension_fields,
                interfaces=[i.name.value for i in node.interfaces or ()],
            )

    def _process_arguments(self, arg_nodes) -> list[IRArgument]:
        return [
            IRArgument(
                name=arg_node.name.value,
                type=self._type_ref(arg_node.type),
                default_value=value_from_ast_untyped(arg_node.default_value)
                if arg_node.default_value
                else None,
                description=self._description(arg_node),
                graphql_type=print_ast(arg_node.type),
            )
            for arg_node in arg_nodes or ()
        ]

    def _process_fields(self, field_nodes) -> list[IRField]:
        return [
            IRField(
                name=node.name.value,
                type=self._type_ref(node.type),
                description=self._description(node),
                arguments=self._process_arguments(getattr(node, "arguments", None)),
            )
            for node in field_nodes
        ]

    def _process_operations(self, node: ObjectTypeDefinitionNode | ObjectTypeExtensionNode):
        """Turn the fields of a root type into operations."""
        op_type = self.root_types[node.name.value]
        operations = self.ir.queries if op_type == "query" else self.ir.mutations
        for field in node.fields or ():
            operations.append(
                IROperation(
                    name=field.name.value,
                    operation_type=op_type,
                    arguments=self._process_arguments(field.arguments),
                    returns=self._type_ref(field.type),
                    description=self._description(field),
                )
            )

    @staticmethod
    def _type_ref(type_node: TypeNode) -> TypeRef:
        """Unwrap NonNull and List nodes down to the named type.

        For nested lists (``[[Int!]]``) the innermost item decides
        ``is_item_optional``.
        """
        is_optional = True
        if isinstance(type_node, NonNullTypeNode):
            is_optional = False
            type_node = type_node.type

        is_list = False
        is_item_optional = True
        while isinstance(type_node, ListTypeNode):
            is_list = True
            type_node = type_node.type
            is_item_optional = not isinstance(type_node, NonNullTypeNode)
            if not is_item_optional:
                type_node = type_node.type

        if not isinstance(type_node, NamedTypeNode):
            raise TypeError(f"Expected NamedTypeNode, got {type(type_node).__name__}")

        return TypeRef(
            name=type_node.name.value,
            is_list=is_list,
            is_optional=is_optional,
            is_item_optional=is_item_optional,
        )

    def _discover_nested_operations(self):
        """Replace namespace entry points with the operations below them.

        ``Mutation.account -> AccountMutations.updateStatus`` becomes one
        operation with ``path=["account", "updateStatus"]`` whose
        ``namespace_arguments`` carry the arguments of ``account``.
        """
        for operations in (self.ir.queries, self.ir.mutations):
            discovered: list[IROperation] = []
            for op in operations:
                if self.ir.is_namespace_type(op.returns.name):
                    self._traverse_namespace(
                        op.returns.name,
                        op.operation_type,
                        path=[op.name],
                        level_args=[op.arguments],
                        results=discovered,
                        seen={op.returns.name},
                    )
                else:
                    discovered.append(op)
            operations[:] = discovered

    def _traverse_namespace(
        self,
        type_name: str,
        op_type: str,
        path: list[str],
        level_args: list[list[IRArgument]],
        results: list[IROperation],
        seen: set[str],
    ):
        """Collect the operations under one namespace type, depth first.

        ``seen`` holds the namespace types on the current path; a field
        leading back to one of them is skipped.
        """
        type_def = self.ir.types.get(type_name)
        if not type_def:
            return

        for field in type_def.fields:
            field_path = path + [field.name]
            target = field.type.name

            if self.ir.is_namespace_type(target):
                if target not in seen:
                    self._traverse_namespace(
                        target,
                        op_type,
                        path=field_path,
                        level_args=level_args + [field.arguments],
                        results=results,
                        seen=seen | {target},
                    )
                continue

            results.append(
                IROperation(
                    name=field.name,
                    operation_type=op_type,
                    arguments=field.arguments,
                    returns=field.type,
                    description=field.description,
                    path=field_path,
                    namespace_arguments=[list(args) for args in level_args],
                )
            )
