"""Schema model shared by the parser, the generators and the runtime.

Every reference to a named type (a field's type, an argument's type, an
operation's return type) is a ``TypeRef``, which keeps the nullability of
both the value and, for lists, of the list items.
"""

from dataclasses import dataclass, field
from typing import Any

from .naming import to_snake_case

OBJECT = "object"
INPUT = "input"
INTERFACE = "interface"
UNION = "union"
ENUM = "enum"
SCALAR = "scalar"


@dataclass(frozen=True)
class TypeRef:
    """A named type with its list and null wrappers.

    ``[User]!`` is ``TypeRef("User", is_list=True, is_optional=False)``;
    ``[User!]`` also sets ``is_item_optional=False``.
    """
    name: str
    is_list: bool = False
    is_optional: bool = True
    is_item_optional: bool = True

    @property
    def notation(self) -> str:
        """GraphQL notation, e.g. ``[ID!]!``."""
        text = self.name
        if self.is_list:
            text = f"[{text}]" if self.is_item_optional else f"[{text}!]"
        return text if self.is_optional else f"{text}!"


@dataclass
class IRArgument:
    name: str
    type: TypeRef
    default_value: Any = None
    description: str | None = None
    # Exactly as written in the schema; nested lists survive only here
    graphql_type: str = ""

    def __post_init__(self):
        if not self.graphql_type:
            self.graphql_type = self.type.notation

    @property
    def is_required(self) -> bool:
        """A non-null argument without a default must be supplied."""
        return not self.type.is_optional and self.default_value is None


@dataclass
class IRField:
    name: str
    type: TypeRef
    description: str | None = None
    arguments: list[IRArgument] = field(default_factory=list)


@dataclass
class IREnumValue:
    name: str
    description: str | None = None


@dataclass
class IREnum:
    name: str
    values: list[IREnumValue]
    description: str | None = None


@dataclass
class IRType:
    """An object type, an interface or an input type."""
    name: str
    fields: list[IRField]
    interfaces: list[str] = field(default_factory=list)
    description: str | None = None
    is_input: bool = False


@dataclass
class IRUnion:
    name: str
    members: list[str]
    description: str | None = None


@dataclass
class IRScalar:
    name: str
    description: str | None = None


@dataclass
class IROperation:
    """A query or mutation, possibly nested under namespace fields.

    ``path`` runs from the root field to the operation, e.g.
    ``["account", "updateStatus"]``. ``namespace_arguments[i]`` holds the
    arguments declared on ``path[i]`` for every level above the operation.
    """
    name: str
    operation_type: str
    arguments: list[IRArgument]
    returns: TypeRef
    description: str | None = None
    path: list[str] = field(default_factory=list)
    namespace_arguments: list[list[IRArgument]] = field(default_factory=list)

    def __post_init__(self):
        if not self.path:
            self.path = [self.name]
        missing = len(self.path) - 1 - len(self.namespace_arguments)
        if missing > 0:
            self.namespace_arguments = list(self.namespace_arguments) + [[] for _ in range(missing)]

    @property
    def full_name(self) -> str:
        """Snake-cased path, e.g. ``account_update_status``."""
        return "_".join(to_snake_case(p) for p in self.path)

    @property
    def parent_arguments(self) -> list[IRArgument]:
        return [arg for level in self.namespace_arguments for arg in level]

    @property
    def all_arguments(self) -> list[IRArgument]:
        """Namespace arguments first, then the operation's own."""
        return self.parent_arguments + self.arguments


@dataclass
class IRSchema:
    scalars: dict[str, IRScalar] = field(default_factory=dict)
    enums: dict[str, IREnum] = field(default_factory=dict)
    types: dict[str, IRType] = field(default_factory=dict)
    inputs: dict[str, IRType] = field(default_factory=dict)
    interfaces: dict[str, IRType] = field(default_factory=dict)
    unions: dict[str, IRUnion] = field(default_factory=dict)
    queries: list[IROperation] = field(default_factory=list)
    mutations: list[IROperation] = field(default_factory=list)
    # Raw SDL keyed by the source's path relative to the schema folder
    sources: dict[str, str] = field(default_factory=dict)

    def kind_of(self, name: str) -> str | None:
        """Return what a named type is, or None if the schema does not define it."""
        for kind, table in (
            (OBJECT, self.types),
            (INPUT, self.inputs),
            (INTERFACE, self.interfaces),
            (UNION, self.unions),
            (ENUM, self.enums),
            (SCALAR, self.scalars),
        ):
            if name in table:
                return kind
        return None

    def has_fields(self, name: str) -> bool:
        """True for types that need a selection set."""
        return self.kind_of(name) in (OBJECT, INTERFACE, UNION, INPUT)

    def get_type_by_name(self, name: str) -> IRType | None:
        """Look up an object, input or interface type."""
        return self.types.get(name) or self.inputs.get(name) or self.interfaces.get(name)

    @property
    def all_operations(self) -> list[IROperation]:
        return self.queries + self.mutations

    @property
    def sdl(self) -> str:
        """All sources concatenated in name order."""
        return "\n".join(self.sources[name] for name in sorted(self.sources))

    @staticmethod
    def is_namespace_type(type_name: str) -> bool:
        """Types named ``*Mutations`` or ``*Queries`` group operations."""
        return type_name.endswith("Mutations") or type_name.endswith("Queries")
