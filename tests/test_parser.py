"""Tests for the GraphQL schema parser."""

import pytest

from graphql_client_generation.core.errors import SchemaNotFoundError, SchemaParseError
from graphql_client_generation.core.ir import TypeRef
from graphql_client_generation.core.parser import SchemaParser


class TestParseTypes:
    """Tests for named type definitions."""

    def test_scalars_and_enums(self, sample_ir):
        assert "DateTime" in sample_ir.scalars
        assert sample_ir.scalars["DateTime"].description == "An ISO 8601 timestamp"
        assert [v.name for v in sample_ir.enums["Role"].values] == ["ADMIN", "MEMBER"]

    def test_object_type_fields(self, sample_ir):
        user = sample_ir.types["User"]
        assert user.description == "A person using the service"
        assert user.interfaces == ["Node"]

        fields = {f.name: f for f in user.fields}
        assert fields["id"].type == TypeRef("ID", is_optional=False)
        assert fields["createdAt"].type == TypeRef("DateTime")
        assert fields["friends"].type == TypeRef("User", is_list=True, is_optional=False, is_item_optional=False)

    def test_field_arguments(self, sample_ir):
        fields = {f.name: f for f in sample_ir.types["User"].fields}
        posts_arg = fields["posts"].arguments[0]
        assert posts_arg.name == "first"
        assert posts_arg.type.is_optional
        assert not posts_arg.is_required
        assert posts_arg.graphql_type == "Int"

        size_arg = fields["avatar"].arguments[0]
        assert size_arg.is_required
        assert size_arg.graphql_type == "Int!"

    def test_interfaces_unions_inputs(self, sample_ir):
        assert [f.name for f in sample_ir.interfaces["Node"].fields] == ["id"]
        assert sample_ir.unions["SearchResult"].members == ["User", "Post"]

        create = sample_ir.inputs["CreatePostInput"]
        assert create.is_input
        tags = {f.name: f for f in create.fields}["tags"]
        assert tags.type == TypeRef("String", is_list=True, is_optional=True, is_item_optional=False)

    def test_root_types_are_not_models(self, sample_ir):
        assert "Query" not in sample_ir.types
        assert "Mutation" not in sample_ir.types

    def test_default_values(self):
        ir = SchemaParser().parse_sdl(
            """
            enum Order { ASC DESC }
            type Query { items(first: Int = 10, order: Order = DESC, tags: [String] = ["a"]): [String] }
            """
        )
        args = {a.name: a for a in ir.queries[0].arguments}
        assert args["first"].default_value == 10
        assert args["order"].default_value == "DESC"
        assert args["tags"].default_value == ["a"]

    def test_nested_list_type(self):
        ir = SchemaParser().parse_sdl("type Query { grid: [[Int!]!]! }")
        assert ir.queries[0].returns == TypeRef("Int", is_list=True, is_optional=False, is_item_optional=False)

    @pytest.mark.parametrize(
        "notation,is_optional,is_item_optional",
        [
            ("[User]", True, True),
            ("[User]!", False, True),
            ("[User!]", True, False),
            ("[User!]!", False, False),
        ],
    )
    def test_list_item_nullability(self, notation, is_optional, is_item_optional):
        ir = SchemaParser().parse_sdl(f"type User {{ id: ID }} type Query {{ users: {notation} }}")
        returns = ir.queries[0].returns
        assert returns == TypeRef("User", is_list=True, is_optional=is_optional, is_item_optional=is_item_optional)
        assert returns.notation == notation


class TestParseOperations:
    """Tests for root operations."""

    def test_queries(self, sample_ir):
        names = [op.name for op in sample_ir.queries]
        assert names == ["user", "users", "search", "now"]

        user = sample_ir.queries[0]
        assert user.operation_type == "query"
        assert user.returns == TypeRef("User")
        assert user.path == ["user"]

    def test_nested_mutations_replace_namespace_entry(self, sample_ir):
        paths = [op.path for op in sample_ir.mutations]
        assert paths == [["project", "posts", "create"], ["project", "rename"]]

    def test_nested_mutation_arguments(self, sample_ir):
        create = sample_ir.mutations[0]
        assert [a.name for a in create.parent_arguments] == ["projectId", "input"]
        assert [[a.name for a in level] for level in create.namespace_arguments] == [
            ["projectId", "input"],
            [],
        ]
        assert [a.name for a in create.arguments] == ["input"]
        assert create.full_name == "project_posts_create"

    def test_extend_root_type(self):
        ir = SchemaParser().parse_sdl(
            """
            type Query { a: Int }
            extend type Query { b: Int }
            """
        )
        assert [op.name for op in ir.queries] == ["a", "b"]

    def test_extend_object_type(self):
        ir = SchemaParser().parse_sdl(
            """
            extend type Item { extra: String }
            type Item { id: ID! }
            """
        )
        assert [f.name for f in ir.types["Item"].fields] == ["id", "extra"]

    def test_schema_block_renames_roots(self):
        ir = SchemaParser().parse_sdl(
            """
            schema { query: RootQuery mutation: RootMutation subscription: Events }
            type RootQuery { ping: String }
            type RootMutation { reset: Boolean }
            type Events { tick: Int }
            """
        )
        assert [op.name for op in ir.queries] == ["ping"]
        assert [op.name for op in ir.mutations] == ["reset"]
        assert ir.types == {}

    def test_subscription_is_ignored(self):
        ir = SchemaParser().parse_sdl("type Query { a: Int }\ntype Subscription { b: Int }")
        assert "Subscription" not in ir.types
        assert [op.name for op in ir.all_operations] == ["a"]

    def test_namespace_cycle_terminates(self):
        ir = SchemaParser().parse_sdl(
            """
            type LoopMutations { again: LoopMutations! run: Boolean }
            type Mutation { loop: LoopMutations! }
            """
        )
        assert [op.path for op in ir.mutations] == [["loop", "run"]]


class TestParseFiles:
    """Tests for parsing from disk."""

    def test_parse_all_records_sources(self, schema_dir, sample_sdl):
        ir = SchemaParser(schema_dir, "schema.graphql").parse_all()
        assert ir.sources == {"schema.graphql": sample_sdl}
        assert "User" in ir.types

    def test_multiple_files_merge(self, tmp_path):
        (tmp_path / "a.graphqls").write_text("type Query { item: Item }")
        (tmp_path / "b.graphqls").write_text("type Item { id: ID! }")

        ir = SchemaParser(tmp_path, "*.graphqls").parse_all()
        assert "Item" in ir.types
        assert ir.queries[0].returns.name == "Item"
        assert ir.sdl == "type Query { item: Item }\ntype Item { id: ID! }"

    def test_missing_schema(self, tmp_path):
        with pytest.raises(SchemaNotFoundError):
            SchemaParser(tmp_path, "schema.graphql").parse_all()

    def test_parse_all_without_path(self):
        with pytest.raises(ValueError):
            SchemaParser().parse_all()

    def test_syntax_error(self, tmp_path):
        (tmp_path / "schema.graphql").write_text("type Query { broken(: Int }")
        with pytest.raises(SchemaParseError) as exc_info:
            SchemaParser(tmp_path, "schema.graphql").parse_all()
        assert exc_info.value.source_name == "schema.graphql"
        assert str(exc_info.value).startswith("Error parsing schema.graphql:")

    def test_same_file_name_in_different_folders(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        (tmp_path / "a" / "schema.graphql").write_text("type Query { hello: String }")
        (tmp_path / "b" / "schema.graphql").write_text("extend type Query { bye: String }")

        ir = SchemaParser(tmp_path, "**/*.graphql").parse_all()
        assert set(ir.sources) == {"a/schema.graphql", "b/schema.graphql"}
        assert [op.name for op in ir.queries] == ["hello", "bye"]
        assert ir.sdl == "type Query { hello: String }\nextend type Query { bye: String }"

    def test_syntax_error_names_relative_path(self, tmp_path):
        (tmp_path / "orders").mkdir()
        (tmp_path / "orders" / "schema.graphql").write_text("type Query { broken(: Int }")
        with pytest.raises(SchemaParseError) as exc_info:
            SchemaParser(tmp_path, "**/*.graphql").parse_all()
        assert exc_info.value.source_name == "orders/schema.graphql"
