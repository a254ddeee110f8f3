"""Tests for package generation, including importing the generated code."""

import asyncio
import importlib
import json
from datetime import datetime
from decimal import Decimal

import httpx
import pytest

from graphql_client_generation.core.auth import BearerAuth
from graphql_client_generation.core.errors import GeneratedCodeError, InvalidPackageNameError
from graphql_client_generation.core.generator import CodeGenerator
from graphql_client_generation.core.hooks import AddHeaderHook, HookRunner
from graphql_client_generation.core.parser import SchemaParser
from graphql_client_generation.core.query_builder import FieldSelection
from graphql_client_generation.core.scalars import ScalarRegistry

PACKAGE = "acme.generated"


@pytest.fixture
def generated(sample_ir, tmp_path, monkeypatch, isolated_modules):
    """Generate the sample bindings and return the imported package."""
    out = tmp_path / "out"
    CodeGenerator(sample_ir, out, package_name=PACKAGE).generate()
    monkeypatch.syspath_prepend(str(out))
    importlib.invalidate_caches()
    return importlib.import_module(PACKAGE)


@pytest.fixture
def generate_package(tmp_path, monkeypatch, isolated_modules):
    """Generate bindings for an SDL string and return the imported package."""

    def generate(sdl, package_name, **kwargs):
        ir = sdl if not isinstance(sdl, str) else SchemaParser().parse_sdl(sdl)
        out = tmp_path / package_name
        CodeGenerator(ir, out, package_name=package_name, **kwargs).generate()
        monkeypatch.syspath_prepend(str(out))
        importlib.invalidate_caches()
        return importlib.import_module(package_name)

    return generate


def run_query(package, handler, call):
    """Run one client call against a mock endpoint."""

    async def run():
        async with package.GraphQLClient("https://api.test/graphql", transport=httpx.MockTransport(handler)) as client:
            return await call(client)

    return asyncio.run(run())


class TestCodeGenerator:
    """Tests for files written by CodeGenerator."""

    def test_files(self, sample_ir, tmp_path):
        files = CodeGenerator(sample_ir, tmp_path, package_name=PACKAGE).generate()
        package_dir = tmp_path / "acme" / "generated"
        assert [f.name for f in files] == [
            "scalars.py",
            "enums.py",
            "models.py",
            "schema.py",
            "client.py",
            "__init__.py",
        ]
        assert all(f.parent == package_dir for f in files)
        assert (tmp_path / "acme" / "__init__.py").read_text() == ""

    def test_default_package_path(self, sample_ir, tmp_path):
        generator = CodeGenerator(sample_ir, tmp_path)
        assert generator.package_dir == tmp_path.joinpath(
            "com", "fsi", "graphql", "client", "generation", "generated"
        )

    def test_invalid_package_name(self, sample_ir, tmp_path):
        with pytest.raises(InvalidPackageNameError):
            CodeGenerator(sample_ir, tmp_path, package_name="acme.class")

    def test_invalid_client_name(self, sample_ir, tmp_path):
        with pytest.raises(ValueError):
            CodeGenerator(sample_ir, tmp_path, client_name="my-client")

    def test_header_hook(self, sample_ir, tmp_path):
        hooks = HookRunner(post_hooks=[AddHeaderHook("Generated by acme")])
        files = CodeGenerator(sample_ir, tmp_path, package_name=PACKAGE, hooks=hooks).generate()
        for path in files:
            assert path.read_text().startswith("# Generated by acme\n\n")

    def test_custom_template(self, sample_ir, tmp_path):
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "scalars.py.j2").write_text("# custom scalars for {{ package_name }}\n")

        out = tmp_path / "out"
        CodeGenerator(sample_ir, out, package_name=PACKAGE, template_dir=templates).generate()
        assert (out / "acme" / "generated" / "scalars.py").read_text() == (
            "# custom scalars for acme.generated\n"
        )

    def test_broken_template(self, sample_ir, tmp_path):
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "enums.py.j2").write_text("def broken(:\n")

        with pytest.raises(GeneratedCodeError) as exc_info:
            CodeGenerator(sample_ir, tmp_path / "out", package_name=PACKAGE, template_dir=templates).generate()
        assert exc_info.value.template_name == "enums.py.j2"

    def test_embedded_schema(self, sample_ir, sample_sdl, tmp_path):
        CodeGenerator(sample_ir, tmp_path, package_name=PACKAGE).generate()
        schema_py = (tmp_path / "acme" / "generated" / "schema.py").read_text()
        assert repr(sample_sdl) in schema_py


class TestGeneratedPackage:
    """Tests that import and use the generated bindings."""

    def test_exports(self, generated):
        assert generated.GraphQLClient
        assert generated.Role.ADMIN.value == "ADMIN"
        assert generated.DateTime is datetime

    def test_models_accept_graphql_names(self, generated):
        user = generated.User.model_validate(
            {
                "__typename": "User",
                "id": "1",
                "name": "Ann",
                "role": "MEMBER",
                "createdAt": "2024-05-01T10:00:00+00:00",
                "posts": [{"id": "p1", "title": "Hi"}],
            }
        )
        assert isinstance(user, generated.Node)
        assert user.role is generated.Role.MEMBER
        assert user.created_at == datetime.fromisoformat("2024-05-01T10:00:00+00:00")
        assert user.posts[0].title == "Hi"
        assert user.friends is None

    def test_input_dumps_by_alias(self, generated):
        post = generated.CreatePostInput(title="Hello")
        assert post.model_dump(by_alias=True, exclude_none=True) == {"title": "Hello"}

    def test_required_input_field(self, generated):
        with pytest.raises(ValueError):
            generated.CreatePostInput()

    def test_query_round_trip(self, generated):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={"data": {"user": {"__typename": "User", "id": "1", "name": "Ann", "role": "ADMIN"}}},
            )

        async def run():
            async with generated.GraphQLClient(
                "https://api.test/graphql",
                auth=BearerAuth("secret"),
                transport=httpx.MockTransport(handler),
            ) as client:
                return await client.query.user(id="1")

        user = asyncio.run(run())
        assert isinstance(user, generated.User)
        assert user.name == "Ann"

        body = json.loads(requests[0].content)
        assert body["query"].startswith("query User($id: ID!) {")
        assert body["variables"] == {"id": "1"}
        assert requests[0].headers["Authorization"] == "Bearer secret"

    def test_nested_mutation(self, generated):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={"data": {"project": {"posts": {"create": {"__typename": "Post", "id": "p9"}}}}},
            )

        async def run():
            client = generated.GraphQLClient("https://api.test/graphql", transport=httpx.MockTransport(handler))
            try:
                return await client.mutation.project.posts.create(
                    project_id="42",
                    input_create_post=generated.CreatePostInput(title="Hello", tags=["a"]),
                    fields=FieldSelection.MINIMAL,
                )
            finally:
                await client.close()

        post = asyncio.run(run())
        assert post.id == "p9"
        assert requests[0]["variables"] == {
            "projectId": "42",
            "input_createPost": {"title": "Hello", "tags": ["a"]},
        }

    def test_scalar_and_null_results(self, generated):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"now": "2024-05-01T10:00:00+00:00", "user": None}})

        async def run():
            async with generated.GraphQLClient(
                "https://api.test/graphql", transport=httpx.MockTransport(handler)
            ) as client:
                return await client.query.now(), await client.query.user(id="missing")

        now, user = asyncio.run(run())
        assert now == datetime.fromisoformat("2024-05-01T10:00:00+00:00")
        assert user is None


class TestGeneratedEdgeCases:
    """Schemas whose names or shapes once broke the generated code."""

    def test_nullable_list_items(self, generate_package):
        package = generate_package(
            "type User { id: ID } type Query { users: [User]! }",
            "acme.nullable_items",
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"users": [{"id": "1"}, None]}})

        users = run_query(package, handler, lambda client: client.query.users())
        assert isinstance(users[0], package.User)
        assert users[0].id == "1"
        assert users[1] is None

    def test_nullable_items_inside_models(self, generate_package):
        package = generate_package(
            "type Tag { name: String } type Post { tags: [Tag]! } type Query { post: Post }",
            "acme.nullable_model_items",
        )
        post = package.Post.model_validate({"tags": [{"name": "a"}, None]})
        assert post.tags[0].name == "a"
        assert post.tags[1] is None

    def test_type_names_shadowing_helpers(self, generate_package):
        package = generate_package(
            """
            enum Enum { A }
            type Field { label: String }
            type Optional { value: Int }
            type Form { title: String fields: [Field] kind: Enum maybe: Optional }
            type Query { form: Form }
            """,
            "acme.shadowing",
        )
        form = package.Form.model_validate(
            {"title": "Signup", "fields": [{"label": "Email"}, None], "kind": "A", "maybe": {"value": 1}}
        )
        assert form.title == "Signup"
        assert isinstance(form.fields[0], package.Field)
        assert form.fields[1] is None
        assert form.kind is package.Enum.A
        assert form.maybe.value == 1

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"form": {"title": "Signup", "fields": []}}})

        form = run_query(package, handler, lambda client: client.query.form())
        assert isinstance(form, package.Form)
        assert form.fields == []

    def test_same_file_name_in_different_folders(self, generate_package, tmp_path):
        schema_dir = tmp_path / "schemas"
        (schema_dir / "a").mkdir(parents=True)
        (schema_dir / "b").mkdir()
        (schema_dir / "a" / "schema.graphql").write_text("type Query { hello: String }")
        (schema_dir / "b" / "schema.graphql").write_text("extend type Query { bye: String }")

        ir = SchemaParser(schema_dir, "**/*.graphql").parse_all()
        package = generate_package(ir, "acme.split_schema")

        assert "hello: String" in package.schema.SCHEMA_SDL
        assert "bye: String" in package.schema.SCHEMA_SDL
        assert [op.name for op in package.schema.load_schema().queries] == ["hello", "bye"]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"hello": "world"}})

        assert run_query(package, handler, lambda client: client.query.hello()) == "world"

    def test_custom_scalar_type(self, generate_package):
        package = generate_package(
            "scalar Money type Query { balance: Money! }",
            "acme.money",
            scalar_registry=ScalarRegistry({"Money": "decimal.Decimal"}),
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"balance": "12.50"}})

        assert run_query(package, handler, lambda client: client.query.balance()) == Decimal("12.50")
