"""Code generator for GraphQL schemas.

Renders Jinja2 templates to produce a Python bindings package from IR.

Supports custom templates via the template_dir parameter:
    generator = CodeGenerator(ir, output_dir, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import ast
from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape
from loguru import logger

from .client_generator import RUNTIME_PACKAGE, ClientGenerator, python_hint
from .errors import GeneratedCodeError
from .hooks import HookRunner
from .ir import IRField, IRSchema
from .naming import (
    safe_comment,
    safe_docstring,
    safe_field_name,
    safe_identifier,
    to_pascal_case,
    to_snake_case,
    upper_case,
    validate_package_name,
)
from .scalars import ANY, ScalarRegistry

DEFAULT_PACKAGE_NAME = "com.fsi.graphql.client.generation.generated"


class CodeGenerator:
    """Generates a Python bindings package from GraphQL IR.

    Templates in template_dir take precedence over built-in templates.

    Available templates to override:
        - scalars.py.j2: Scalar type aliases
        - enums.py.j2: Enum generation
        - models.py.j2: Pydantic model generation
        - schema.py.j2: Embedded schema source
        - __init__.py.j2: Package exports

    Example:
        generator = CodeGenerator(
            ir=schema,
            output_dir="./build/generated",
            package_name="com.example.generated",
        )
        written = generator.generate()
    """

    def __init__(
        self,
        ir: IRSchema,
        output_dir: str | Path,
        package_name: str = DEFAULT_PACKAGE_NAME,
        client_name: str = "GraphQLClient",
        template_dir: str | Path | None = None,
        hooks: HookRunner | None = None,
        scalar_registry: ScalarRegistry | None = None,
    ):
        """Initialize the code generator.

        Args:
            ir: The intermediate representation of the GraphQL schema
            output_dir: Root directory the package tree is written under
            package_name: Dotted name of the generated package
            client_name: Name of the root client class
            template_dir: Optional directory with custom Jinja2 templates
            hooks: Pre/post generation hooks
            scalar_registry: Custom scalar to Python type mapping
        """
        self.ir = ir
        self.output_dir = Path(output_dir)
        self.package_name = package_name
        self.package_parts = validate_package_name(package_name)
        if not client_name.isidentifier():
            raise ValueError(f"Invalid client class name: {client_name!r}")
        self.client_name = client_name
        self.template_dir = template_dir
        self.hooks = hooks or HookRunner()
        self.scalars = scalar_registry or ScalarRegistry()

        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
            else:
                logger.warning(f"Template directory {template_path} not found; using built-in templates")
        loaders.append(PackageLoader(RUNTIME_PACKAGE, "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["snake_case"] = to_snake_case
        self.env.filters["pascal_case"] = to_pascal_case
        self.env.filters["upper_case"] = upper_case
        self.env.filters["repr"] = repr
        self.env.filters["safe_docstring"] = safe_docstring
        self.env.filters["safe_comment"] = safe_comment
        self.env.filters["safe_param"] = safe_identifier

    @property
    def package_dir(self) -> Path:
        return self.output_dir.joinpath(*self.package_parts)

    def generate(self) -> list[Path]:
        """Generate all package files and return their paths."""
        self.ir = self.hooks.run_pre_hooks(self.ir)
        self.package_dir.mkdir(parents=True, exist_ok=True)
        self._ensure_parent_packages()

        common = {"package_name": self.package_name, "runtime_package": RUNTIME_PACKAGE}
        written = [
            self._render("scalars.py.j2", "scalars.py", {**common, **self._scalar_context()}),
            self._render("enums.py.j2", "enums.py", {**common, **self._enum_context()}),
            self._render("models.py.j2", "models.py", {**common, **self._model_context()}),
            self._render("schema.py.j2", "schema.py", {**common, "sdl": self.ir.sdl}),
            self._write(
                "client.py",
                ClientGenerator(self.ir, self.client_name, self.scalars).generate_client_code() + "\n",
                "<client generator>",
            ),
            self._render("__init__.py.j2", "__init__.py", {**common, "client_name": self.client_name}),
        ]
        logger.info(f"Generated {len(written)} files in {self.package_dir}")
        return written

    def _ensure_parent_packages(self):
        """Make every enclosing directory an importable package."""
        current = self.output_dir
        for part in self.package_parts[:-1]:
            current = current / part
            init_file = current / "__init__.py"
            if not init_file.exists():
                init_file.write_text("")

    def _render(self, template_name: str, output_path: str, context: dict[str, Any]) -> Path:
        """Render a template and write the result."""
        template = self.env.get_template(template_name)
        return self._write(output_path, template.render(context) + "\n", template_name)

    def _write(self, output_path: str, content: str, template_name: str) -> Path:
        """Apply post hooks, validate Python syntax and write to the package."""
        content = self.hooks.run_post_hooks(output_path, content)

        if output_path.endswith(".py"):
            try:
                ast.parse(content)
            except SyntaxError as e:
                raise GeneratedCodeError(output_path, template_name, str(e)) from e

        full_path = self.package_dir / output_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote {full_path}")
        return full_path

    def _scalar_context(self) -> dict[str, Any]:
        scalars = [
            {
                "name": s.name,
                "description": s.description,
                "python_type": self.scalars.python_type(s.name),
            }
            for s in self.ir.scalars.values()
        ]
        return {"scalars": scalars, "imports": self.scalars.imports_for(self.ir.scalars)}

    def _enum_context(self) -> dict[str, Any]:
        enums = []
        for enum in self.ir.enums.values():
            values = [
                {"name": v.name, "member": safe_identifier(v.name), "description": v.description}
                for v in enum.values
            ]
            enums.append({"name": enum.name, "description": enum.description, "values": values})
        return {"enums": enums}

    def _model_context(self) -> dict[str, Any]:
        """Interfaces first, so object types can inherit from them."""
        models = []
        for iface in self.ir.interfaces.values():
            models.append(self._model(iface.name, iface.fields, iface.description, []))
        for ir_type in self.ir.types.values():
            models.append(self._model(ir_type.name, ir_type.fields, ir_type.description, ir_type.interfaces))
        for ir_input in self.ir.inputs.values():
            models.append(self._model(ir_input.name, ir_input.fields, ir_input.description, [], is_input=True))

        model_names = {m["name"] for m in models}
        unions = []
        for union in self.ir.unions.values():
            members = [m for m in union.members if m in model_names]
            hint = f"_t.Union[{', '.join(members)}]" if members else ANY
            unions.append({"name": union.name, "hint": hint})

        return {"models": models, "unions": unions}

    def _model(
        self,
        name: str,
        fields: list[IRField],
        description: str | None,
        interfaces: list[str],
        is_input: bool = False,
    ) -> dict:
        bases = [i for i in interfaces if i in self.ir.interfaces] or ["_pd.BaseModel"]
        return {
            "name": name,
            "description": description,
            "bases": bases,
            "fields": [self._field(f, is_input) for f in fields],
        }

    def _field(self, ir_field: IRField, is_input: bool = False) -> dict:
        """Output fields default to None; required input fields have no default."""
        return {
            "name": ir_field.name,
            "attr": safe_field_name(ir_field.name),
            "hint": python_hint(self.ir, self.scalars, ir_field.type),
            "default": "..." if is_input and not ir_field.type.is_optional else "None",
            "description": ir_field.description,
        }
