"""Build step: locate the schema, generate the bindings, check they compile."""

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from .errors import GeneratedCodeError
from .generator import CodeGenerator
from .hooks import HookRunner
from .ir import IRSchema
from .locator import locate_schema_files
from .parser import SchemaParser
from .scalars import ScalarRegistry


@dataclass
class GenerationResult:
    """Outcome of one generation run."""
    package_name: str
    package_dir: Path
    schema_files: list[Path]
    files: list[Path] = field(default_factory=list)
    ir: IRSchema | None = None

    @property
    def counts(self) -> dict[str, int]:
        if self.ir is None:
            return {}
        return {
            "scalars": len(self.ir.scalars),
            "enums": len(self.ir.enums),
            "types": len(self.ir.types),
            "inputs": len(self.ir.inputs),
            "interfaces": len(self.ir.interfaces),
            "unions": len(self.ir.unions),
            "queries": len(self.ir.queries),
            "mutations": len(self.ir.mutations),
        }


class GenerationPipeline:
    """Runs locate, parse, generate and compile check for one settings object.

    Hooks default to the ones the settings ask for (``exclude_types`` and
    ``file_header``); custom scalars come from ``scalar_types``.

    Any failure raises a ``GenerationError`` subclass and stops the build.
    """

    def __init__(self, settings, hooks: HookRunner | None = None):
        self.settings = settings
        self.hooks = hooks or HookRunner.from_settings(settings)

    def run(self) -> GenerationResult:
        settings = self.settings
        logger.info(
            f"Generating {settings.package_name} from "
            f"{settings.schema_file_folder}/{settings.schema_file_pattern}"
        )

        schema_files = locate_schema_files(settings.schema_file_folder, settings.schema_file_pattern)
        ir = SchemaParser(settings.schema_file_folder, settings.schema_file_pattern).parse_all()

        generator = CodeGenerator(
            ir,
            output_dir=settings.output_dir,
            package_name=settings.package_name,
            client_name=settings.client_name,
            template_dir=settings.template_dir,
            hooks=self.hooks,
            scalar_registry=ScalarRegistry(settings.scalar_types),
        )
        files = generator.generate()
        self._compile(files)

        return GenerationResult(
            package_name=settings.package_name,
            package_dir=generator.package_dir,
            schema_files=schema_files,
            files=files,
            ir=generator.ir,
        )

    @staticmethod
    def _compile(files: list[Path]):
        """Byte-compile every generated module, as the build would."""
        for path in files:
            if path.suffix != ".py":
                continue
            try:
                compile(path.read_text(encoding="utf-8"), str(path), "exec")
            except SyntaxError as e:
                raise GeneratedCodeError(str(path), "<compile>", str(e)) from e
        logger.debug(f"Compiled {len(files)} generated module(s)")
