"""Exceptions raised while generating client bindings."""


class GenerationError(Exception):
    """Base class for failures of the generation build step."""


class SchemaNotFoundError(GenerationError):
    """No schema file exists at the configured folder and pattern."""

    def __init__(self, folder: str, pattern: str | None = None):
        self.folder = folder
        self.pattern = pattern
        if pattern is None:
            message = f"Schema folder not found: {folder}"
        else:
            message = f"No schema file matching '{pattern}' in {folder}"
        super().__init__(message)


class SchemaParseError(GenerationError):
    """A schema file could not be parsed as GraphQL SDL."""

    def __init__(self, source_name: str, reason: str):
        self.source_name = source_name
        self.reason = reason
        super().__init__(f"Error parsing {source_name}: {reason}")


class InvalidPackageNameError(GenerationError):
    """The target package name is not a dotted Python module path."""

    def __init__(self, package_name: str):
        self.package_name = package_name
        super().__init__(f"Invalid package name: {package_name!r}")


class GeneratedCodeError(GenerationError):
    """A rendered file is not valid Python."""

    def __init__(self, output_path: str, template_name: str, reason: str):
        self.output_path = output_path
        self.template_name = template_name
        super().__init__(
            f"Generated invalid Python for {output_path}: {reason}\n"
            f"Template: {template_name}"
        )
