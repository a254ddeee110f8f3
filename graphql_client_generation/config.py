"""Application settings.

Values come from, highest priority first: keyword arguments, ``GQLGEN_*``
environment variables, a ``.env`` file, the
``[tool.graphql-client-generation]`` table of ``pyproject.toml`` in the
working directory, and finally the defaults below.
"""

from pydantic import field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    PyprojectTomlConfigSettingsSource,
    SettingsConfigDict,
)

from . import __version__
from .core.errors import InvalidPackageNameError
from .core.naming import validate_package_name
from .core.scalars import ScalarType


class Settings(BaseSettings):
    """Generation, server and logging settings."""

    model_config = SettingsConfigDict(
        env_prefix="GQLGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        pyproject_toml_table_header=("tool", "graphql-client-generation"),
    )

    # Application
    app_name: str = "graphql-client-generation"
    app_version: str = __version__
    app_description: str = "Client generation of graph ql api"

    # Generation
    schema_file_folder: str = "src/main/resources"
    schema_file_pattern: str = "schema.graphql"
    package_name: str = "com.fsi.graphql.client.generation.generated"
    output_dir: str = "build/generated"
    client_name: str = "GraphQLClient"
    template_dir: str | None = None
    # Glob patterns of schema types left out of the bindings
    exclude_types: list[str] = []
    # Comment block put at the top of every generated module
    file_header: str | None = None
    # Custom scalar name to dotted Python type, e.g. {"Money": "decimal.Decimal"}
    scalar_types: dict[str, str] = {}

    # Runtime client used by the `execute` command
    endpoint_url: str | None = None
    api_token: str | None = None
    # Send the token raw in this header instead of as a bearer token
    api_key_header: str | None = None

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False

    # Logging
    log_level: str = "INFO"
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/app.log"
    log_rotation: str = "100 MB"
    log_retention: str = "30 days"

    @field_validator("package_name")
    @classmethod
    def _check_package_name(cls, value: str) -> str:
        try:
            validate_package_name(value)
        except InvalidPackageNameError as e:
            raise ValueError(str(e)) from e
        return value

    @field_validator("client_name")
    @classmethod
    def _check_client_name(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"Invalid client class name: {value!r}")
        return value

    @field_validator("scalar_types")
    @classmethod
    def _check_scalar_types(cls, value: dict[str, str]) -> dict[str, str]:
        for path in value.values():
            ScalarType.from_path(path)
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            PyprojectTomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def get_settings(**overrides) -> Settings:
    """Load settings, dropping overrides that were not given."""
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
