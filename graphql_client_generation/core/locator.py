"""Resolve schema files from a folder and a filename pattern."""

from pathlib import Path

from loguru import logger

from .errors import SchemaNotFoundError


def locate_schema_files(folder: str | Path, pattern: str) -> list[Path]:
    """Return the schema files under ``folder`` matching the glob ``pattern``.

    ``pattern`` is relative to ``folder`` and may recurse (``**/*.graphqls``).
    A ``folder`` that is itself a file is returned as the only match.

    Raises:
        SchemaNotFoundError: if the folder is missing or nothing matches.
    """
    folder = Path(folder)
    if folder.is_file():
        return [folder]
    if not folder.is_dir():
        raise SchemaNotFoundError(str(folder))

    files = sorted(p for p in folder.glob(pattern) if p.is_file())
    if not files:
        raise SchemaNotFoundError(str(folder), pattern)

    logger.debug(f"Located {len(files)} schema file(s) in {folder} matching '{pattern}'")
    return files
