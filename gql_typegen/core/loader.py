"""Read schema and query files from disk.

Schemas may be SDL files (``.graphql``, ``.graphqls``, ``.gql``), an
introspection response (``.json``) or a directory of SDL files, which are
parsed together as one document.
"""

import json
import logging
import os
from pathlib import Path

from graphql import DocumentNode, parse

from .cache import DocumentCache, NoCache
from .errors import ConfigError
from .parser import SchemaParser
from .schema import Schema

logger = logging.getLogger(__name__)

SDL_EXTENSIONS = (".graphql", ".graphqls", ".gql")


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            f"Could not read {path}: {e.strerror or e}. "
            f"Paths are resolved relative to the current directory."
        ) from e


def _collect_schema_files(path: Path) -> list[Path]:
    """Collect all SDL files below a directory."""
    files = []
    for root, _, filenames in os.walk(path):
        for filename in filenames:
            if filename.endswith(SDL_EXTENSIONS):
                files.append(Path(root) / filename)
    return sorted(files)


def _load_schema(path: Path) -> Schema:
    if path.is_dir():
        files = _collect_schema_files(path)
        if not files:
            raise ConfigError(f"No schema files ({', '.join(SDL_EXTENSIONS)}) found in {path}")
        logger.debug("Parsing %d schema files from %s", len(files), path)
        source = "\n".join(_read(file) for file in files)
        return SchemaParser().parse_sdl(parse(source))

    if path.suffix in SDL_EXTENSIONS:
        return SchemaParser().parse_sdl(parse(_read(path)))
    if path.suffix == ".json":
        try:
            data = json.loads(_read(path))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid introspection JSON in {path}: {e}") from e
        return SchemaParser().parse_introspection(data)
    raise ConfigError(
        f"Unsupported schema file {path.name}. "
        f"Expected one of {', '.join(SDL_EXTENSIONS)}, .json or a directory"
    )


def load_schema(path: str | Path, cache: DocumentCache[Schema] | None = None) -> Schema:
    if cache is None:
        cache = NoCache()
    return cache.get_or_load(Path(path), _load_schema)


def _load_query(path: Path) -> tuple[str, DocumentNode]:
    source = _read(path)
    return source, parse(source)


def load_query(
    path: str | Path,
    cache: DocumentCache[tuple[str, DocumentNode]] | None = None,
) -> tuple[str, DocumentNode]:
    """Return the source text and parsed document of a query file.

    Syntax errors are raised as graphql-core ``GraphQLSyntaxError``.
    """
    if cache is None:
        cache = NoCache()
    return cache.get_or_load(Path(path), _load_query)
