"""Drive generation: plan each operation, render it and write the files.

Example:
    schema = load_schema("schema.graphql")
    source, ast = load_query("queries/user.graphql")
    generator = CodeGenerator(schema, QueryDocument.from_ast(ast, source), options)
    generator.generate("user")
"""

import logging
from pathlib import Path

from ..emitters import Emitter, get_emitter
from .cache import DocumentCache
from .errors import ConfigError
from .hooks import AddHeaderHook, FormatHook, HookRunner
from .ir import EmissionPlan
from .loader import load_query, load_schema
from .options import CodegenOptions
from .planner import OperationPlanner
from .query import QueryDocument, select_operations
from .schema import Schema

logger = logging.getLogger(__name__)


def default_hooks(options: CodegenOptions) -> HookRunner:
    """Hooks implied by the options: formatting first, then the header."""
    hooks = HookRunner()
    if options.format_output:
        hooks.add_post_hook(FormatHook(options.target_language))
    if options.header:
        hooks.add_post_hook(AddHeaderHook(options.header))
    return hooks


class CodeGenerator:
    """Generates target code for the operations of one query document.

    Args:
        schema: The schema the document is resolved against
        document: The query document
        options: Generation options
        hooks: Hooks to run; defaults to the ones implied by ``options``
        emitter: Emitter to render with; defaults to the one registered
            for ``options.target_language``
    """

    def __init__(
        self,
        schema: Schema,
        document: QueryDocument,
        options: CodegenOptions,
        hooks: HookRunner | None = None,
        emitter: Emitter | None = None,
        template_dir: str | None = None,
    ):
        self.schema = schema
        self.document = document
        self.options = options
        self.hooks = hooks if hooks is not None else default_hooks(options)
        self.emitter = emitter or get_emitter(options.target_language, options, template_dir)

    def plans(self) -> list[EmissionPlan]:
        planner = OperationPlanner(self.schema, self.document, self.options)
        operations = select_operations(self.document, self.options)
        logger.debug("Generating operations: %s", ", ".join(op.name for op in operations))
        return [self.hooks.run_pre_hooks(planner.plan(operation)) for operation in operations]

    def render(self, query_stem: str = "query") -> dict[str, str]:
        """Render all selected operations, keyed by output file name."""
        rendered = [(plan, self.emitter.emit(plan)) for plan in self.plans()]
        files = self.emitter.layout(rendered, query_stem)
        return {
            filename: self.hooks.run_post_hooks(filename, content)
            for filename, content in files.items()
        }

    def generate(self, query_stem: str = "query") -> list[Path]:
        """Render and write files into ``options.output_directory``."""
        if self.options.output_directory is None:
            raise ConfigError("No output directory configured")
        output_dir = Path(self.options.output_directory)
        output_dir.mkdir(parents=True, exist_ok=True)

        written = []
        for filename, content in self.render(query_stem).items():
            path = output_dir / filename
            path.write_text(content, encoding="utf-8")
            logger.debug("Wrote %s", path)
            written.append(path)
        return written


def load_generator(
    schema_path: str | Path,
    query_path: str | Path,
    options: CodegenOptions,
    schema_cache: DocumentCache | None = None,
    query_cache: DocumentCache | None = None,
    hooks: HookRunner | None = None,
) -> CodeGenerator:
    """Load a schema and a query file through the caches into a generator."""
    schema = load_schema(schema_path, schema_cache)
    source, ast = load_query(query_path, query_cache)
    document = QueryDocument.from_ast(ast, source)
    return CodeGenerator(schema, document, options, hooks=hooks)


def generate_module(
    schema_path: str | Path,
    query_path: str | Path,
    options: CodegenOptions,
    schema_cache: DocumentCache | None = None,
    query_cache: DocumentCache | None = None,
    hooks: HookRunner | None = None,
) -> dict[str, str]:
    """Load a schema and a query file and return the rendered files."""
    generator = load_generator(schema_path, query_path, options, schema_cache, query_cache, hooks)
    return generator.render(Path(query_path).stem)
