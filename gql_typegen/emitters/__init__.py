"""Target-language emitters.

An emitter renders :class:`~gql_typegen.core.ir.EmissionPlan`s to source
text. Emitters are looked up by :class:`~gql_typegen.core.options.TargetLanguage`.

Supports custom templates via the ``template_dir`` parameter. Template
lookup order:

1. User's template directory (if provided)
2. Package default templates
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from ..core.errors import ConfigError
from ..core.ir import EmissionPlan
from ..core.options import CodegenOptions, TargetLanguage


@runtime_checkable
class Emitter(Protocol):
    target: TargetLanguage
    extension: str

    def emit(self, plan: EmissionPlan) -> str:
        """Render one operation."""
        ...

    def layout(self, rendered: list[tuple[EmissionPlan, str]], query_stem: str) -> dict[str, str]:
        """Arrange rendered operations into files, keyed by file name."""
        ...


def safe_docstring(text: str | None) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


def safe_comment(text: str | None) -> str:
    """Make text safe for a single-line comment."""
    if not text:
        return ""
    return " ".join(text.split())


def make_environment(template_dir: str | Path | None = None) -> Environment:
    """Build the Jinja2 environment; templates in template_dir take precedence."""
    loaders = []
    if template_dir:
        template_path = Path(template_dir)
        if template_path.is_dir():
            loaders.append(FileSystemLoader(str(template_path)))
    loaders.append(PackageLoader("gql_typegen", "templates"))

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["safe_docstring"] = safe_docstring
    env.filters["safe_comment"] = safe_comment
    return env


def get_emitter(
    target: TargetLanguage,
    options: CodegenOptions,
    template_dir: str | Path | None = None,
) -> Emitter:
    from .python import PythonEmitter
    from .rust import RustEmitter

    emitters = {
        TargetLanguage.PYTHON: PythonEmitter,
        TargetLanguage.RUST: RustEmitter,
    }
    try:
        emitter_class = emitters[target]
    except KeyError:
        raise ConfigError(f"No emitter for target {target!r}") from None
    return emitter_class(options, env=make_environment(template_dir))
