"""Generation options."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import ConfigError


class _ParsableEnum(Enum):
    @classmethod
    def parse(cls, value: str):
        """Case-insensitive lookup by value, e.g. ``DeprecationStrategy.parse("Warn")``."""
        for member in cls:
            if member.value == value.strip().lower():
                return member
        choices = ", ".join(member.value for member in cls)
        raise ConfigError(f"Invalid {cls.__name__} {value!r}. Expected one of: {choices}")


class DeprecationStrategy(_ParsableEnum):
    """What to do with selected fields the schema marks as deprecated."""
    ALLOW = "allow"
    WARN = "warn"
    DENY = "deny"


class TargetLanguage(_ParsableEnum):
    PYTHON = "python"
    RUST = "rust"


class CodegenMode(Enum):
    # Generate every operation in the document unless one is selected.
    CLI = "cli"
    # Generate exactly one operation.
    LIBRARY = "library"


@dataclass
class CodegenOptions:
    selected_operation_name: str | None = None
    additional_response_derives: list[str] = field(default_factory=list)
    deprecation_strategy: DeprecationStrategy = DeprecationStrategy.WARN
    module_visibility: str = "pub"
    target_language: TargetLanguage = TargetLanguage.PYTHON
    format_output: bool = True
    output_directory: Path | None = None
    mode: CodegenMode = CodegenMode.LIBRARY
    header: str | None = None

    def set_additional_derives(self, derives: str):
        """Parse a comma-separated derive list, e.g. ``"PartialEq, Debug"``."""
        self.additional_response_derives = [d.strip() for d in derives.split(",") if d.strip()]

    def all_response_derives(self) -> list[str]:
        derives = ["Deserialize"]
        for derive in self.additional_response_derives:
            if derive not in derives:
                derives.append(derive)
        return derives
