"""Generation hooks for customizing code generation.

Provides protocols for pre- and post-generation hooks that can modify
an emission plan before rendering or transform the rendered code after.

Example usage:
    from gql_typegen.core.hooks import PreGenerateHook, PostGenerateHook

    # Pre-generation hook to drop descriptions
    class StripDescriptions(PreGenerateHook):
        def pre_generate(self, plan):
            for struct in plan.structs:
                for field in struct.fields:
                    field.description = None
            return plan

    # Post-generation hook to add headers
    class AddLicenseHeader(PostGenerateHook):
        def post_generate(self, filename, content):
            header = "# Copyright 2024 My Company\\n\\n"
            return header + content
"""

import logging
import shutil
import subprocess
from typing import Protocol, runtime_checkable

from .errors import EmitterError
from .ir import EmissionPlan
from .options import TargetLanguage

logger = logging.getLogger(__name__)


@runtime_checkable
class PreGenerateHook(Protocol):
    """Protocol for pre-generation hooks.

    Pre-generation hooks receive the emission plan of one operation before
    it is rendered and can modify it. The returned plan is rendered.
    """

    def pre_generate(self, plan: EmissionPlan) -> EmissionPlan:
        """Called before rendering.

        Args:
            plan: The emission plan of one operation

        Returns:
            The (possibly modified) plan to render
        """
        ...


@runtime_checkable
class PostGenerateHook(Protocol):
    """Protocol for post-generation hooks.

    Post-generation hooks receive the generated code for each file
    and can transform it before it's written to disk.
    """

    def post_generate(self, filename: str, content: str) -> str:
        """Called after code generation for each file.

        Args:
            filename: The name of the generated file (e.g., "my_query.py")
            content: The generated code content

        Returns:
            The (possibly transformed) code to write
        """
        ...


class AddHeaderHook:
    """Built-in hook to add a header to generated files.

    Example:
        hook = AddHeaderHook("# Auto-generated - do not edit")
    """

    def __init__(self, header: str):
        self.header = header

    def post_generate(self, _filename: str, content: str) -> str:
        """Add a header to the beginning of the file."""
        if not self.header.endswith("\n"):
            header = self.header + "\n\n"
        else:
            header = self.header + "\n"
        return header + content


FORMATTERS = {
    TargetLanguage.PYTHON: ["ruff", "format", "-"],
    TargetLanguage.RUST: ["rustfmt", "--emit", "stdout", "--edition", "2021"],
}


class FormatHook:
    """Built-in hook that pipes generated code through an external formatter.

    If the formatter is not installed the content is returned unchanged and
    a warning is logged.
    """

    def __init__(self, target: TargetLanguage, command: list[str] | None = None):
        self.target = target
        self.command = command or FORMATTERS[target]

    def post_generate(self, filename: str, content: str) -> str:
        if shutil.which(self.command[0]) is None:
            logger.warning("%s not found, leaving %s unformatted", self.command[0], filename)
            return content

        result = subprocess.run(
            self.command,
            input=content,
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise EmitterError(f"{self.command[0]} failed on {filename}: {result.stderr.strip()}")
        return result.stdout


class HookRunner:
    """Runs a collection of hooks in order."""

    def __init__(self):
        self.pre_hooks: list[PreGenerateHook] = []
        self.post_hooks: list[PostGenerateHook] = []

    def add_pre_hook(self, hook: PreGenerateHook):
        """Add a pre-generation hook."""
        self.pre_hooks.append(hook)

    def add_post_hook(self, hook: PostGenerateHook):
        """Add a post-generation hook."""
        self.post_hooks.append(hook)

    def run_pre_hooks(self, plan: EmissionPlan) -> EmissionPlan:
        """Run all pre-generation hooks in order."""
        for hook in self.pre_hooks:
            plan = hook.pre_generate(plan)
        return plan

    def run_post_hooks(self, filename: str, content: str) -> str:
        """Run all post-generation hooks in order."""
        for hook in self.post_hooks:
            content = hook.post_generate(filename, content)
        return content
