"""Generation hooks.

A hook is any object with a `pre_generate(schema)` method, which may rewrite
the schema graph before generation, and/or a `post_generate(filename, content)`
method, which transforms a generated module before it is written.

    runner = HookRunner([AddHeaderHook("// Generated by gql-tsgen, do not edit")])
    content = runner.run_post_hooks("schema_gqlc.ts", content)
"""

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from .ir import Schema

logger = logging.getLogger(__name__)


@runtime_checkable
class PreGenerateHook(Protocol):
    """Receives the resolved schema graph once, before any module is rendered.

    Example:
        class DropInternalTypes:
            def pre_generate(self, schema: Schema) -> Schema:
                schema.types = {
                    name: t for name, t in schema.types.items() if not name.startswith("_")
                }
                return schema
    """

    def pre_generate(self, schema: Schema) -> Schema:
        ...


@runtime_checkable
class PostGenerateHook(Protocol):
    """Receives each rendered module and returns the text to write."""

    def post_generate(self, filename: str, content: str) -> str:
        ...


class AddHeaderHook:
    """Prepends a header (e.g. a licence or "do not edit" banner) to every module."""

    def __init__(self, header: str):
        self.header = header.rstrip("\n")

    def post_generate(self, _filename: str, content: str) -> str:
        return f"{self.header}\n\n{content}"


class HookRunner:
    """Runs registered hooks in registration order.

    Args:
        hooks: Initial hooks; each is registered under every protocol it implements
    """

    def __init__(self, hooks: Iterable[object] = ()):
        self.pre_hooks: list[PreGenerateHook] = []
        self.post_hooks: list[PostGenerateHook] = []
        for hook in hooks:
            self.add(hook)

    def add(self, hook: object):
        """Register a hook.

        Raises:
            TypeError: If the object implements neither hook method.
        """
        registered = False
        if isinstance(hook, PreGenerateHook):
            self.pre_hooks.append(hook)
            registered = True
        if isinstance(hook, PostGenerateHook):
            self.post_hooks.append(hook)
            registered = True
        if not registered:
            raise TypeError(
                f"{type(hook).__name__} defines neither pre_generate nor post_generate"
            )

    def copy(self) -> "HookRunner":
        """A runner with the same hooks; registering on it leaves this one unchanged."""
        runner = HookRunner()
        runner.pre_hooks = list(self.pre_hooks)
        runner.post_hooks = list(self.post_hooks)
        return runner

    def run_pre_hooks(self, schema: Schema) -> Schema:
        for hook in self.pre_hooks:
            logger.debug("Running pre-generate hook %s", type(hook).__name__)
            schema = hook.pre_generate(schema)
        return schema

    def run_post_hooks(self, filename: str, content: str) -> str:
        for hook in self.post_hooks:
            logger.debug("Running post-generate hook %s on %s", type(hook).__name__, filename)
            content = hook.post_generate(filename, content)
        return content
