"""Generation hooks.

A pre-generate hook is any callable ``(IRSchema) -> IRSchema`` run before
rendering; a post-generate hook is any callable ``(filename, content) ->
content`` run on each file before it is written. ``HookRunner.from_settings``
builds the hooks the ``file_header`` and ``exclude_types`` settings ask for.
"""

from collections.abc import Callable, Iterable
from fnmatch import fnmatchcase

from loguru import logger

from .ir import IRSchema

PreGenerateHook = Callable[[IRSchema], IRSchema]
PostGenerateHook = Callable[[str, str], str]


class AddHeaderHook:
    """Prepend a comment block to every generated Python module."""

    def __init__(self, header: str):
        lines = header.strip("\n").splitlines()
        self.header = "\n".join(line if line.startswith("#") else f"# {line}" for line in lines)

    def __call__(self, filename: str, content: str) -> str:
        if not filename.endswith(".py"):
            return content
        return f"{self.header}\n\n{content}"


class FilterTypesHook:
    """Drop named types matching any of the glob patterns, e.g. ``Internal*``.

    Operations are kept; references to a dropped type become ``Any``.
    """

    def __init__(self, exclude: Iterable[str]):
        self.exclude = list(exclude)

    def _excluded(self, name: str) -> bool:
        return any(fnmatchcase(name, pattern) for pattern in self.exclude)

    def __call__(self, ir: IRSchema) -> IRSchema:
        for attr in ("types", "inputs", "interfaces", "unions", "enums"):
            table = getattr(ir, attr)
            dropped = [name for name in table if self._excluded(name)]
            for name in dropped:
                del table[name]
            if dropped:
                logger.debug(f"Excluded {attr}: {', '.join(dropped)}")
        return ir


class HookRunner:
    def __init__(
        self,
        pre_hooks: Iterable[PreGenerateHook] = (),
        post_hooks: Iterable[PostGenerateHook] = (),
    ):
        self.pre_hooks = list(pre_hooks)
        self.post_hooks = list(post_hooks)

    @classmethod
    def from_settings(cls, settings) -> "HookRunner":
        runner = cls()
        if settings.exclude_types:
            runner.pre_hooks.append(FilterTypesHook(settings.exclude_types))
        if settings.file_header:
            runner.post_hooks.append(AddHeaderHook(settings.file_header))
        return runner

    def run_pre_hooks(self, ir: IRSchema) -> IRSchema:
        for hook in self.pre_hooks:
            ir = hook(ir)
        return ir

    def run_post_hooks(self, filename: str, content: str) -> str:
        for hook in self.post_hooks:
            content = hook(filename, content)
        return content
