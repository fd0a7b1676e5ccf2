"""
Include resolvers.

Templates may include fragments by name. Which fragments are reachable
depends on the resolver the evaluator installs: scripts that run with site
functions may not include anything, pages may include files from the
``includes`` folder of the meta directories.
"""

import os
from typing import List, Optional, Sequence, Set

from jinja2 import TemplateNotFound

from .diagnostics import Diagnostics, SourceSpan
from .objects import IncludeDependency

INCLUDES_DIRECTORY_NAME = 'includes'


class IncludeResolver:
    """Maps include names to paths and loads their text."""

    def __init__(self, diagnostics: Diagnostics, context=None):
        self.diagnostics = diagnostics
        self.context = context

    def caller_span(self) -> SourceSpan:
        if self.context is not None:
            return self.context.current_span()
        return SourceSpan()

    def resolve(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def load(self, path: str) -> str:
        raise NotImplementedError


class UnauthorizedIncludeResolver(IncludeResolver):
    """Rejects every include."""

    def resolve(self, name: str) -> Optional[str]:
        self.diagnostics.error(
            f"The include statement is not allowed from this context. The include [{name}] cannot be loaded",
            self.caller_span())
        return None

    def load(self, path: str) -> str:
        raise TemplateNotFound(path)


def is_unsafe_include_name(name: str) -> bool:
    return '..' in name or name.startswith('/') or name.startswith('\\')


class FromIncludesResolver(IncludeResolver):
    """
    Resolves includes under ``<meta>/includes`` and remembers every file
    loaded, so pages can be rebuilt when one of them changes.
    """

    def __init__(self, include_roots: Sequence[str], diagnostics: Diagnostics, context=None):
        super().__init__(diagnostics, context)
        if not include_roots:
            raise ValueError("At least one include root is required")
        self.include_roots: List[str] = list(include_roots)
        self.include_files: Set[IncludeDependency] = set()

    def resolve(self, name: str) -> Optional[str]:
        name = name.strip()
        if is_unsafe_include_name(name):
            self.diagnostics.error(
                f"The include [{name}] cannot contain '..' or start with '/' or '\\'",
                self.caller_span())
            return None
        relative = os.path.join(*name.replace('\\', '/').split('/'))
        for root in self.include_roots:
            candidate = os.path.join(root, relative)
            if os.path.isfile(candidate):
                return candidate
        return os.path.join(self.include_roots[0], relative)

    def load(self, path: str) -> str:
        if not os.path.isfile(path):
            raise TemplateNotFound(path)
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
        self.include_files.add(IncludeDependency(os.path.abspath(path)))
        return text
