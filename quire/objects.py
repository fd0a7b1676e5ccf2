"""Variable scopes and the content records produced by a load."""

import enum
import os
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Optional, Set

# Names under which the site and the current page are visible to templates
SITE_VARIABLE = 'site'
PAGE_VARIABLE = 'page'


class ScriptObject(dict):
    """
    Ordered mapping of variable names to values, used as one scope of the
    evaluation stack. Values are plain Python values: str, numbers, bool,
    lists, nested mappings or any object.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._read_only = set()

    def set_value(self, name: str, value: Any, read_only: bool = False):
        self[name] = value
        if read_only:
            self._read_only.add(name)
        else:
            self._read_only.discard(name)

    def is_read_only(self, name: str) -> bool:
        return name in self._read_only

    def remove(self, name: str) -> bool:
        self._read_only.discard(name)
        return self.pop(name, _MISSING) is not _MISSING

    def import_values(self, values):
        """Copy values into this scope, leaving read-only names untouched."""
        for name, value in values.items():
            if name not in self._read_only:
                self[name] = value


_MISSING = object()


class DynamicObject:
    """
    An object whose variables are visible from templates as attributes,
    e.g. ``page.title``. Jinja2 falls back to item lookup, which lands here.
    """

    def __init__(self):
        self.variables = ScriptObject()

    def __getitem__(self, name):
        return self.variables[name]

    def __contains__(self, name):
        return name in self.variables

    def get(self, name, default=None):
        return self.variables.get(name, default)

    def set_value(self, name: str, value: Any, read_only: bool = False):
        self.variables.set_value(name, value, read_only)

    def remove(self, name: str) -> bool:
        return self.variables.remove(name)


class ContentKind(enum.Enum):
    STATIC = 'static'
    TEMPLATED = 'templated'


@dataclass(frozen=True)
class IncludeDependency:
    """A page's reference to an include file it consumed."""
    path: str

    def __str__(self):
        return self.path


def normalize_relative_path(root_directory: str, file_path: str) -> str:
    relative = os.path.relpath(file_path, root_directory)
    return PurePosixPath(*relative.split(os.sep)).as_posix()


class ContentObject(DynamicObject):
    """One file discovered under a content root."""

    def __init__(self, root_directory: str, source_file: str, kind: ContentKind = ContentKind.STATIC):
        super().__init__()
        self.root_directory = root_directory
        self.source_file = source_file
        self.path = normalize_relative_path(root_directory, source_file)
        self.kind = kind
        self.front_matter = None
        self.script = None
        self.dependencies: Set[IncludeDependency] = set()
        self.summary: Optional[str] = None
        self._content: Optional[str] = None

    @property
    def is_static(self) -> bool:
        return self.kind is ContentKind.STATIC

    @property
    def content(self) -> Optional[str]:
        # Static files are only read when someone asks for their text
        if self._content is None and self.kind is ContentKind.STATIC:
            with open(self.source_file, 'r', encoding='utf-8', errors='replace') as f:
                self._content = f.read()
        return self._content

    @content.setter
    def content(self, value: Optional[str]):
        self._content = value

    @property
    def url(self) -> str:
        return '/' + self.path

    def sort_key(self):
        parts = PurePosixPath(self.path).parts
        return tuple(part.casefold() for part in parts), self.path

    def __repr__(self):
        return f"<ContentObject {self.kind.value} {self.path!r}>"
