"""
Front matter parsers.

A front matter block is delimited by a marker line at the very start of a
file and a matching closing marker line. Parsers are kept in an ordered
registry; the first one that recognizes the header handles the file.
"""

import re
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml

from .diagnostics import Diagnostics, SourceSpan


@dataclass
class FrontMatter:
    marker: str
    bindings: Dict[str, Any] = field(default_factory=dict)
    # Character offset right after the closing marker line
    position: int = 0

    def evaluate(self, context):
        """Assign the front matter variables into the current scope of ``context``."""
        context.current_global.import_values(self.bindings)


class FrontMatterParser:
    """Base class for a delimited front matter format."""

    marker = None
    name = None

    def can_handle(self, header: str) -> bool:
        return header[:len(self.marker)] == self.marker

    def try_parse(self, text: str, source_path: str, diagnostics: Diagnostics) -> Tuple[Optional[FrontMatter], int]:
        block = self.split(text)
        if block is None:
            diagnostics.error(f"Missing closing front matter marker [{self.marker}]",
                              SourceSpan(source_path, 1, 1))
            return None, 0
        raw, position, first_line = block
        try:
            bindings = self.load(raw)
        except ValueError as e:
            diagnostics.error(f"Invalid {self.name} front matter: {e}", SourceSpan(source_path, first_line, 1))
            return None, 0
        if bindings is None:
            bindings = {}
        if not isinstance(bindings, dict):
            diagnostics.error(f"Front matter must be a mapping, not {type(bindings).__name__}",
                              SourceSpan(source_path, first_line, 1))
            return None, 0
        return FrontMatter(self.marker, bindings, position), position

    def split(self, text: str):
        """Return (raw block, position after closing marker, first block line) or None."""
        pattern = re.compile(r'^%s[ \t]*\r?$' % re.escape(self.marker), re.MULTILINE)
        opening = pattern.match(text)
        if opening is None:
            return None
        body_start = opening.end()
        if not text.startswith('\n', body_start):
            return None
        body_start += 1
        closing = pattern.search(text, body_start)
        if closing is None:
            return None
        position = closing.end()
        if text.startswith('\n', position):
            position += 1
        return text[body_start:closing.start()], position, 2

    def load(self, raw: str):
        raise NotImplementedError


class TomlFrontMatterParser(FrontMatterParser):
    """``+++`` delimited TOML front matter."""

    marker = '+++'
    name = 'TOML'

    def load(self, raw: str):
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(str(e))


class YamlFrontMatterParser(FrontMatterParser):
    """``---`` delimited YAML front matter."""

    marker = '---'
    name = 'YAML'

    def load(self, raw: str):
        try:
            return yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ValueError(str(e))


class FrontMatterParsers:
    """Ordered registry of front matter parsers."""

    def __init__(self, parsers=None):
        self._parsers: List[FrontMatterParser] = list(parsers or [])

    def append(self, parser: FrontMatterParser):
        self._parsers.append(parser)

    def insert(self, index: int, parser: FrontMatterParser):
        self._parsers.insert(index, parser)

    def remove(self, parser: FrontMatterParser):
        self._parsers.remove(parser)

    def find(self, header: str) -> Optional[FrontMatterParser]:
        for parser in self._parsers:
            if parser.can_handle(header):
                return parser
        return None

    def __iter__(self) -> Iterator[FrontMatterParser]:
        return iter(self._parsers)

    def __len__(self):
        return len(self._parsers)


def default_parsers() -> FrontMatterParsers:
    return FrontMatterParsers([TomlFrontMatterParser(), YamlFrontMatterParser()])
