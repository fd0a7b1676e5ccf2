"""
Diagnostic messages collected while loading and evaluating a site.

Every content or script problem becomes a Message recorded here instead of
an exception. Error and critical messages raise a sticky flag that the caller
reads once the whole pipeline has run.
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from .statistics import ContentStat, SiteStatistics


class Severity(enum.IntEnum):
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


@dataclass(frozen=True)
class SourceSpan:
    """A position in a source file. Line and column are 1-based, 0 when unknown."""
    file: Optional[str] = None
    line: int = 0
    column: int = 0

    def __str__(self):
        if not self.file:
            return ''
        if self.line and self.column:
            return f"{self.file}({self.line},{self.column})"
        if self.line:
            return f"{self.file}({self.line})"
        return self.file


@dataclass(frozen=True)
class Message:
    severity: Severity
    span: SourceSpan
    text: str

    def __str__(self):
        location = str(self.span)
        return f"{location}: {self.text}" if location else self.text


class Diagnostics:
    """Collects messages and per-item timings for a single build run."""

    def __init__(self, statistics: SiteStatistics = None, logger: logging.Logger = None):
        self.statistics = statistics or SiteStatistics()
        self.logger = logger or logging.getLogger('Quire')
        self.messages: List[Message] = []
        self._has_errors = False

    @property
    def has_errors(self) -> bool:
        """True once any error or critical message was recorded. Never reset."""
        return self._has_errors

    def record(self, message: Message) -> Message:
        self.messages.append(message)
        if message.severity >= Severity.ERROR:
            self._has_errors = True
        self.logger.log(int(message.severity), str(message))
        return message

    def info(self, text: str, span: SourceSpan = None) -> Message:
        return self.record(Message(Severity.INFO, span or SourceSpan(), text))

    def warning(self, text: str, span: SourceSpan = None) -> Message:
        return self.record(Message(Severity.WARNING, span or SourceSpan(), text))

    def error(self, text: str, span: SourceSpan = None) -> Message:
        return self.record(Message(Severity.ERROR, span or SourceSpan(), text))

    def critical(self, text: str, span: SourceSpan = None) -> Message:
        return self.record(Message(Severity.CRITICAL, span or SourceSpan(), text))

    def errors(self) -> List[Message]:
        return [m for m in self.messages if m.severity >= Severity.ERROR]

    def get_stats(self, item) -> ContentStat:
        return self.statistics.get_content_stat(item)

    def reset(self):
        """Start a new build cycle. The error flag stays set."""
        self.messages.clear()
        self.statistics.reset()
