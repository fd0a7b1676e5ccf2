"""
Jinja2 facade used to parse and evaluate page and script templates.

Only two operations are exposed: ``parse`` turns text into a ParsedScript and
never raises for syntax problems, ``evaluate`` renders a parsed template
against an evaluation context and raises EvaluationFault for template level
failures.
"""

import enum
import traceback
from dataclasses import dataclass, field
from typing import List

from jinja2 import BaseLoader, Environment, TemplateError, TemplateSyntaxError
from jinja2.runtime import Undefined

from .diagnostics import Message, Severity, SourceSpan


class ScriptMode(enum.Enum):
    DEFAULT = 'default'
    FRONT_MATTER_AND_CONTENT = 'front_matter_and_content'
    SCRIPT_ONLY = 'script_only'


@dataclass
class ParsedScript:
    path: str
    has_errors: bool
    messages: List[Message] = field(default_factory=list)
    template: object = None
    front_matter: object = None


class EvaluationFault(Exception):
    """A template failed while being evaluated."""

    def __init__(self, span: SourceSpan, reason: str, parser_messages: List[Message] = None):
        super().__init__(reason)
        self.span = span
        self.reason = reason
        self.parser_messages = parser_messages or []

    def __str__(self):
        return f"{self.span}: {self.reason}" if str(self.span) else self.reason


# Python errors raised by template expressions, e.g. {{ 1 / 0 }}
EXPRESSION_ERRORS = (ArithmeticError, LookupError, TypeError, ValueError)


class ResolverLoader(BaseLoader):
    """Jinja2 loader delegating to whichever include resolver is active."""

    def __init__(self):
        self.resolver = None

    def get_source(self, environment, template):
        resolver = self.resolver
        if resolver is None:
            return '', None, lambda: False
        path = resolver.resolve(template)
        if path is None:
            # A rejected include expands to nothing
            return '', None, lambda: False
        return resolver.load(path), path, lambda: False


def syntax_messages(error: TemplateSyntaxError, default_path: str, line_offset: int = 0) -> List[Message]:
    path = error.filename or error.name or default_path
    line = (error.lineno or 0) + (line_offset if path == default_path else 0)
    return [Message(Severity.ERROR, SourceSpan(path, line), error.message or str(error))]


class TemplateEngine:
    """Parses and evaluates Jinja2 templates for the scripting layer."""

    def __init__(self, **environment_options):
        self.loader = ResolverLoader()
        options = {
            'autoescape': False,
            'cache_size': 0,
            'keep_trailing_newline': False,
            'undefined': Undefined,
        }
        options.update(environment_options)
        self.environment = Environment(loader=self.loader, **options)

    def parse(self, text: str, path: str, mode: ScriptMode = ScriptMode.DEFAULT, start_position: int = 0) -> ParsedScript:
        if text is None:
            raise ValueError("text must not be None")
        if path is None:
            raise ValueError("path must not be None")
        source = text[start_position:]
        line_offset = text.count('\n', 0, start_position)
        try:
            template = self.environment.from_string(source)
        except TemplateSyntaxError as e:
            return ParsedScript(path, True, syntax_messages(e, path, line_offset))
        template.name = path
        template.filename = path
        # Body lines consumed by front matter, for diagnostics
        template.line_offset = line_offset
        return ParsedScript(path, False, [], template)

    def evaluate(self, template, context):
        """
        Render ``template`` against the visible scopes of ``context``.

        The output is appended to the context when output is enabled. Returns
        the template module holding the top-level exported variables.
        """
        previous = self.loader.resolver
        self.loader.resolver = context.include_resolver
        try:
            module = template.make_module(context.flatten())
            if context.enable_output:
                context.write(str(module))
            return module
        except TemplateSyntaxError as e:
            span = context.current_span()
            raise EvaluationFault(span, f"Invalid template: {e.message}", syntax_messages(e, span.file)) from e
        except TemplateError as e:
            raise EvaluationFault(self._fault_span(e, template, context), str(e.message or e)) from e
        except EXPRESSION_ERRORS as e:
            raise EvaluationFault(self._fault_span(e, template, context), f"{type(e).__name__}: {e}") from e
        except RecursionError as e:
            raise EvaluationFault(self._fault_span(e, template, context), "Maximum include depth exceeded") from e
        except OSError as e:
            raise EvaluationFault(context.current_span(),
                                  f"Unable to read include '{e.filename or ''}': {e.strerror or e}") from e
        finally:
            self.loader.resolver = previous

    def _fault_span(self, error, template, context) -> SourceSpan:
        # The innermost frame of compiled template code gives the template line
        span = None
        for frame, lineno in traceback.walk_tb(error.__traceback__):
            owner = frame.f_globals.get('__jinja_template__')
            if owner is None:
                continue
            line = owner.get_corresponding_lineno(lineno) + getattr(owner, 'line_offset', 0)
            span = SourceSpan(owner.filename or template.filename, line)
        return span or context.current_span()


def exported_variables(module) -> dict:
    """Top-level ``{% set %}`` variables and macros exported by a template module."""
    return {name: value for name, value in vars(module).items() if not name.startswith('_')}
