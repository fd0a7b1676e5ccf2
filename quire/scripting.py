"""
Scoped evaluation of page templates, front matter and site scripts.

Every evaluation runs against an EvaluationContext holding a stack of
variable scopes and a stack of source files. Whatever an operation pushes
is popped again before it returns, whether the template succeeded, failed
with an evaluation fault or raised something unexpected.
"""

import contextlib
import enum
import io
import logging
import os
from typing import Any, List, Optional, Tuple

from .diagnostics import Diagnostics, SourceSpan
from .engine import EvaluationFault, ParsedScript, ScriptMode, TemplateEngine, exported_variables
from .frontmatter import FrontMatter, default_parsers
from .includes import FromIncludesResolver, IncludeResolver, UnauthorizedIncludeResolver
from .objects import PAGE_VARIABLE, SITE_VARIABLE, DynamicObject, ScriptObject

# Path used for scripts given as a bare statement
SCRIPT_STATEMENT_PATH = '__script__'


class ScriptFlags(enum.Flag):
    NONE = 0
    # The script file must exist
    EXPECT = enum.auto()
    # Expose the site functions scope, includes are not allowed
    ALLOW_SITE_FUNCTIONS = enum.auto()


def _scope_of(obj) -> ScriptObject:
    if isinstance(obj, DynamicObject):
        return obj.variables
    return obj


class EvaluationContext:
    """Scope stack, source file stack and output buffer of one evaluation run."""

    def __init__(self, builtins: ScriptObject = None):
        self.globals: List[ScriptObject] = [builtins if builtins is not None else ScriptObject()]
        self.source_files: List[str] = []
        self.output = io.StringIO()
        self.enable_output = True
        self.include_resolver: Optional[IncludeResolver] = None

    @property
    def current_global(self) -> ScriptObject:
        return self.globals[-1]

    @property
    def current_source_file(self) -> Optional[str]:
        return self.source_files[-1] if self.source_files else None

    def current_span(self) -> SourceSpan:
        return SourceSpan(self.current_source_file)

    def push_global(self, scope):
        if scope is None:
            raise ValueError("scope must not be None")
        self.globals.append(_scope_of(scope))

    def pop_global(self) -> ScriptObject:
        if len(self.globals) == 1:
            raise RuntimeError("Cannot pop the builtins scope")
        return self.globals.pop()

    def push_source_file(self, path: str):
        if path is None:
            raise ValueError("path must not be None")
        self.source_files.append(str(path))

    def pop_source_file(self) -> str:
        return self.source_files.pop()

    @contextlib.contextmanager
    def scoped_global(self, scope):
        self.push_global(scope)
        try:
            yield self.current_global
        finally:
            self.pop_global()

    @contextlib.contextmanager
    def scoped_source_file(self, path: str):
        self.push_source_file(path)
        try:
            yield path
        finally:
            self.pop_source_file()

    @contextlib.contextmanager
    def configured(self, enable_output: bool, include_resolver: Optional[IncludeResolver]):
        previous = self.enable_output, self.include_resolver
        self.enable_output = enable_output
        self.include_resolver = include_resolver
        try:
            yield self
        finally:
            self.enable_output, self.include_resolver = previous

    @contextlib.contextmanager
    def captured_output(self):
        previous = self.output
        self.output = io.StringIO()
        try:
            yield self.output
        finally:
            self.output = previous

    def write(self, text: str):
        self.output.write(text)

    def flatten(self) -> dict:
        """Visible variables, innermost scope first to resolve."""
        merged = {}
        for scope in self.globals:
            merged.update(scope)
        return merged


@contextlib.contextmanager
def bound_variables(scope: ScriptObject, values: dict):
    """Bind read-only variables into ``scope`` and always remove them afterwards."""
    for name, value in values.items():
        scope.set_value(name, value, read_only=True)
    try:
        yield scope
    finally:
        for name in values:
            scope.remove(name)


def site_functions(plugin) -> ScriptObject:
    """Functions only reachable from imported site scripts, not from pages."""
    functions = ScriptObject()

    def _span():
        return SourceSpan(plugin.active_source_file)

    def log_info(text):
        plugin.diagnostics.info(str(text), _span())
        return ''

    def log_warning(text):
        plugin.diagnostics.warning(str(text), _span())
        return ''

    def log_error(text):
        plugin.diagnostics.error(str(text), _span())
        return ''

    functions.set_value('log_info', log_info, read_only=True)
    functions.set_value('log_warning', log_warning, read_only=True)
    functions.set_value('log_error', log_error, read_only=True)
    return functions


class ScriptingPlugin:
    """Parses and evaluates scripts on behalf of a site."""

    def __init__(self, site, engine: TemplateEngine = None):
        self.site = site
        self.engine = engine or TemplateEngine()
        self.builtins = ScriptObject()
        self.front_matter_parsers = default_parsers()
        self.site_functions = site_functions(self)
        self.logger = logging.getLogger('Quire')
        self._active_context: Optional[EvaluationContext] = None

    @property
    def diagnostics(self) -> Diagnostics:
        return self.site.diagnostics

    @property
    def active_source_file(self) -> Optional[str]:
        if self._active_context is None:
            return None
        return self._active_context.current_source_file

    def new_context(self) -> EvaluationContext:
        return EvaluationContext(self.builtins)

    def includes_resolver(self, context: EvaluationContext) -> FromIncludesResolver:
        return FromIncludesResolver(self.site.include_roots, self.diagnostics, context)

    def parse_script(self, script_content: str, script_path: str, parsing_mode: ScriptMode) -> ParsedScript:
        """
        Parse a script with the specified content and path.

        Syntax errors are recorded in the site diagnostics and reported
        through ``has_errors`` on the result, they are never raised.
        """
        if script_content is None:
            raise ValueError("script_content must not be None")
        if script_path is None:
            raise ValueError("script_path must not be None")
        script_path = str(script_path)

        front_matter = None
        start_position = 0
        if parsing_mode is ScriptMode.FRONT_MATTER_AND_CONTENT:
            if len(script_content) > 3:
                parser = self.front_matter_parsers.find(script_content[:3])
                if parser is not None:
                    front_matter, start_position = parser.try_parse(script_content, script_path, self.diagnostics)
            parsing_mode = ScriptMode.DEFAULT

        script = self.engine.parse(script_content, script_path, parsing_mode, start_position)
        script.front_matter = front_matter
        for message in script.messages:
            self.diagnostics.record(message)
        return script

    def try_import_script(self, script_text: str, script_path: str, script_object,
                          flags: ScriptFlags = ScriptFlags.NONE,
                          context: EvaluationContext = None) -> Tuple[bool, Any]:
        """
        Evaluate a script for its side effects on ``script_object``.

        Top-level variables and macros the script defines are written into
        ``script_object``. Returns (success, template module).
        """
        if script_text is None:
            raise ValueError("script_text must not be None")
        if script_path is None:
            raise ValueError("script_path must not be None")
        if script_object is None:
            raise ValueError("script_object must not be None")

        script = self.parse_script(script_text, script_path, ScriptMode.SCRIPT_ONLY)
        if script.has_errors:
            return False, None

        context = context or self.new_context()
        allow_site_functions = ScriptFlags.ALLOW_SITE_FUNCTIONS in flags
        if allow_site_functions:
            resolver = UnauthorizedIncludeResolver(self.diagnostics, context)
        else:
            resolver = self.includes_resolver(context)

        with contextlib.ExitStack() as scopes:
            if allow_site_functions:
                scopes.enter_context(context.scoped_global(self.site_functions))
            target = scopes.enter_context(context.scoped_global(script_object))
            scopes.enter_context(context.scoped_source_file(script.path))
            scopes.enter_context(context.configured(False, resolver))
            scopes.enter_context(self._activated(context))
            try:
                module = self.engine.evaluate(script.template, context)
            except EvaluationFault as fault:
                self.log_fault(fault)
                return False, None
            target.import_values(exported_variables(module))
        return True, module

    def try_import_script_statement(self, script_statement: str, script_object,
                                    flags: ScriptFlags = ScriptFlags.NONE,
                                    context: EvaluationContext = None) -> Tuple[bool, Any]:
        if script_statement is None:
            raise ValueError("script_statement must not be None")
        return self.try_import_script(script_statement, SCRIPT_STATEMENT_PATH, script_object, flags, context)

    def try_import_script_from_file(self, script_path: str, script_object,
                                    flags: ScriptFlags = ScriptFlags.NONE,
                                    context: EvaluationContext = None) -> Tuple[bool, Any]:
        if script_path is None:
            raise ValueError("script_path must not be None")
        if script_object is None:
            raise ValueError("script_object must not be None")

        if not os.path.isfile(script_path):
            if ScriptFlags.EXPECT in flags:
                self.diagnostics.error(f"Script file [{script_path}] does not exist")
                return False, None
            return True, None

        with open(script_path, 'r', encoding='utf-8') as f:
            script_text = f.read()
        return self.try_import_script(script_text, script_path, script_object, flags, context)

    def try_run_front_matter(self, front_matter: FrontMatter, page) -> bool:
        """Assign the front matter variables into the page's own variables."""
        if front_matter is None:
            raise ValueError("front_matter must not be None")
        if page is None:
            raise ValueError("page must not be None")

        context = self.new_context()
        with contextlib.ExitStack() as scopes:
            scope = scopes.enter_context(context.scoped_global(page))
            scopes.enter_context(context.scoped_source_file(page.source_file))
            scopes.enter_context(context.configured(False, self.includes_resolver(context)))
            scopes.enter_context(bound_variables(scope, {SITE_VARIABLE: self.site}))
            try:
                front_matter.evaluate(context)
            except EvaluationFault as fault:
                self.log_fault(fault)
                return False
        return True

    def try_evaluate(self, page, script, script_path: str, script_object: ScriptObject = None,
                     context: EvaluationContext = None) -> bool:
        """
        Render ``script`` for ``page``.

        ``site`` and ``page`` are visible to the template for the duration of
        the call. On success the output becomes the page content and the
        includes that were loaded become page dependencies.
        """
        if page is None:
            raise ValueError("page must not be None")
        if script is None:
            raise ValueError("script must not be None")
        if script_path is None:
            raise ValueError("script_path must not be None")

        template = script.template if isinstance(script, ParsedScript) else script
        if template is None:
            return False

        context = context or self.new_context()
        resolver = self.includes_resolver(context)
        with contextlib.ExitStack() as scopes:
            if script_object is not None:
                scopes.enter_context(context.scoped_global(script_object))
            scopes.enter_context(context.scoped_source_file(script_path))
            scopes.enter_context(context.configured(True, resolver))
            scopes.enter_context(bound_variables(context.current_global,
                                                 {SITE_VARIABLE: self.site, PAGE_VARIABLE: page}))
            output = scopes.enter_context(context.captured_output())
            scopes.enter_context(self._activated(context))
            try:
                self.engine.evaluate(template, context)
            except EvaluationFault as fault:
                self.log_fault(fault)
                return False
            page.dependencies.update(resolver.include_files)
            page.content = output.getvalue()
            self.logger.debug(f"Evaluated {script_path} with {len(resolver.include_files)} include(s)")
        return True

    @contextlib.contextmanager
    def _activated(self, context: EvaluationContext):
        previous = self._active_context
        self._active_context = context
        try:
            yield context
        finally:
            self._active_context = previous

    def log_fault(self, fault: EvaluationFault):
        self.diagnostics.error(fault.reason, fault.span)
        for message in fault.parser_messages:
            self.diagnostics.record(message)
