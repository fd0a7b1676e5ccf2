"""
Quire - content discovery and templated page evaluation.

Quire walks a site's content roots, tells static files from Jinja2 templated
pages, extracts their front matter and evaluates them with sandboxed
includes, recording which include files each page depends on.
"""

__version__ = "1.0.0"

from .diagnostics import Diagnostics, Message, Severity, SourceSpan
from .objects import ContentKind, ContentObject, IncludeDependency, ScriptObject
from .scripting import EvaluationContext, ScriptFlags, ScriptingPlugin
from .site import SiteObject

__all__ = [
    'ContentKind', 'ContentObject', 'Diagnostics', 'EvaluationContext', 'IncludeDependency',
    'Message', 'ScriptFlags', 'ScriptObject', 'ScriptingPlugin', 'Severity', 'SiteObject', 'SourceSpan',
]
