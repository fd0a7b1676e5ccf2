"""
The site: settings, content roots and the objects that load them.
"""

import logging
import os
from typing import Any, Dict, List

from .diagnostics import Diagnostics
from .generator import SiteGenerator
from .includes import INCLUDES_DIRECTORY_NAME
from .loader import ContentLoader
from .objects import DynamicObject, ContentObject
from .scripting import ScriptFlags, ScriptingPlugin
from .settings import QuireSettings

META_DIRECTORY_NAME = '_meta'
DEFAULT_PAGE_EXTENSION = '.html'
VALID_PAGE_EXTENSIONS = ('.html', '.htm')

BUILTIN_DIRECTORY = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'builtin')


class SiteObject(DynamicObject):
    """A site rooted at the directory holding its configuration file."""

    def __init__(self, config_dir: str = None, settings: Dict[str, Any] = None, diagnostics: Diagnostics = None):
        super().__init__()
        settings_loader = QuireSettings(config_dir)
        if settings is None:
            self.settings = settings_loader.load_settings()
        else:
            self.settings = settings_loader.merge_with_args(settings)
        self.config_file = settings_loader.config_file_path
        self.base_directory = os.path.abspath(settings_loader.config_dir)
        self.logger = logging.getLogger('Quire')

        self.themes: List[str] = [self._site_path(theme) for theme in self.settings.get('themes') or []]
        builtin = self.settings.get('builtin')
        self.builtin_directory = self._site_path(builtin) if builtin else BUILTIN_DIRECTORY
        self.summary_words = int(self.settings.get('summary_words') or 30)
        self.default_page_extension = self.settings.get('default_page_extension') or DEFAULT_PAGE_EXTENSION
        self.output_directory = self._site_path(self.settings.get('output') or '_site')

        self.diagnostics = diagnostics or Diagnostics()
        self.statistics = self.diagnostics.statistics
        self.pages: List[ContentObject] = []
        self.static_files: List[ContentObject] = []

        self.scripts = ScriptingPlugin(self)
        self.generator = SiteGenerator(self)
        self.loader = ContentLoader(self)

    def _site_path(self, path: str) -> str:
        return os.path.abspath(os.path.join(self.base_directory, os.path.expanduser(path)))

    @property
    def has_errors(self) -> bool:
        return self.diagnostics.has_errors

    @property
    def content_directories(self) -> List[str]:
        """Site root, themes in priority order, builtin content last."""
        return [self.base_directory] + self.themes + [self.builtin_directory]

    @property
    def meta_directories(self) -> List[str]:
        return [os.path.join(directory, META_DIRECTORY_NAME) for directory in self.content_directories]

    @property
    def include_roots(self) -> List[str]:
        return [os.path.join(directory, INCLUDES_DIRECTORY_NAME) for directory in self.meta_directories]

    def get_safe_default_page_extension(self) -> str:
        extension = self.default_page_extension
        if extension in VALID_PAGE_EXTENSIONS:
            return extension
        self.diagnostics.warning(
            f"Invalid [default_page_extension = \"{extension}\"]. Expecting only .html or .htm. "
            f"Reset to [{DEFAULT_PAGE_EXTENSION}]")
        self.default_page_extension = DEFAULT_PAGE_EXTENSION
        return DEFAULT_PAGE_EXTENSION

    def initialize(self) -> bool:
        """Set the configured site variables, then import the site scripts."""
        self.get_safe_default_page_extension()
        self.variables.import_values(self.settings.get('site') or {})

        success = True
        for script in self.settings.get('scripts') or []:
            imported, _ = self.scripts.try_import_script_from_file(
                self._site_path(script), self,
                ScriptFlags.EXPECT | ScriptFlags.ALLOW_SITE_FUNCTIONS)
            success = success and imported
        return success

    def load(self) -> List[ContentObject]:
        """Rebuild the page and static file collections from the content roots."""
        self.pages.clear()
        self.static_files.clear()
        self.statistics.reset()

        items = self.loader.load(self.content_directories, [self.output_directory])
        for item in items:
            if item.is_static:
                self.static_files.append(item)
            else:
                self.pages.append(item)
        self.logger.info(f"Loaded {len(self.pages)} pages and {len(self.static_files)} static files")
        return items

    def generate(self, output_dir: str = None):
        output_dir = self._site_path(output_dir) if output_dir else self.output_directory
        return self.generator.write_output(output_dir)
