"""
Discovery of content files.

Content roots are walked breadth first in priority order. A relative path
seen under an earlier root hides the same path under every later root, and
directories starting with an underscore are never entered.
"""

import collections
import logging
import os
import time
from typing import Iterable, List, Optional, Set

from .classifier import sniff_file
from .diagnostics import SourceSpan
from .engine import ScriptMode
from .objects import ContentKind, ContentObject, normalize_relative_path
from .settings import QuireSettings
from .summary import update_summary

EXCLUDED_DIRECTORY_PREFIX = '_'


class ContentLoader:
    """Builds content objects from the files under a list of roots."""

    def __init__(self, site, config_file_names: Iterable[str] = None):
        self.site = site
        self.config_file_names = set(config_file_names or QuireSettings.CONFIG_FILES)
        self.logger = logging.getLogger('Quire')
        self.excluded_directories: Set[str] = set()

    def load(self, root_directories: Iterable[str], excluded_directories: Iterable[str] = ()) -> List[ContentObject]:
        """
        Load every file under ``root_directories``, sorted in natural path order.

        Directories listed in ``excluded_directories``, such as the build
        output, are never entered.
        """
        items: List[ContentObject] = []
        loaded: Set[str] = set()
        self.excluded_directories = {os.path.abspath(directory) for directory in excluded_directories}
        for root_directory in root_directories:
            if not os.path.isdir(root_directory):
                self.logger.debug(f"Skipping missing content root {root_directory}")
                continue
            directories = collections.deque([root_directory])
            while directories:
                self._load_directory(root_directory, directories.popleft(), directories, loaded, items)

        items.sort(key=ContentObject.sort_key)
        return items

    def _load_directory(self, root_directory, directory, directories, loaded, items):
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            self.site.diagnostics.error(f"Unable to list directory [{directory}]: {e}", SourceSpan(directory))
            return

        for entry in entries:
            if entry.name in self.config_file_names:
                continue

            if entry.is_file():
                # The first root a relative path is found under wins
                relative_path = normalize_relative_path(root_directory, entry.path)
                if relative_path in loaded:
                    self.logger.debug(f"Skipping {entry.path}, already loaded as {relative_path}")
                    continue
                loaded.add(relative_path)

                item = self.load_file(root_directory, entry.path)
                if item is not None:
                    items.append(item)
            elif entry.is_dir() and not self._is_excluded(entry):
                directories.append(entry.path)

    def _is_excluded(self, entry) -> bool:
        if entry.name.startswith(EXCLUDED_DIRECTORY_PREFIX):
            return True
        return os.path.abspath(entry.path) in self.excluded_directories

    def load_file(self, root_directory: str, file_path: str) -> Optional[ContentObject]:
        start = time.perf_counter()
        try:
            classification, text = sniff_file(file_path)
        except (OSError, UnicodeDecodeError) as e:
            self.site.diagnostics.error(f"Unable to read file [{file_path}]: {e}", SourceSpan(file_path))
            return None

        if not classification.is_templated:
            item = ContentObject(root_directory, file_path, ContentKind.STATIC)
            self.site.diagnostics.get_stats(item).loading_parsing_time += time.perf_counter() - start
            return item

        return self._load_page_script(root_directory, file_path, text, start)

    def _load_page_script(self, root_directory, file_path, text, start) -> Optional[ContentObject]:
        script = self.site.scripts.parse_script(text, file_path, ScriptMode.FRONT_MATTER_AND_CONTENT)
        if script.has_errors:
            return None

        page = ContentObject(root_directory, file_path, ContentKind.TEMPLATED)
        page.script = script
        page.front_matter = script.front_matter
        stat = self.site.diagnostics.get_stats(page)
        stat.loading_parsing_time += time.perf_counter() - start

        clock = time.perf_counter()
        if self.site.generator.try_prepare_page(page):
            stat.evaluate_time += time.perf_counter() - clock

            clock = time.perf_counter()
            update_summary(page, self.site.summary_words)
            stat.summary_time += time.perf_counter() - clock

        return page
