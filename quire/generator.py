"""Page preparation and output writing."""

import logging
import os
import shutil


class SiteGenerator:
    def __init__(self, site):
        self.site = site
        self.logger = logging.getLogger('Quire')

    def try_prepare_page(self, page) -> bool:
        """Run the page front matter, then evaluate its template."""
        scripts = self.site.scripts
        if page.front_matter is not None and not scripts.try_run_front_matter(page.front_matter, page):
            return False
        if page.script is None:
            return False
        return scripts.try_evaluate(page, page.script, page.source_file)

    def write_output(self, output_dir: str):
        """Write evaluated pages and copy static files into ``output_dir``."""
        pages_written = 0
        files_copied = 0
        output_dir = os.path.abspath(output_dir)

        for page in self.site.pages:
            if page.content is None:
                continue
            output_path = os.path.join(output_dir, *page.path.split('/'))
            try:
                os.makedirs(os.path.dirname(output_path), exist_ok=True)
                with open(output_path, 'w', encoding='utf-8') as output_file:
                    output_file.write(page.content)
                pages_written += 1
                self.logger.debug(f"Generated page: {output_path}")
            except (IOError, OSError, PermissionError) as e:
                self.site.diagnostics.error(f"Failed to write page {output_path}: {e}")

        for static_file in self.site.static_files:
            output_path = os.path.join(output_dir, *static_file.path.split('/'))
            try:
                os.makedirs(os.path.dirname(output_path), exist_ok=True)
                shutil.copy2(static_file.source_file, output_path)
                files_copied += 1
                self.logger.debug(f"Copied static file: {output_path}")
            except (IOError, OSError, PermissionError) as e:
                self.site.diagnostics.error(f"Failed to copy static file {static_file.source_file}: {e}")

        return pages_written, files_copied
