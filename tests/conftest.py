"""Test configuration and fixtures for Quire tests."""

import pytest
import tempfile
import shutil
from pathlib import Path

import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from quire.diagnostics import Diagnostics
from quire.site import SiteObject


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def site_dir(temp_dir):
    """Create an empty site directory with an includes folder."""
    site_dir = Path(temp_dir) / 'site'
    (site_dir / '_meta' / 'includes').mkdir(parents=True)
    return site_dir


@pytest.fixture
def theme_dir(temp_dir):
    """Create an empty theme directory next to the site."""
    theme_dir = Path(temp_dir) / 'theme'
    theme_dir.mkdir()
    return theme_dir


@pytest.fixture
def make_site(site_dir, temp_dir):
    """Factory building a SiteObject for the site directory."""
    def _make_site(**settings):
        settings.setdefault('builtin', str(Path(temp_dir) / 'no-builtin'))
        return SiteObject(str(site_dir), settings=settings)
    return _make_site


@pytest.fixture
def site(make_site):
    """A site with default settings."""
    return make_site()


@pytest.fixture
def diagnostics():
    """A fresh diagnostics aggregator."""
    return Diagnostics()


@pytest.fixture
def sample_content(site_dir):
    """Create a small content tree with a static file, a page and an include."""
    (site_dir / 'a.html').write_bytes(b'<p>plain bytes</p>\n')
    (site_dir / 'b.html').write_text('+++\ntitle = "X"\n+++\nHello', encoding='utf-8')
    (site_dir / '_meta' / 'includes' / 'partial.html').write_text('<nav>partial</nav>', encoding='utf-8')
    return site_dir
