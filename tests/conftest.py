"""Test configuration and fixtures for Blarf tests."""

import pytest
import tempfile
import shutil
import logging
import os
from pathlib import Path

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from blarf_pkg.core import SiteConfig


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_blarf_logging():
    """Drop handlers installed by setup_logging so each test starts clean."""
    yield
    logger = logging.getLogger('blarf')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def write_articles(directory, articles):
    """Write {filename: text} into directory and return its path as a string."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    for name, text in articles.items():
        (directory / name).write_text(text, encoding='utf-8')
    return str(directory)


@pytest.fixture
def articles_dir(temp_dir):
    """Three articles whose file names sort a < b < c."""
    return write_articles(Path(temp_dir) / 'articles', {
        '1-a.md': "# Alpha\n\nThe first article.\n",
        '2-b.md': "# Beta\n\nThe *second* article.\n",
        '3-c.md': "# Gamma\n\nThe [third](https://example.com) article.\n",
    })


@pytest.fixture
def static_dir(temp_dir):
    """A static assets tree with nested directories."""
    static = Path(temp_dir) / 'public'
    (static / 'images' / 'icons').mkdir(parents=True)
    (static / 'js').mkdir()
    (static / 'robots.txt').write_text("User-agent: *\n")
    (static / 'images' / 'logo.png').write_bytes(b'\x89PNG\r\n\x1a\n\x00\x01\x02')
    (static / 'images' / 'icons' / 'mail.svg').write_text("<svg></svg>")
    (static / 'js' / 'site.js').write_text("console.log('hi');\n")
    return str(static)


@pytest.fixture
def site_config(temp_dir, articles_dir):
    """A SiteConfig with every temporary path kept inside temp_dir."""
    return SiteConfig(
        articles_dir=articles_dir,
        destination_dir=os.path.join(temp_dir, 'out'),
        staging_dir=os.path.join(temp_dir, 'staging'),
        default_stylesheet_path=os.path.join(temp_dir, 'default-css', 'styles.css'),
    )


def read_tree(root):
    """Map every file under root (relative path) to its bytes."""
    tree = {}
    root = Path(root)
    for path in sorted(root.rglob('*')):
        if path.is_file():
            tree[path.relative_to(root).as_posix()] = path.read_bytes()
    return tree
