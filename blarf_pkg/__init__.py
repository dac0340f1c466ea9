"""
Blarf - a small static blog generator.

Blarf takes a flat directory of markdown articles and publishes a static HTML
site: one page per article, previous/next navigation, a list of every article
in each footer, and a home page that is a copy of the newest article.
"""

__version__ = "1.0.0"
__author__ = "Tom Ragle"

from .article import Article, extract_title, load_articles, sort_articles
from .copier import copy_tree
from .core import SiteAssembler, SiteConfig
from .errors import BlarfError, ConfigurationError, CopyError, LoadError, SiteIOError
from .render import PageRenderer

__all__ = [
    'Article', 'extract_title', 'load_articles', 'sort_articles',
    'copy_tree', 'SiteAssembler', 'SiteConfig', 'PageRenderer',
    'BlarfError', 'ConfigurationError', 'CopyError', 'LoadError', 'SiteIOError',
]
