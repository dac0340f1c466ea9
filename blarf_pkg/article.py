"""
Articles: loading markdown files from disk, title extraction and ordering.
"""

import os
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import LoadError

TITLE_MARKER = '# '

logger = logging.getLogger('blarf.article')


def extract_title(markdown: str) -> str:
    """
    Return the text of the first top-level heading (like ``# My first post``).

    Only a line that starts with ``#`` followed by exactly one space counts.
    Returns an empty string when no such line exists.
    """
    for line in markdown.split('\n'):
        if line.startswith(TITLE_MARKER):
            return line[len(TITLE_MARKER):].strip()
    return ''


@dataclass(frozen=True)
class Article:
    """A single markdown article.

    ``slug`` is the source file name without its extension, for example
    ``1-my-first-post``. ``title`` is derived from the markdown when not given.
    """
    markdown: str
    slug: str
    title: Optional[str] = None

    def __post_init__(self):
        if self.title is None:
            object.__setattr__(self, 'title', extract_title(self.markdown))

    @property
    def permalink(self) -> str:
        return f"/articles/{self.slug}.html"


def slug_from_filename(filename: str) -> str:
    return os.path.splitext(filename)[0]


def read_article(file_path: str) -> Article:
    """Read one markdown file as UTF-8 and build its Article."""
    try:
        with open(file_path, 'rb') as f:
            raw = f.read()
    except (IOError, OSError) as e:
        raise LoadError(f"Cannot read article file {file_path}: {e}", path=file_path) from e

    try:
        markdown = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise LoadError(f"Article file {file_path} is not valid UTF-8: {e}", path=file_path) from e

    return Article(markdown=markdown, slug=slug_from_filename(os.path.basename(file_path)))


def load_articles(articles_dir: str) -> List[Article]:
    """
    Load every article file directly inside ``articles_dir``.

    Subdirectories and hidden files are skipped. Files are read in name order,
    so when two files share a slug the later name wins on every platform. Use
    sort_articles before rendering.

    Raises:
        LoadError: if the directory is missing or unreadable, a file cannot be
            read or decoded, or no articles were found.
    """
    if not os.path.isdir(articles_dir):
        raise LoadError(f"Articles directory not found: {articles_dir}", path=articles_dir)

    try:
        entries = sorted(os.listdir(articles_dir))
    except (IOError, OSError) as e:
        raise LoadError(f"Cannot read articles directory {articles_dir}: {e}", path=articles_dir) from e

    articles = []
    for name in entries:
        file_path = os.path.join(articles_dir, name)
        if name.startswith('.') or os.path.isdir(file_path):
            logger.debug(f"Skipping {file_path}")
            continue
        articles.append(read_article(file_path))
        logger.debug(f"Loaded article: {file_path}")

    if not articles:
        raise LoadError(f"No articles found in {articles_dir}", path=articles_dir)

    return articles


def sort_articles(articles: Sequence[Article]) -> List[Article]:
    """Sort articles by slug, ascending, comparing code points (not locale-aware)."""
    return sorted(articles, key=lambda article: article.slug)


def neighbours(index: int, articles: Sequence[Article]) -> Tuple[Optional[str], Optional[str]]:
    """Return the (previous, next) slugs around ``index`` in sorted articles."""
    prev_slug = articles[index - 1].slug if index > 0 else None
    next_slug = articles[index + 1].slug if index < len(articles) - 1 else None
    return prev_slug, next_slug


def home_article(articles: Sequence[Article]) -> Article:
    """The home page is the article with the greatest slug (last in sorted order)."""
    return sort_articles(articles)[-1]


def find_duplicate_slugs(articles: Sequence[Article]) -> List[str]:
    seen = set()
    duplicates = []
    for article in articles:
        if article.slug in seen and article.slug not in duplicates:
            duplicates.append(article.slug)
        seen.add(article.slug)
    return duplicates
