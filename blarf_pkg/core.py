import os
import shutil
import logging
import tempfile
import time
from dataclasses import dataclass
from importlib import resources
from typing import List, Optional

from .article import Article, find_duplicate_slugs, home_article, load_articles, sort_articles
from .copier import copy_tree
from .errors import BlarfError, ConfigurationError, SiteIOError
from .render import DEFAULT_SITE_TITLE, PageRenderer

DEFAULT_STYLESHEET_NAME = 'styles.css'
ARTICLES_SUBDIR = 'articles'
INDEX_FILE = 'index.html'


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno != logging.INFO:
            return True
        allowed_messages = [
            "Starting site build",
            "Published site to",
            "Site build completed in",
            "Total articles generated:",
            "Total static files copied:",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


def setup_logging(level='INFO', log_file=None):
    """
    Set up logging for the 'blarf' logger hierarchy.

    Handlers from an earlier call are closed and replaced, so the latest
    level and log file always apply.
    """
    logger = logging.getLogger('blarf')
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    console_handler.addFilter(InfoFilter())
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(file_handler)

    return logger


def remove_path(path, operation='remove'):
    """Remove a file or directory tree. A path that is already gone counts as removed."""
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except FileNotFoundError:
        pass
    except (IOError, OSError) as e:
        raise SiteIOError(f"Cannot {operation} {path}: {e}", path=path, operation=operation) from e


def paths_overlap(first, second):
    """True when two absolute paths are equal or one contains the other."""
    common = os.path.commonpath([first, second])
    return common in (first, second)


@dataclass
class SiteConfig:
    """Everything a single build needs.

    ``staging_dir`` defaults to a hidden sibling of the destination so the
    final rename stays on one filesystem. ``default_stylesheet_path`` is where
    the bundled stylesheet is written when ``css_path`` is not set; a fresh
    temporary directory is used when it is not given either.
    """
    articles_dir: Optional[str]
    destination_dir: Optional[str] = 'site'
    static_dir: Optional[str] = None
    email: Optional[str] = None
    css_path: Optional[str] = None
    site_title: str = DEFAULT_SITE_TITLE
    staging_dir: Optional[str] = None
    default_stylesheet_path: Optional[str] = None

    def resolved_staging_dir(self) -> str:
        if self.staging_dir:
            return self.staging_dir
        if not self.destination_dir:
            raise ConfigurationError("A destination directory is required")
        destination = os.path.abspath(self.destination_dir)
        parent, name = os.path.split(destination)
        return os.path.join(parent, f".{name}.staging")

    def validate(self):
        if not self.articles_dir:
            raise ConfigurationError("An articles directory is required")
        if not self.destination_dir:
            raise ConfigurationError("A destination directory is required")

        destination = os.path.abspath(self.destination_dir)
        staging = os.path.abspath(self.resolved_staging_dir())
        if staging == destination:
            raise ConfigurationError(f"Staging directory must differ from the destination: {staging}")
        if paths_overlap(staging, destination):
            raise ConfigurationError(
                f"Staging directory {staging} and destination {destination} must not contain each other"
            )

        if self.static_dir:
            static = os.path.abspath(self.static_dir)
            for label, path in (('staging directory', staging), ('destination', destination)):
                if paths_overlap(static, path):
                    raise ConfigurationError(
                        f"Static directory {static} and {label} {path} must not contain each other"
                    )


@dataclass
class BuildReport:
    destination: str
    articles: int
    home_slug: str
    static_files: int
    elapsed: float


class SiteAssembler:
    """Builds the whole site in a staging directory, then publishes it."""

    def __init__(self, config: SiteConfig, renderer: Optional[PageRenderer] = None):
        self.config = config
        self.logger = logging.getLogger('blarf.core')
        self.renderer = renderer or PageRenderer(site_title=config.site_title)
        self.staging_dir = None
        self._created_stylesheet = None
        self._created_stylesheet_dir = None

    def build(self) -> BuildReport:
        """
        Run the full pipeline: stage, render, copy assets, publish, clean up.

        The destination directory is only touched by the final publish step, so
        any failure before it leaves the previous site in place.
        """
        start_time = time.time()
        self.config.validate()
        self.staging_dir = self.config.resolved_staging_dir()
        self.logger.info("Starting site build...")

        try:
            self.prepare_staging()
            css_path = self.resolve_stylesheet()
            articles = sort_articles(load_articles(self.config.articles_dir))
            home = self.write_articles(articles, css_path)
            static_files = self.copy_static_assets()
            self.copy_stylesheet(css_path)
            self.publish()
        except BlarfError:
            self.discard_staging()
            raise
        finally:
            self.cleanup_stylesheet()

        elapsed = time.time() - start_time
        self.logger.info(f"Published site to {self.config.destination_dir}")
        self.logger.info(f"Site build completed in {elapsed:.6f} seconds.")
        self.logger.info(f"Total articles generated: {len(articles)}")
        self.logger.info(f"Total static files copied: {static_files}")

        return BuildReport(
            destination=self.config.destination_dir,
            articles=len(articles),
            home_slug=home.slug,
            static_files=static_files,
            elapsed=elapsed,
        )

    def prepare_staging(self):
        """Create an empty staging directory with its articles subdirectory."""
        remove_path(self.staging_dir, operation='remove staging directory')
        articles_path = os.path.join(self.staging_dir, ARTICLES_SUBDIR)
        try:
            os.makedirs(articles_path)
        except (IOError, OSError) as e:
            raise SiteIOError(
                f"Cannot create staging directory {articles_path}: {e}",
                path=articles_path, operation='create staging directory'
            ) from e
        self.logger.debug(f"Created staging directory: {self.staging_dir}")

    def resolve_stylesheet(self) -> str:
        """Return the stylesheet to publish, writing the bundled one if none was given."""
        if self.config.css_path:
            if not os.path.isfile(self.config.css_path):
                raise SiteIOError(
                    f"Stylesheet not found: {self.config.css_path}",
                    path=self.config.css_path, operation='read stylesheet'
                )
            return self.config.css_path

        if self.config.default_stylesheet_path:
            target = self.config.default_stylesheet_path
        else:
            self._created_stylesheet_dir = tempfile.mkdtemp(prefix='blarf-')
            target = os.path.join(self._created_stylesheet_dir, DEFAULT_STYLESHEET_NAME)

        try:
            css = resources.files('blarf_pkg').joinpath('static').joinpath(DEFAULT_STYLESHEET_NAME).read_bytes()
            parent = os.path.dirname(os.path.abspath(target))
            os.makedirs(parent, exist_ok=True)
            with open(target, 'wb') as f:
                f.write(css)
        except (IOError, OSError) as e:
            raise SiteIOError(
                f"Cannot write default stylesheet {target}: {e}",
                path=target, operation='write default stylesheet'
            ) from e

        self._created_stylesheet = target
        self.logger.debug(f"Wrote default stylesheet: {target}")
        return target

    def write_articles(self, articles: List[Article], css_path: str) -> Article:
        """Render every sorted article into staging; the home article also becomes index.html."""
        for slug in find_duplicate_slugs(articles):
            self.logger.warning(f"Duplicate slug '{slug}': only one article will be published under it")

        home = home_article(articles)
        for index, article in enumerate(articles):
            footer = self.renderer.render_footer(index, articles, self.config.email)
            html = self.renderer.render(article, css_path, footer).encode('utf-8')
            self.write_file(os.path.join(self.staging_dir, ARTICLES_SUBDIR, f"{article.slug}.html"), html)
            if article is home:
                self.write_file(os.path.join(self.staging_dir, INDEX_FILE), html)
        return home

    def write_file(self, path: str, data: bytes):
        try:
            with open(path, 'wb') as f:
                f.write(data)
        except (IOError, OSError) as e:
            raise SiteIOError(f"Cannot write {path}: {e}", path=path, operation='write') from e
        self.logger.debug(f"Generated HTML: {path}")

    def copy_static_assets(self) -> int:
        if not self.config.static_dir:
            return 0
        copied = copy_tree(self.config.static_dir, self.staging_dir)
        self.logger.info(f"Copied {copied} static files from {self.config.static_dir}")
        return copied

    def copy_stylesheet(self, css_path: str):
        target = os.path.join(self.staging_dir, os.path.basename(css_path))
        try:
            shutil.copyfile(css_path, target)
        except (IOError, OSError) as e:
            raise SiteIOError(
                f"Cannot copy stylesheet {css_path} to {target}: {e}",
                path=css_path, operation='copy stylesheet'
            ) from e

    def publish(self):
        """
        Replace the destination with the staging tree.

        The old destination is first renamed to a sibling backup, then staging is
        renamed into place and the backup deleted. If the second rename fails the
        backup is moved back, so a previous site is never lost.
        """
        destination = self.config.destination_dir
        backup = None

        parent = os.path.dirname(os.path.abspath(destination))
        try:
            os.makedirs(parent, exist_ok=True)
        except (IOError, OSError) as e:
            raise SiteIOError(f"Cannot create {parent}: {e}", path=parent, operation='publish') from e

        if os.path.lexists(destination):
            backup = os.path.join(parent, f".{os.path.basename(os.path.abspath(destination))}.old")
            remove_path(backup, operation='remove old backup')
            try:
                os.rename(destination, backup)
            except (IOError, OSError) as e:
                raise SiteIOError(
                    f"Cannot move {destination} aside to {backup}: {e}",
                    path=destination, operation='publish'
                ) from e

        try:
            os.rename(self.staging_dir, destination)
        except (IOError, OSError) as e:
            if backup:
                try:
                    os.rename(backup, destination)
                except (IOError, OSError) as restore_error:
                    self.logger.error(f"Could not restore {destination} from {backup}: {restore_error}")
            raise SiteIOError(
                f"Cannot rename {self.staging_dir} to {destination}: {e}",
                path=destination, operation='publish'
            ) from e

        if backup:
            try:
                remove_path(backup, operation='remove old site')
            except SiteIOError as e:
                self.logger.warning(f"Site published but the previous copy was left behind: {e}")

    def discard_staging(self):
        try:
            remove_path(self.staging_dir, operation='remove staging directory')
        except SiteIOError as e:
            self.logger.warning(str(e))

    def cleanup_stylesheet(self):
        """Remove the default stylesheet if this build wrote one."""
        for path in (self._created_stylesheet, self._created_stylesheet_dir):
            if not path:
                continue
            try:
                remove_path(path, operation='remove default stylesheet')
            except SiteIOError as e:
                self.logger.warning(str(e))
        self._created_stylesheet = None
        self._created_stylesheet_dir = None
