"""
Page rendering: markdown to HTML and the page shell around it.
"""

import os
import logging
from typing import Optional, Sequence

import mistune
from jinja2 import Environment, PackageLoader, TemplateNotFound, TemplateSyntaxError, select_autoescape

from .article import Article, neighbours
from .errors import ConfigurationError

DEFAULT_SITE_TITLE = 'Untitled'
PAGE_TEMPLATE = 'page.html'
FOOTER_TEMPLATE = 'footer.html'


class ArticleHTMLRenderer(mistune.HTMLRenderer):
    """HTML renderer that keeps raw HTML in articles and tags fenced code with its language."""

    def __init__(self):
        super().__init__(escape=False)

    def block_code(self, code, info=None):
        escaped_code = mistune.escape(code)
        if info and info.strip():
            lang = mistune.escape(info.strip().split(None, 1)[0])
            return '<pre><code class="language-{}">{}</code></pre>\n'.format(lang, escaped_code)
        return '<pre><code>{}</code></pre>\n'.format(escaped_code)


def create_markdown_parser():
    """Create a Mistune markdown parser with the article renderer."""
    return mistune.create_markdown(
        renderer=ArticleHTMLRenderer(),
        plugins=['table', 'strikethrough']
    )


class PageRenderer:
    """Renders articles into complete HTML documents."""

    def __init__(self, site_title=DEFAULT_SITE_TITLE, lang='en'):
        self.site_title = site_title or DEFAULT_SITE_TITLE
        self.lang = lang
        self.logger = logging.getLogger('blarf.render')
        self.env = Environment(
            loader=PackageLoader('blarf_pkg', 'templates'),
            autoescape=select_autoescape(['html']),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.markdown_parser = create_markdown_parser()

    def markdown_to_html(self, text: str) -> str:
        """Convert markdown text to HTML."""
        return self.markdown_parser(text)

    def render_template(self, template_name, **context):
        try:
            template = self.env.get_template(template_name)
        except (TemplateNotFound, TemplateSyntaxError) as e:
            # Templates ship inside the package; missing ones mean a broken install.
            raise ConfigurationError(f"Built-in template {template_name} is unavailable: {e}") from e
        return template.render(**context)

    def render_footer(self, index: int, articles: Sequence[Article], email: Optional[str] = None) -> str:
        """
        Render the footer for the article at ``index`` of the sorted ``articles``.

        The footer holds a home link, previous/next controls (disabled at either
        end), the list of every article newest first, and a contact link when
        an email address is configured.
        """
        prev_slug, next_slug = neighbours(index, articles)
        return self.render_template(
            FOOTER_TEMPLATE,
            prev_slug=prev_slug,
            next_slug=next_slug,
            index_list=list(reversed(articles)),
            email=email or None,
        )

    def render(self, article: Article, stylesheet_path: str, footer: str) -> str:
        """Render ``article`` as a full HTML5 document with ``footer`` appended."""
        return self.render_template(
            PAGE_TEMPLATE,
            lang=self.lang,
            title=article.title or self.site_title,
            stylesheet=os.path.basename(stylesheet_path),
            content=self.markdown_to_html(article.markdown),
            footer=footer,
        )
