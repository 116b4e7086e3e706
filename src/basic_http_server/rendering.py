"""
=============================================================================
HTML PAGE RENDERING
=============================================================================

Every HTML page this server produces goes through one fixed template,
templates/page.html, which has exactly two substitution points:

    title   page title, autoescaped
    body    trusted HTML fragment, inserted as-is

Error pages use the status line as title ("404 Not Found") and an empty
body. Directory listings (development extensions) render their fragment
with templates/listing.html first, then wrap it in the page. Markdown files
(development extensions) are converted with Python-Markdown and wrapped
the same way.

The templates ship inside the package, so a load or render failure is a
packaging bug, not a per-request condition. check_templates() is called
once at server startup to fail before the socket is bound.

=============================================================================
"""

from pathlib import Path
from typing import Iterable, Mapping

import jinja2
import markdown

from .errors import MarkdownNotUTF8, TemplateError
from .http.status_codes import HTTPStatus


TEMPLATE_DIR = Path(__file__).parent / "templates"
PAGE_TEMPLATE = "page.html"
LISTING_TEMPLATE = "listing.html"

# Rendering is pure; one environment is shared by all requests.
_environment = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=jinja2.select_autoescape(["html"]),
    undefined=jinja2.StrictUndefined,
)


def _get_template(name: str) -> jinja2.Template:
    try:
        return _environment.get_template(name)
    except jinja2.TemplateError as e:
        raise TemplateError(f"Cannot load template {name}: {e}") from e


def check_templates() -> None:
    """
    Load and trial-render every template.

    Raises:
        TemplateError: A template is missing or malformed.
    """
    render_html("check", "")
    render_listing("/", [], parent=False)


def render_html(title: str, body: str) -> str:
    """
    Render a full HTML page.

    Args:
        title: Page title (escaped).
        body: HTML fragment placed in <body> (not escaped).
    """
    template = _get_template(PAGE_TEMPLATE)
    try:
        return template.render(title=title, body=body)
    except jinja2.TemplateError as e:
        raise TemplateError(f"Cannot render {PAGE_TEMPLATE}: {e}") from e


def render_error_html(status: HTTPStatus) -> str:
    """Error page for a status: title "404 Not Found", empty body."""
    return render_html(status.line, "")


def render_listing(path: str, entries: Iterable[Mapping[str, str]], parent: bool) -> str:
    """
    Render a directory listing fragment.

    Args:
        path: Request path of the directory, shown in the heading.
        entries: Mappings with "name" (display text) and "href" (link).
        parent: Whether to include a "../" link.
    """
    template = _get_template(LISTING_TEMPLATE)
    try:
        return template.render(path=path, entries=list(entries), parent=parent)
    except jinja2.TemplateError as e:
        raise TemplateError(f"Cannot render {LISTING_TEMPLATE}: {e}") from e


def render_markdown(title: str, source: bytes) -> str:
    """
    Render a Markdown document as a full HTML page.

    Args:
        title: Page title (escaped).
        source: Raw file contents.

    Raises:
        MarkdownNotUTF8: source is not valid UTF-8.
    """
    try:
        text = source.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MarkdownNotUTF8() from e
    return render_html(title, markdown.markdown(text))
