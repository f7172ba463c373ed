"""Render API description Markdown and ``x-codeSamples`` snippets.

OpenAPI descriptions are CommonMark-ish text that repeats heavily across a
document (``"unexpected error"`` on every default response), so
:class:`DescriptionRenderer` keeps one :class:`markdown.Markdown` instance,
resets it between documents and memoizes the HTML per source text.
Code samples carry free-form ``lang`` labels such as ``"C#"`` or
``"Node.js"``; :func:`lexer_name` maps them onto Pygments lexers.
"""

from __future__ import annotations

import re
from html import escape

from markdown import Markdown
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
_SINGLE_PARAGRAPH = re.compile(r"\A<p>(.*)</p>\Z", re.DOTALL)

# Labels commonly used in x-codeSamples that Pygments does not know as-is.
SAMPLE_LANGUAGE_ALIASES = {
    "c#": "csharp",
    "curl": "bash",
    "shell": "bash",
    "node": "javascript",
    "node.js": "javascript",
    "nodejs": "javascript",
    "js": "javascript",
    "ts": "typescript",
}


def lexer_name(language: str | None) -> str:
    """Return the Pygments lexer alias for a code sample ``language`` label.

    Examples
    --------
    >>> lexer_name("C#"), lexer_name("cURL"), lexer_name("Python")
    ('csharp', 'bash', 'python')
    >>> lexer_name(None)
    'text'
    """
    label = (language or "text").strip().lower()
    return SAMPLE_LANGUAGE_ALIASES.get(label, label) or "text"


class DescriptionRenderer:
    """Render descriptions and code samples for one documentation page."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        """Initialize a renderer with a Pygments style.

        Parameters
        ----------
        pygments_style : str, optional
            Pygments style for code samples and fenced code in descriptions.

        Raises
        ------
        pygments.util.ClassNotFound
            If ``pygments_style`` is not an installed style.
        """
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, cssclass="codehilite")
        self._md = Markdown(
            extensions=["fenced_code", "codehilite", "tables", "sane_lists"],
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": pygments_style,
                }
            },
        )
        self._cache: dict[str, str] = {}

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(".codehilite")

    def markdown(self, text: str) -> str:
        """Render Markdown into HTML, returning ``""`` for blank input."""
        if not text or not text.strip():
            return ""
        html = self._cache.get(text)
        if html is None:
            html = self._md.reset().convert(text)
            self._cache[text] = html
        return html

    def markdown_inline(self, text: str) -> str:
        """Render ``text`` for a table cell or list item.

        A description that renders to a single paragraph loses its ``<p>``
        wrapper; anything richer is returned as block HTML.

        Examples
        --------
        >>> DescriptionRenderer().markdown_inline("How *many* pets")
        'How <em>many</em> pets'
        """
        html = self.markdown(text)
        match = _SINGLE_PARAGRAPH.match(html)
        if match and "<p>" not in match.group(1):
            return match.group(1)
        return html

    def code_block(self, code: str, language: str | None = None) -> str:
        """Highlight a code sample and tag it with its ``data-language``.

        Parameters
        ----------
        code : str
            Source snippet to highlight.
        language : str, optional
            The sample's ``lang`` label; unknown labels fall back to plain
            text highlighting.

        Returns
        -------
        str
            Highlighted HTML whose wrapper carries the lower-cased label.
        """
        try:
            lexer = get_lexer_by_name(lexer_name(language))
        except ClassNotFound:
            lexer = get_lexer_by_name("text")
        html = highlight(code, lexer, self._formatter)
        label = escape((language or "text").strip().lower(), quote=True)
        opening = f'<div class="codehilite" data-language="{label}">'
        return CODEHILITE_OPEN_TAG.sub(lambda _match: opening, html, count=1)


__all__ = ["SAMPLE_LANGUAGE_ALIASES", "DescriptionRenderer", "lexer_name"]
