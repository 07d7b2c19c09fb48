"""
Export renderers for generated documents.

Every renderer is a pure function of ``(markup, FormatOptions)`` and is
re-run on each export request; nothing is cached, so a change of font or
margin between generation and download is always reflected.
"""
from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from bs4 import BeautifulSoup, NavigableString

from papergen.models.schemas import ExportFormat, TemplateKind
from papergen.utils.helpers import collapse_whitespace

logger = logging.getLogger(__name__)

UTF8_BOM = "\ufeff"

_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
_UNDERLINE_CHARS = {"h1": "=", "h2": "-"}

_BLOCK_TAGS = [
    "p", "div", "section", "article", "header", "footer", "aside", "main",
    "blockquote", "pre", "ul", "ol", "li", "table", "tr", "thead", "tbody",
    "tfoot", "caption", "figure", "figcaption", "dl", "dt", "dd", "hr",
    "address", "nav",
] + _HEADING_TAGS

_INVISIBLE_TAGS = ["head", "title", "style", "script", "meta", "link", "noscript"]


@dataclass(frozen=True)
class FormatOptions:
    """Typography applied to exported documents."""

    font_family: str = "'Times New Roman', Times, serif"
    font_size_pt: float = 12.0
    line_height: float = 1.5
    margin_cm: float = 2.5
    text_align: str = "justify"
    color: str = "#000000"

    @classmethod
    def for_template(cls, template: TemplateKind) -> "FormatOptions":
        """Template defaults: thesis 12pt/1.5/2.5cm, conference 10pt/1.15/1.9cm."""
        if template is TemplateKind.CONFERENCE:
            return cls(font_size_pt=10.0, line_height=1.15, margin_cm=1.9)
        return cls()

    def with_overrides(self, **overrides: Optional[object]) -> "FormatOptions":
        """Copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)

    def body_css(self) -> str:
        return (
            f"font-family: {self.font_family}; "
            f"font-size: {_num(self.font_size_pt)}pt; "
            f"line-height: {_num(self.line_height)}; "
            f"text-align: {self.text_align}; "
            f"color: {self.color};"
        )


@dataclass(frozen=True)
class ExportArtifact:
    """A downloadable file produced from the current document."""

    mime_type: str
    file_name: str
    data: bytes


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------

def render_html(markup: str, options: FormatOptions) -> ExportArtifact:
    """Standalone HTML document with UTF-8 meta and the active typography."""
    document = f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Academic Paper</title>
<style>
body {{ {options.body_css()} margin: {_num(options.margin_cm)}cm; }}
</style>
</head>
<body>
{markup}
</body>
</html>
"""
    return ExportArtifact(
        mime_type="text/html; charset=utf-8",
        file_name="document.html",
        data=document.encode("utf-8"),
    )


def render_word(markup: str, options: FormatOptions) -> ExportArtifact:
    """
    HTML with Office namespaces and MSO metadata, served as application/msword
    so word processors open it as a rich document in Print view at 100 %.
    """
    document = f"""<html xmlns:o='urn:schemas-microsoft-com:office:office' xmlns:w='urn:schemas-microsoft-com:office:word' xmlns='http://www.w3.org/TR/REC-html40'>
<head>
<meta charset='utf-8'>
<title>Document</title>
<!--[if gte mso 9]>
<xml>
<w:WordDocument>
<w:View>Print</w:View>
<w:Zoom>100</w:Zoom>
</w:WordDocument>
</xml>
<![endif]-->
<style>
@page {{
  size: A4;
  margin: {_num(options.margin_cm)}cm;
}}
body {{
  {options.body_css()}
}}
</style>
</head>
<body>
{markup}
</body>
</html>"""
    return ExportArtifact(
        mime_type="application/msword",
        file_name="document.doc",
        data=(UTF8_BOM + document).encode("utf-8"),
    )


def render_text(markup: str, options: Optional[FormatOptions] = None) -> ExportArtifact:
    """
    Plain text with all markup removed.

    Headings keep a structural cue: a blank line before, and an underline as
    long as the heading text after (``=`` for h1, ``-`` for h2, ``#`` deeper).
    """
    soup = BeautifulSoup(markup, "html.parser")

    for tag in soup.find_all(_INVISIBLE_TAGS):
        tag.decompose()

    for heading in soup.find_all(_HEADING_TAGS):
        title = collapse_whitespace(heading.get_text())
        underline = _UNDERLINE_CHARS.get(heading.name, "#") * len(title)
        heading.clear()
        heading.append(NavigableString(f"\n\n{title}\n{underline}\n"))

    for br in soup.find_all("br"):
        br.replace_with(NavigableString("\n"))
    for cell in soup.find_all(["td", "th"]):
        cell.append(NavigableString("\t"))
    for block in soup.find_all(_BLOCK_TAGS):
        block.append(NavigableString("\n"))

    text = soup.get_text()
    lines = [line.strip() for line in text.splitlines()]
    text = re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip() + "\n"

    return ExportArtifact(
        mime_type="text/plain; charset=utf-8",
        file_name="document.txt",
        data=text.encode("utf-8"),
    )


_RENDERERS: Dict[ExportFormat, Callable[..., ExportArtifact]] = {
    ExportFormat.HTML: render_html,
    ExportFormat.WORD: render_word,
    ExportFormat.TEXT: render_text,
}


def render(fmt: ExportFormat, markup: str, options: FormatOptions) -> ExportArtifact:
    """Render *markup* into the requested export format."""
    artifact = _RENDERERS[fmt](markup, options)
    logger.info(
        "Rendered %s export (%s bytes)", artifact.file_name, f"{len(artifact.data):,}"
    )
    return artifact


def _num(value: float) -> str:
    """Format 12.0 as '12' and 1.15 as '1.15' for CSS."""
    return f"{value:g}"
