"""
Sanitizer for model-generated markup.

Neutralises the active content a language model can accidentally emit:
script blocks, inline event handlers and ``javascript:`` URIs. It is not a
general HTML-safety guarantee against a hostile author.
"""
from __future__ import annotations

import re

# Shortest span from an opening <script ...> to the next closing tag
_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)

# A start tag, with quoted attribute values allowed to contain '>'
_TAG_RE = re.compile(r"<[a-zA-Z](?:\"[^\"]*\"|'[^']*'|[^'\">])*>")

# Inside a start tag: a quoted value (kept whole, so text such as
# title="online=yes" survives) or an on<word>= handler following whitespace,
# '/' or a closing quote, with a double-quoted, single-quoted or bare value
_ATTR_OR_HANDLER_RE = re.compile(
    r"(\"[^\"]*\"|'[^']*')"
    r"|(?:\s+|(?<=[/\"']))on\w+\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s>]*)",
    re.IGNORECASE,
)

_JS_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)

_FENCE_RE = re.compile(r"```[a-zA-Z]*")


def _drop_handler(match: re.Match) -> str:
    return match.group(1) or ""


def _strip_handlers(match: re.Match) -> str:
    return _ATTR_OR_HANDLER_RE.sub(_drop_handler, match.group(0))


def _sanitize_once(markup: str) -> str:
    out = _SCRIPT_RE.sub("", markup)
    out = _TAG_RE.sub(_strip_handlers, out)
    return _JS_SCHEME_RE.sub("", out)


def sanitize(markup: str) -> str:
    """
    Remove script elements, inline event handlers and ``javascript:`` URIs.

    Passes repeat until nothing changes, so a removal can never splice
    together a new payload and ``sanitize(sanitize(x)) == sanitize(x)``.
    Never raises.
    """
    if not markup:
        return ""
    current = markup
    while True:
        cleaned = _sanitize_once(current)
        # Every pass either shrinks the string or leaves it alone
        if cleaned == current:
            return cleaned
        current = cleaned


def strip_code_fences(text: str) -> str:
    """Drop Markdown code fences (```html, ```) wrapped around the answer."""
    return _FENCE_RE.sub("", text).strip()
