"""Restricted Markdown to sanitized HTML.

Supported constructs: ``#``/``##``/``###`` headings, fenced and inline code,
bold, italic, strikethrough, links, blockquotes, ``-`` and ``1.`` list items,
and blank-line separated paragraphs. Everything else is plain escaped text.

Input is HTML-escaped before any substitution, so no markup from the source
survives; the only tags in the output are the ones this module writes.
"""

import html
import re

_PRE_TOKEN = "\x00PRE{}\x00"
_CODE_TOKEN = "\x00CODE{}\x00"
_PRE_LINE_RE = re.compile(r"^\x00PRE\d+\x00$")

_FENCED_RE = re.compile(r"```(?:[\w+#.-]*\n)?([\s\S]*?)```")
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
_H3_RE = re.compile(r"^### (.*)$", re.MULTILINE)
_H2_RE = re.compile(r"^## (.*)$", re.MULTILINE)
_H1_RE = re.compile(r"^# (.*)$", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*([^*\n]+)\*\*")
_ITALIC_RE = re.compile(r"\*([^*\n]+)\*")
_STRIKE_RE = re.compile(r"~~([^~\n]+)~~")
_LINK_RE = re.compile(r"\[([^\]\n]+)\]\(([^)\s]+)\)")
_QUOTE_RE = re.compile(r"^&gt; (.*)$", re.MULTILINE)
_BULLET_RE = re.compile(r"^- (.*)$", re.MULTILINE)
_NUMBERED_RE = re.compile(r"^\d+\. (.*)$", re.MULTILINE)
_BLOCK_RE = re.compile(r"^<(h[1-6]|ul|ol|blockquote|pre)[ >]")
_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")

_UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:")


def _safe_href(url: str) -> str:
    # Escaped entities and whitespace must not hide the scheme
    probe = html.unescape(url).strip().lower()
    probe = re.sub(r"[\s\x00-\x1f]", "", probe)
    if probe.startswith(_UNSAFE_SCHEMES):
        return "#"
    return url


def _link(match: re.Match) -> str:
    text, url = match.group(1), _safe_href(match.group(2))
    return f'<a href="{url}" target="_blank" rel="noopener noreferrer">{text}</a>'


def _wrap_lists(text: str) -> str:
    """Coalesce runs of adjacent ``<li>`` lines into a single ``<ul>``."""
    out: list[str] = []
    run: list[str] = []
    for line in text.split("\n"):
        if line.startswith("<li>") and line.endswith("</li>"):
            run.append(line)
            continue
        if run:
            out.append("<ul>" + "".join(run) + "</ul>")
            run = []
        out.append(line)
    if run:
        out.append("<ul>" + "".join(run) + "</ul>")
    return "\n".join(out)


def _is_block_line(line: str) -> bool:
    return bool(_BLOCK_RE.match(line) or _PRE_LINE_RE.match(line))


def _paragraphs(text: str) -> str:
    """Wrap inline runs in ``<p>`` and collapse single line breaks to spaces."""
    parts: list[str] = []
    for block in _BLANK_LINE_RE.split(text):
        inline: list[str] = []
        for line in block.split("\n"):
            line = line.strip()
            if not line:
                continue
            if _is_block_line(line):
                if inline:
                    parts.append("<p>" + " ".join(inline) + "</p>")
                    inline = []
                parts.append(line)
            else:
                inline.append(line)
        if inline:
            parts.append("<p>" + " ".join(inline) + "</p>")
    return "".join(parts)


def render_markdown(text: str | None) -> str:
    """Render restricted Markdown into HTML that is safe to embed.

    Args:
        text: Markdown source (e.g. README content)

    Returns:
        HTML string; empty string for empty input

    Example:
        >>> render_markdown("# Title\\n\\nSome **bold** text")
        '<h1>Title</h1><p>Some <strong>bold</strong> text</p>'
    """
    if not text:
        return ""

    source = text.replace("\r\n", "\n").replace("\r", "\n").replace("\x00", "")
    out = html.escape(source, quote=True)

    # Code is stashed so later substitutions never touch its contents
    stash: list[str] = []

    def _stash_pre(match: re.Match) -> str:
        stash.append("<pre><code>" + match.group(1).rstrip("\n") + "</code></pre>")
        return "\n" + _PRE_TOKEN.format(len(stash) - 1) + "\n"

    def _stash_code(match: re.Match) -> str:
        stash.append("<code>" + match.group(1) + "</code>")
        return _CODE_TOKEN.format(len(stash) - 1)

    out = _FENCED_RE.sub(_stash_pre, out)
    out = _INLINE_CODE_RE.sub(_stash_code, out)

    # Longest heading prefix first so "###" is never read as "#"
    out = _H3_RE.sub(r"<h3>\1</h3>", out)
    out = _H2_RE.sub(r"<h2>\1</h2>", out)
    out = _H1_RE.sub(r"<h1>\1</h1>", out)

    # Bold before italic, otherwise "**x**" becomes nested emphasis
    out = _BOLD_RE.sub(r"<strong>\1</strong>", out)
    out = _ITALIC_RE.sub(r"<em>\1</em>", out)
    out = _STRIKE_RE.sub(r"<del>\1</del>", out)
    out = _LINK_RE.sub(_link, out)

    out = _QUOTE_RE.sub(r"<blockquote>\1</blockquote>", out)
    out = _BULLET_RE.sub(r"<li>\1</li>", out)
    out = _NUMBERED_RE.sub(r"<li>\1</li>", out)
    out = _wrap_lists(out)

    out = _paragraphs(out)

    for index, fragment in enumerate(stash):
        out = out.replace(_PRE_TOKEN.format(index), fragment)
        out = out.replace(_CODE_TOKEN.format(index), fragment)

    return out


def insert_markdown(
    text: str, start: int, end: int, before: str, after: str
) -> tuple[str, int]:
    """Wrap the selected range of ``text`` with Markdown markers.

    Used by description editors for toolbar buttons (bold, italic, link...).

    Args:
        text: Current editor text
        start: Selection start offset
        end: Selection end offset
        before: Marker inserted before the selection (e.g. "**")
        after: Marker inserted after the selection

    Returns:
        Tuple of (new text, caret offset placed after the closing marker)

    Example:
        >>> insert_markdown("make bold", 5, 9, "**", "**")
        ('make **bold**', 13)
    """
    start = max(0, min(start, len(text)))
    end = max(start, min(end, len(text)))
    selected = text[start:end]
    new_text = text[:start] + before + selected + after + text[end:]
    return new_text, start + len(before) + len(selected) + len(after)
