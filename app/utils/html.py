import html
import re

_TAG_RE = re.compile(r"<[^>]*>")


def strip_tags(content: str) -> str:
    """Removes HTML tags, leaving the text and entities untouched."""
    return _TAG_RE.sub("", content or "")


def html_to_text(content: str) -> str:
    """Converts HTML into a single line of readable text."""
    text = re.sub(r"<(script|style)[^>]*>.*?</\1>", "", content or "", flags=re.DOTALL | re.I)
    text = _TAG_RE.sub(" ", text)
    text = re.sub(r"\s+", " ", text).strip()
    return html.unescape(text)
