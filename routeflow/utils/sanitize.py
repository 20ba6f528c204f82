"""Input scrubbing for user-supplied display text.

strip_html:       parses the value as HTML and keeps only its text content
                  ("<script>alert(1)</script>" -> "alert(1)",
                   "5 < 6" -> "5 < 6")
scrub_filename:   reduces an icon reference to safe file-name characters
                  ("\"><img src=\"../files/x.png\">" -> "img src=..filesx.png")
"""
import re
from html.parser import HTMLParser

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9 _.=\-]")

# Parsing decodes entities, which can expose new tags ("&lt;b&gt;"), so
# extraction repeats; the cap only guards against pathological input.
_MAX_PASSES = 10


class _TextExtractor(HTMLParser):
    """Collects character data; tags, attributes and comments are dropped."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self._chunks = []

    def handle_data(self, data):
        self._chunks.append(data)

    def text(self):
        return "".join(self._chunks)


def _text_content(value):
    parser = _TextExtractor()
    parser.feed(value)
    parser.close()
    return parser.text()


def strip_html(value):
    """Return the text content of ``value`` parsed as HTML.

    A ``<`` that does not open a tag is kept as text, entities are decoded
    and whitespace is collapsed.  ``None`` becomes an empty string.
    """
    if value is None:
        return ""
    text = str(value)
    for _ in range(_MAX_PASSES):
        stripped = _text_content(text)
        if stripped == text:
            break
        text = stripped
    return " ".join(text.split())


def scrub_filename(value):
    """Drop every character that is not safe in a bare file name.

    Path separators, quotes and angle brackets disappear, so the result can
    never point outside the icon directory or break out of an attribute.
    """
    if value is None:
        return ""
    return _FILENAME_UNSAFE.sub("", str(value)).strip()
