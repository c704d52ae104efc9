"""Plain text to Atlassian Document Format (ADF) conversion.

Jira Cloud only accepts rich-text fields (issue ``description``, comment
``body``) as ADF documents. This module turns loosely formatted plain text
into that tree in a single pass over the input lines:

* blank line           -> closes any open list, emits nothing
* ``- item``           -> ``bulletList`` / ``listItem``
* ``1. item``          -> ``orderedList`` / ``listItem``
* ``Title`` + ``===``  -> ``heading`` level 1 (underline consumed)
* ``Title`` + ``---``  -> ``heading`` level 2 (underline consumed)
* anything else        -> ``paragraph`` holding the untrimmed line

Inline marks (bold, links, ...) are not recognised; every block carries a
single text leaf.

Usage:
    from tool_modules.aa_jira.src.adf import convert_to_adf, text_to_adf

    doc = convert_to_adf("Overview\\n========\\n- first\\n- second")
    payload = text_to_adf("Steps:\\n1. build\\n2. deploy")  # JSON-ready dict
"""

import re
from dataclasses import dataclass, field
from typing import Any, Literal, Union

ADF_VERSION = 1

BULLET_PREFIX = "- "
# Characters trimmed from line ends and accepted after an ordered-list marker.
# Unlike str.strip(), U+001C..U+001F and U+0085 are kept and U+FEFF is trimmed.
WHITESPACE = (
    "\t\n\v\f\r \u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)

ORDERED_PREFIX_RE = re.compile("^[0-9]+\\.[" + WHITESPACE + "]")
H1_UNDERLINE_RE = re.compile(r"=+")
H2_UNDERLINE_RE = re.compile(r"-+")


# ==================== Node types ====================


@dataclass
class Text:
    """Inline text leaf."""

    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass
class Paragraph:
    content: list[Text] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "paragraph", "content": [node.to_dict() for node in self.content]}


@dataclass
class Heading:
    level: Literal[1, 2]
    content: list[Text] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "heading",
            "attrs": {"level": self.level},
            "content": [node.to_dict() for node in self.content],
        }


@dataclass
class ListItem:
    """A list entry. Always wraps exactly one paragraph."""

    paragraph: Paragraph

    def to_dict(self) -> dict[str, Any]:
        return {"type": "listItem", "content": [self.paragraph.to_dict()]}


@dataclass
class BulletList:
    content: list[ListItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "bulletList", "content": [item.to_dict() for item in self.content]}


@dataclass
class OrderedList:
    content: list[ListItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "orderedList", "content": [item.to_dict() for item in self.content]}


Block = Union[Paragraph, Heading, BulletList, OrderedList]


@dataclass
class Document:
    """Root ADF node."""

    content: list[Block] = field(default_factory=list)
    version: int = ADF_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON structure expected by the Jira REST API."""
        return {
            "version": self.version,
            "type": "doc",
            "content": [block.to_dict() for block in self.content],
        }


# ==================== Conversion ====================


def _paragraph(text: str) -> Paragraph:
    return Paragraph(content=[Text(text)])


def _list_item(text: str) -> ListItem:
    return ListItem(paragraph=_paragraph(text))


def _heading_level(next_line: str) -> int | None:
    """Return the heading level an underline line implies, if any."""
    if not next_line:
        return None
    underline = next_line.strip(WHITESPACE)
    if H1_UNDERLINE_RE.fullmatch(underline):
        return 1
    if H2_UNDERLINE_RE.fullmatch(underline):
        return 2
    return None


def convert_to_adf(text: str) -> Document:
    """Convert plain text to an ADF document.

    Lines are classified in fixed priority order: blank, bullet item,
    ordered item, heading (current line followed by an ``=``/``-``
    underline), paragraph. List items of the same kind on consecutive
    lines share one list block; anything else closes the open list.

    A lone ``====`` or ``----`` line with no text line above it is not
    special-cased: it goes through the same rules and usually ends up as
    a literal paragraph.

    Args:
        text: Plain text, possibly empty

    Returns:
        Document tree. Never raises.
    """
    lines = text.split("\n")
    doc = Document()
    current_list: BulletList | OrderedList | None = None

    i = 0
    while i < len(lines):
        line = lines[i]
        trimmed = line.strip(WHITESPACE)
        next_line = lines[i + 1] if i + 1 < len(lines) else ""

        if not trimmed:
            current_list = None
            i += 1
            continue

        if trimmed.startswith(BULLET_PREFIX):
            if not isinstance(current_list, BulletList):
                current_list = BulletList()
                doc.content.append(current_list)
            current_list.content.append(_list_item(trimmed[len(BULLET_PREFIX) :]))
            i += 1
            continue

        if ORDERED_PREFIX_RE.match(trimmed):
            if not isinstance(current_list, OrderedList):
                current_list = OrderedList()
                doc.content.append(current_list)
            current_list.content.append(_list_item(ORDERED_PREFIX_RE.sub("", trimmed, count=1)))
            i += 1
            continue

        current_list = None

        level = _heading_level(next_line)
        if level is not None:
            doc.content.append(Heading(level=level, content=[Text(trimmed)]))
            i += 2  # Skip the underline
            continue

        doc.content.append(_paragraph(line))
        i += 1

    return doc


def text_to_adf(text: str) -> dict[str, Any]:
    """Convert plain text straight to a JSON-ready ADF dict."""
    return convert_to_adf(text).to_dict()
