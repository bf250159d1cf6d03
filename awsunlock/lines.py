"""
Line model for AWS credentials files.

Every physical line of a credentials file is exactly one of:

- SectionHeader: a ``[name]`` line that starts a profile section, active or
  locked (``# [name]``)
- Entry: a ``key = value`` line, active or locked (commented out)
- Opaque: anything else (blank lines, free-form comments, malformed text)

Lines remember enough of their original formatting that an unchanged line
renders back byte-for-byte.
"""

import re
from dataclasses import dataclass, replace

COMMENT_CHARS = "#;"
DEFAULT_MARKER = "# "

_HEADER_RE = re.compile(r"^\s*\[(?P<name>[^\]]*)\]\s*(?:[#;].*)?$")
_LOCKED_HEADER_RE = re.compile(
    r"^(?P<indent>[ \t]*)"
    r"(?P<marker>[#;][ \t]*)"
    r"(?P<body>\[(?P<name>[^\]]*)\][ \t]*)$"
)
_ENTRY_RE = re.compile(
    r"^(?P<indent>[ \t]*)"
    r"(?P<marker>[#;][ \t]*)?"
    r"(?P<key>[A-Za-z0-9_][A-Za-z0-9_.\-]*)"
    r"(?P<separator>[ \t]*=[ \t]*)"
    r"(?P<value>.*)$"
)


@dataclass(frozen=True)
class SectionHeader:
    name: str
    raw: str
    locked: bool = False

    def activated(self):
        """Return this header with its comment marker removed."""
        if not self.locked:
            return self
        match = _LOCKED_HEADER_RE.match(self.raw)
        return SectionHeader(name=self.name, raw=match.group("indent") + match.group("body"))


@dataclass(frozen=True)
class Entry:
    key: str
    value: str
    locked: bool
    indent: str = ""
    marker: str = ""
    separator: str = " = "

    def with_locked(self, locked):
        """Return a copy of this entry with the given lock state."""
        if locked == self.locked:
            return self
        return replace(self, locked=locked, marker=DEFAULT_MARKER if locked else "")


@dataclass(frozen=True)
class Opaque:
    raw: str


def parse_line(text):
    """
    Classify one physical line.

    Never raises: anything that is neither a header nor a key/value pair
    (commented or not) becomes Opaque. A commented ``[name]`` line is a
    locked header, so it still ends the section above it.

    Args:
        text: Line text without its trailing newline

    Returns:
        SectionHeader, Entry or Opaque
    """
    match = _HEADER_RE.match(text)
    if match:
        return SectionHeader(name=match.group("name").strip(), raw=text)

    match = _LOCKED_HEADER_RE.match(text)
    if match:
        return SectionHeader(name=match.group("name").strip(), raw=text, locked=True)

    match = _ENTRY_RE.match(text)
    if match:
        marker = match.group("marker") or ""
        return Entry(
            key=match.group("key"),
            value=match.group("value"),
            locked=bool(marker),
            indent=match.group("indent"),
            marker=marker,
            separator=match.group("separator"),
        )

    return Opaque(raw=text)


def render(line):
    """Render a line back to text (without newline)."""
    if isinstance(line, Entry):
        prefix = line.marker if line.locked else ""
        return f"{line.indent}{prefix}{line.key}{line.separator}{line.value}"
    if isinstance(line, SectionHeader):
        return line.raw
    if isinstance(line, Opaque):
        return line.raw
    raise TypeError(f"Not a credentials file line: {line!r}")


def comment_text(line):
    """Return the text of a free-form comment line, or None for anything else."""
    if not isinstance(line, Opaque):
        return None
    stripped = line.raw.strip()
    if not stripped or stripped[0] not in COMMENT_CHARS:
        return None
    return stripped[1:].strip()


def is_production_marker(line):
    """Check if a line is the ``# production`` marker comment."""
    return comment_text(line) == "production"
