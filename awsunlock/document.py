"""
Config document: an ordered list of credentials file lines grouped into profiles.
"""

from .lines import (
    Entry,
    Opaque,
    SectionHeader,
    comment_text,
    is_production_marker,
    parse_line,
    render,
)

PREAMBLE = None


class Document:
    """
    A parsed credentials file.

    Lines are kept in file order. Every Entry/Opaque line after a header
    (active or locked) belongs to that header's section until the next
    header; lines before the
    first header form the preamble, which is never a lock/unlock target.
    """

    def __init__(self, lines=None, trailing_newline=True):
        self.lines = list(lines or [])
        self.trailing_newline = trailing_newline

    @classmethod
    def parse(cls, text):
        """
        Parse credentials file text. Never fails on malformed content.

        Args:
            text: Full file contents

        Returns:
            Document
        """
        if text == "":
            return cls([], trailing_newline=False)

        raw_lines = text.split("\n")
        trailing_newline = raw_lines[-1] == ""
        if trailing_newline:
            raw_lines.pop()
        return cls([parse_line(raw) for raw in raw_lines], trailing_newline)

    def serialize(self):
        """Rebuild the file text, one output line per line in the document."""
        text = "\n".join(render(line) for line in self.lines)
        if self.trailing_newline and self.lines:
            text += "\n"
        return text

    def __eq__(self, other):
        if not isinstance(other, Document):
            return NotImplemented
        return self.lines == other.lines and self.trailing_newline == other.trailing_newline

    def __repr__(self):
        return f"Document({len(self.lines)} lines)"

    def sections(self):
        """
        Build the section view.

        Returns:
            dict: section name (None for the preamble) -> list of line
            positions of its body lines, in file order. Duplicate headers
            are merged into one entry.
        """
        view = {PREAMBLE: []}
        current = PREAMBLE
        for index, line in enumerate(self.lines):
            if isinstance(line, SectionHeader):
                current = line.name
                view.setdefault(current, [])
            else:
                view[current].append(index)
        return view

    def find_section(self, name):
        """
        Find the body of a section by exact, case-sensitive name.

        Returns:
            range of line positions after the first matching header, or None
            if there is no such section
        """
        start = None
        for index, line in enumerate(self.lines):
            if not isinstance(line, SectionHeader):
                continue
            if start is not None:
                return range(start, index)
            if line.name == name:
                start = index + 1
        if start is None:
            return None
        return range(start, len(self.lines))

    def profile_names(self):
        """List section names in file order, without the preamble."""
        return [name for name in self.sections() if name is not PREAMBLE]

    def entries(self, name):
        """Return the Entry lines of a section (empty if it does not exist)."""
        positions = self.sections().get(name, []) if name is not PREAMBLE else []
        return [self.lines[i] for i in positions if isinstance(self.lines[i], Entry)]

    def set_locked(self, name, locked):
        """
        Set the lock state of every entry in a section.

        Args:
            name: Section name
            locked: True to comment entries out, False to activate them

        Unlocking also activates any locked ``# [name]`` header of the
        section, otherwise the activated entries would be read as part of the
        profile above it. Locking never comments headers out.

        Returns:
            int: number of entries whose state changed (0 if the section does
            not exist or has nothing to change)
        """
        if name is PREAMBLE:
            return 0
        if not locked:
            for index, line in enumerate(self.lines):
                if isinstance(line, SectionHeader) and line.name == name:
                    self.lines[index] = line.activated()
        changed = 0
        for index in self.sections().get(name, []):
            line = self.lines[index]
            if isinstance(line, Entry) and line.locked != locked:
                self.lines[index] = line.with_locked(locked)
                changed += 1
        return changed

    def profile_status(self, name):
        """
        Summarise the lock state of a profile.

        Returns:
            str: "locked", "unlocked", "partial" or "empty"
        """
        entries = self.entries(name)
        if not entries:
            return "empty"
        locked = sum(1 for entry in entries if entry.locked)
        if locked == len(entries):
            return "locked"
        if locked == 0:
            return "unlocked"
        return "partial"

    def is_production(self, name):
        """
        Check if a profile is marked with a ``# production`` comment.

        The marker must be in the block of comments and blank lines directly
        above the profile's header.
        """
        for index, line in enumerate(self.lines):
            if isinstance(line, SectionHeader) and line.name == name:
                for above in reversed(self.lines[:index]):
                    if is_production_marker(above):
                        return True
                    if not isinstance(above, Opaque):
                        break
                    if above.raw.strip() and comment_text(above) is None:
                        break
        return False
