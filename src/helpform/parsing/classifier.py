"""Line classifier for clap-style help text.

Splits raw help output into tagged lines so the builder never has to
track section state itself. Recognizes both the current clap layout
("Usage: app [OPTIONS]", "Options:") and the older upper-case one
("USAGE:", "FLAGS:", "SUBCOMMANDS:").

Classification is a pure function of the input text. Lines that fit no
pattern are tagged UNRECOGNIZED and left for the builder to skip.
"""

import re
from typing import NamedTuple

from helpform.models import LineKind

USAGE_PATTERN = re.compile(r"^usage:\s*(?P<rest>.*)$", re.IGNORECASE)
HEADER_PATTERN = re.compile(r"^(?P<title>[A-Za-z][\w -]*):$")
OPTION_ENTRY_PATTERN = re.compile(r"^-{1,2}[A-Za-z0-9?]")
ARGUMENT_ENTRY_PATTERN = re.compile(r"^[<\[]?[A-Za-z_]")
SUBCOMMAND_ENTRY_PATTERN = re.compile(r"^[A-Za-z0-9][\w.:-]*(\s|,|$)")

# Entries of one section may be indented slightly differently, e.g. clap pads
# long-only options ("      --count") to line up with "  -c, --count".
ENTRY_INDENT_SLACK = 4

# Last word of a header title -> section it opens
SECTION_TITLES = {
    "options": LineKind.OPTIONS_HEADER,
    "flags": LineKind.OPTIONS_HEADER,
    "arguments": LineKind.ARGUMENTS_HEADER,
    "args": LineKind.ARGUMENTS_HEADER,
    "positionals": LineKind.ARGUMENTS_HEADER,
    "commands": LineKind.SUBCOMMANDS_HEADER,
    "subcommands": LineKind.SUBCOMMANDS_HEADER,
}

# Section header -> (entry line kind, pattern an entry must match)
SECTION_ENTRIES = {
    LineKind.OPTIONS_HEADER: (LineKind.OPTION_LINE, OPTION_ENTRY_PATTERN),
    LineKind.ARGUMENTS_HEADER: (LineKind.ARGUMENT_LINE, ARGUMENT_ENTRY_PATTERN),
    LineKind.SUBCOMMANDS_HEADER: (LineKind.SUBCOMMAND_LINE, SUBCOMMAND_ENTRY_PATTERN),
}


class ClassifiedLine(NamedTuple):
    """A help line tagged with the kind of content it carries."""

    kind: LineKind
    text: str


def header_kind(line: str) -> LineKind | None:
    """
    Identify a section header line.

    Args:
        line: Non-indented line, already stripped of trailing whitespace

    Returns:
        The header kind, LineKind.UNRECOGNIZED for an unknown header such
        as "Examples:", or None when the line is not a header at all
    """
    match = HEADER_PATTERN.match(line)
    if not match:
        return None
    last_word = match.group("title").split()[-1].lower()
    if last_word == "usage":
        return LineKind.USAGE
    return SECTION_TITLES.get(last_word, LineKind.UNRECOGNIZED)


class _Classifier:
    """Single-pass state for classify()."""

    def __init__(self) -> None:
        self.section: LineKind | None = None
        self.entry_indent: int | None = None
        self.after_blank = False

    def open_section(self, section: LineKind | None) -> None:
        self.section = section
        self.entry_indent = None

    def classify_line(self, line: str) -> LineKind:
        if not line.strip():
            self.after_blank = True
            return LineKind.BLANK

        after_blank = self.after_blank
        self.after_blank = False
        stripped = line.lstrip()
        indent = len(line) - len(stripped)

        if indent == 0:
            return self._classify_flush(line, after_blank)
        return self._classify_indented(stripped, indent, after_blank)

    def _classify_flush(self, line: str, after_blank: bool) -> LineKind:
        if USAGE_PATTERN.match(line):
            self.open_section(LineKind.USAGE)
            return LineKind.USAGE

        kind = header_kind(line)
        if kind is not None:
            self.open_section(kind if kind != LineKind.UNRECOGNIZED else None)
            return LineKind.USAGE if kind == LineKind.USAGE else kind

        if self.section is not None and self.section != LineKind.USAGE and not after_blank:
            return LineKind.UNRECOGNIZED

        self.open_section(None)
        return LineKind.DESCRIPTION

    def _classify_indented(self, stripped: str, indent: int, after_blank: bool) -> LineKind:
        if self.section is None:
            return LineKind.DESCRIPTION

        if self.section == LineKind.USAGE:
            if after_blank:
                self.open_section(None)
                return LineKind.DESCRIPTION
            return LineKind.USAGE

        entry_kind, entry_pattern = SECTION_ENTRIES[self.section]
        at_entry_depth = (
            self.entry_indent is None or indent <= self.entry_indent + ENTRY_INDENT_SLACK
        )
        if at_entry_depth and entry_pattern.match(stripped):
            if self.entry_indent is None or indent < self.entry_indent:
                self.entry_indent = indent
            return entry_kind

        if self.entry_indent is not None and indent > self.entry_indent:
            return LineKind.CONTINUATION

        return LineKind.UNRECOGNIZED


def classify(text: str) -> list[ClassifiedLine]:
    """
    Tag every line of a help text with its kind.

    A header line ("Options:", "Commands:", "Arguments:") switches the
    active section and following indented lines become entries of that
    section. More deeply indented lines after an entry are continuations
    of it. A blank line followed by non-indented text leaves the section;
    indented text after a blank line stays in it, which is how clap's long
    help separates entries.

    Args:
        text: Raw help output

    Returns:
        One ClassifiedLine per input line, in order
    """
    state = _Classifier()
    result = []
    for raw_line in text.expandtabs(4).splitlines():
        line = raw_line.rstrip()
        result.append(ClassifiedLine(state.classify_line(line), line))
    return result
