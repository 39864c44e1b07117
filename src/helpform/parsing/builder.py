"""Command model builder.

Turns classified help lines into a Command. Parsing is tolerant: an entry
that matches none of the known shapes is dropped, logged at debug level
and recorded in ``Command.parse_warnings``. The resulting model may be
incomplete but is always usable.
"""

import itertools
import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from helpform.models import Command, LineKind, Option, Positional, ValueKind

from .classifier import ClassifiedLine

logger = logging.getLogger(__name__)

# "-c, --count <N>", "--count=<N>", "-v", "--color [<WHEN>]", "-I DIR...", "-v, --verbose..."
OPTION_PATTERN = re.compile(
    r"^\s*"
    r"(?:"
    r"(?P<short>-[A-Za-z0-9?])(?![\w-])(?:,?\s*(?P<long>--[A-Za-z0-9][\w-]*))?"
    r"|(?P<long_only>--[A-Za-z0-9][\w-]*)"
    r")"
    r"(?P<flag_multi>\.\.\.)?"
    r"(?:(?:=|\s)(?P<placeholder>"
    r"\[?<[^>]+>\]?(?:\.\.\.)?"
    r"|\[[A-Za-z][\w-]*\](?:\.\.\.)?"
    r"|[A-Z][A-Z0-9_-]*(?:\.\.\.)?(?=\s|$)"
    r"))?"
    r"(?P<rest>.*)$"
)
EXTRA_PLACEHOLDERS = re.compile(r"^(?:\s<[^>]+>(?:\.\.\.)?)+")

# "<NAME>  The name", "[FILES]...  Input files", "input  Sets the input"
ARGUMENT_PATTERN = re.compile(
    r"^\s*(?P<token>[<\[][^>\]]+[>\]]|[A-Za-z_][\w-]*)(?P<multi>\.\.\.)?(?P<rest>.*)$"
)

USAGE_PREFIX = re.compile(r"^\s*usage:\s*", re.IGNORECASE)
USAGE_TOKEN = re.compile(
    r"\[[^\[\]]*(?:\[[^\[\]]*\][^\[\]]*)*\](?:\.\.\.)?|<[^<>]+>(?:\.\.\.)?|\S+"
)

DEFAULT_MARKER = re.compile(r"\[default: ([^\]]*)\]")
POSSIBLE_VALUES_MARKER = re.compile(r"\[possible values: ([^\]]*)\]")
ANY_MARKER = re.compile(
    r"\s*\[(?:default|possible values|env|aliases|alias|short aliases|short alias):[^\]]*\]"
)
POSSIBLE_VALUES_HEADING = re.compile(r"^possible values:$", re.IGNORECASE)
POSSIBLE_VALUE_BULLET = re.compile(r"^-\s+(?P<value>[^\s:]+)(?::.*)?$")

# Usage placeholders standing for groups rather than a single positional
GROUP_PLACEHOLDERS = {"OPTIONS", "FLAGS"}
SUBCOMMAND_PLACEHOLDERS = {"COMMAND", "SUBCOMMAND", "COMMANDS", "SUBCOMMANDS"}

NUMERIC_NAMES = {
    "N", "NUM", "NUMBER", "COUNT", "INT", "INTEGER", "FLOAT", "PORT", "SIZE",
    "LIMIT", "JOBS", "THREADS", "TIMEOUT", "SECONDS", "SECS", "MS", "DEPTH",
    "LEVEL", "RETRIES", "WIDTH", "HEIGHT",
}
NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


@dataclass
class _Entry:
    """An entry line with the continuation lines that follow it."""

    kind: LineKind
    head: str
    continuation: list[str] = field(default_factory=list)


@dataclass
class _Markers:
    """Help text with clap's trailing markers pulled out."""

    help_text: str
    default: str | None
    choices: list[str]


def is_number(text: str) -> bool:
    """Check if text is an integer or decimal literal."""
    return bool(NUMBER_PATTERN.match(text.strip()))


def _clean_placeholder(token: str) -> str:
    return token.strip("[]<>.")


def _extract_markers(head_rest: str, continuation: Sequence[str]) -> _Markers:
    """Collect description text, default and choices for one entry."""
    text_parts = [head_rest]
    choices: list[str] = []
    in_possible_values = False

    for line in continuation:
        stripped = line.strip()
        if POSSIBLE_VALUES_HEADING.match(stripped):
            in_possible_values = True
            continue
        bullet = POSSIBLE_VALUE_BULLET.match(stripped)
        if in_possible_values and bullet:
            choices.append(bullet.group("value"))
            continue
        in_possible_values = False
        text_parts.append(stripped)

    text = " ".join(part.strip() for part in text_parts if part.strip())

    default_match = DEFAULT_MARKER.search(text)
    default = default_match.group(1).strip() if default_match else None

    values_match = POSSIBLE_VALUES_MARKER.search(text)
    if values_match:
        choices = [value.strip() for value in values_match.group(1).split(",") if value.strip()]

    help_text = re.sub(r"\s+", " ", ANY_MARKER.sub("", text)).strip()
    return _Markers(help_text=help_text, default=default, choices=choices)


def _infer_kind(value_name: str | None, markers: _Markers, multiple: bool) -> ValueKind:
    """Pick a value kind for a value-carrying option or positional."""
    if multiple:
        return ValueKind.REPEATABLE
    if markers.choices:
        return ValueKind.ENUM
    if markers.default is not None and is_number(markers.default):
        return ValueKind.NUMBER
    if value_name and value_name.upper() in NUMERIC_NAMES:
        return ValueKind.NUMBER
    return ValueKind.STRING


def parse_option(entry_text: str, continuation: Sequence[str] = ()) -> Option | None:
    """
    Parse one option entry.

    Args:
        entry_text: The option line, e.g. "  -c, --count <N>  Times [default: 1]"
        continuation: Wrapped or long-help lines belonging to the entry

    Returns:
        The Option, or None if the line does not have an option shape
    """
    match = OPTION_PATTERN.match(entry_text)
    if not match:
        return None

    short_flag = match.group("short")
    long_flag = match.group("long") or match.group("long_only")
    placeholder = match.group("placeholder")
    rest = EXTRA_PLACEHOLDERS.sub("", match.group("rest"))

    markers = _extract_markers(rest, continuation)

    if placeholder is None:
        return Option(
            long_flag=long_flag,
            short_flag=short_flag,
            value_kind=ValueKind.FLAG,
            help_text=markers.help_text,
        )

    value_name = _clean_placeholder(placeholder)
    kind = _infer_kind(value_name, markers, placeholder.endswith("..."))
    return Option(
        long_flag=long_flag,
        short_flag=short_flag,
        value_kind=kind,
        value_name=value_name,
        default=markers.default,
        choices=markers.choices,
        help_text=markers.help_text,
    )


@dataclass
class UsageInfo:
    """What the usage line reveals about a command."""

    positionals: list[tuple[str, bool, bool]] = field(default_factory=list)  # name, required, multiple
    required_flags: set[str] = field(default_factory=set)
    subcommand_required: bool = False


def parse_usage(
    usage: str, value_flags: Iterable[str] = (), known_flags: Iterable[str] = ()
) -> UsageInfo:
    """
    Recover positionals and required flags from a usage line.

    Args:
        usage: Usage line, with or without the "Usage:" prefix
        value_flags: Flags known to take a value, so their placeholder is
            not mistaken for a positional
        known_flags: Every documented flag. A flag missing from both sets is
            assumed to take the placeholder that follows it.

    Returns:
        UsageInfo with positionals in left-to-right order
    """
    info = UsageInfo()
    tokens = USAGE_TOKEN.findall(USAGE_PREFIX.sub("", usage))
    value_flags = set(value_flags)
    known_flags = set(known_flags) | value_flags

    # Program name and subcommand path
    index = 0
    while index < len(tokens) and tokens[index][0] not in "-<[":
        index += 1

    expect_value = False
    for token in tokens[index:]:
        if token.startswith("-"):
            if token == "--":
                expect_value = False
                continue
            flag = token.split("=", 1)[0].rstrip(".")
            info.required_flags.add(flag)
            expect_value = "=" not in token and (flag in value_flags or flag not in known_flags)
            continue

        multiple = token.endswith("...")
        name = _clean_placeholder(token)

        if token.startswith("<"):
            if expect_value:
                expect_value = False
                continue
            if name.upper() in SUBCOMMAND_PLACEHOLDERS:
                info.subcommand_required = True
                continue
            info.positionals.append((name, True, multiple))
            continue

        expect_value = False
        if not token.startswith("[") or "]" not in token:
            continue

        inner = token[1:token.rindex("]")].strip()
        multiple = multiple or inner.endswith("...")
        if inner.startswith("-") or name.upper() in GROUP_PLACEHOLDERS | SUBCOMMAND_PLACEHOLDERS:
            continue
        if re.fullmatch(r"[\w-]+", name):
            info.positionals.append((name, False, multiple))

    return info


def _collect_entries(lines: Sequence[ClassifiedLine]) -> tuple[list[str], list[str], list[_Entry], list[str]]:
    """Group lines into description, usage, entries and dropped lines."""
    description: list[str] = []
    usage: list[str] = []
    entries: list[_Entry] = []
    dropped: list[str] = []
    current: _Entry | None = None

    for kind, text in lines:
        if kind in (LineKind.OPTION_LINE, LineKind.ARGUMENT_LINE, LineKind.SUBCOMMAND_LINE):
            current = _Entry(kind, text)
            entries.append(current)
        elif kind == LineKind.CONTINUATION:
            if current is not None:
                current.continuation.append(text)
            else:
                dropped.append(text)
        elif kind == LineKind.BLANK:
            continue
        else:
            current = None
            if kind == LineKind.DESCRIPTION:
                description.append(text.strip())
            elif kind == LineKind.USAGE:
                usage.append(text.strip())
            elif kind == LineKind.UNRECOGNIZED:
                dropped.append(text)

    return description, usage, entries, dropped


def _first_usage(usage_lines: Sequence[str]) -> str | None:
    """Return the first usage form, skipping a bare "USAGE:" header."""
    for line in usage_lines:
        if USAGE_PREFIX.sub("", line).strip():
            return line
    return None


def build_command(
    name: str,
    lines: Sequence[ClassifiedLine],
    *,
    command_id: int = 0,
    allocate_child: Callable[[str, str | None], int] | None = None,
    ignored_flags: Iterable[str] = (),
    ignored_subcommands: Iterable[str] = (),
) -> Command:
    """
    Build a Command from classified help lines.

    Args:
        name: Command name as typed on the command line
        lines: Output of classify() for this command's help text
        command_id: Arena id to give the command
        allocate_child: Called with (name, description) for each subcommand
            line; returns the id of an unresolved placeholder node. Defaults
            to sequential ids after command_id.
        ignored_flags: Flags that never become options (e.g. --help). Matched
            against the option key, so "-h" only drops an option with no long flag
        ignored_subcommands: Subcommand names to leave out (e.g. help)

    Returns:
        A resolved Command. Its subcommands point at unresolved placeholders.
    """
    ignored_flags = set(ignored_flags)
    ignored_subcommands = set(ignored_subcommands)
    if allocate_child is None:
        ids = itertools.count(command_id + 1)

        def allocate_child(_name: str, _description: str | None) -> int:
            return next(ids)

    description, usage_lines, entries, dropped = _collect_entries(lines)
    warnings = list(dropped)

    options: list[Option] = []
    arguments: dict[str, _Markers] = {}
    subcommands: dict[str, int] = {}
    documented_flags: set[str] = set()
    value_flags: set[str] = set()

    for entry in entries:
        if entry.kind == LineKind.OPTION_LINE:
            option = parse_option(entry.head, entry.continuation)
            if option is None:
                logger.debug(f"Dropping unparseable option line in {name}: {entry.head!r}")
                warnings.append(entry.head)
                continue
            flags = [flag for flag in (option.long_flag, option.short_flag) if flag]
            documented_flags.update(flags)
            if option.value_kind != ValueKind.FLAG:
                value_flags.update(flags)
            if option.key in ignored_flags:
                continue
            options.append(option)

        elif entry.kind == LineKind.ARGUMENT_LINE:
            match = ARGUMENT_PATTERN.match(entry.head)
            if not match:
                warnings.append(entry.head)
                continue
            arguments[_clean_placeholder(match.group("token"))] = _extract_markers(
                match.group("rest"), entry.continuation
            )

        else:
            sub_name, _, sub_rest = entry.head.strip().partition(" ")
            sub_name = sub_name.rstrip(",")
            if sub_name in ignored_subcommands:
                continue
            sub_description = " ".join(
                part.strip() for part in [sub_rest, *entry.continuation] if part.strip()
            )
            subcommands[sub_name] = allocate_child(sub_name, sub_description or None)

    usage = _first_usage(usage_lines)
    positionals: list[Positional] = []
    subcommand_required = False

    if usage is None:
        logger.debug(f"No usage line in help for {name}; positionals left empty")
    else:
        info = parse_usage(usage, value_flags, documented_flags)
        subcommand_required = info.subcommand_required

        for option in options:
            if option.long_flag in info.required_flags or option.short_flag in info.required_flags:
                option.required = True

        for position, (arg_name, required, multiple) in enumerate(info.positionals):
            markers = arguments.get(arg_name, _Markers("", None, []))
            positionals.append(
                Positional(
                    name=arg_name,
                    value_kind=_infer_kind(arg_name, markers, multiple),
                    required=required,
                    help_text=markers.help_text,
                    position_index=position,
                    default=markers.default,
                    choices=markers.choices,
                )
            )

    if warnings:
        logger.debug(f"Skipped {len(warnings)} unrecognized help line(s) for {name}")

    return Command(
        id=command_id,
        name=name,
        description="\n".join(line for line in description if line) or None,
        options=options,
        positionals=positionals,
        subcommands=subcommands,
        subcommand_required=subcommand_required,
        usage=usage,
        resolved=True,
        parse_warnings=warnings,
    )
