"""Tests for the help-text line classifier."""

import pytest

from helpform.models import LineKind
from helpform.parsing import classify
from helpform.parsing.classifier import header_kind


def kinds(text: str) -> list[LineKind]:
    return [line.kind for line in classify(text)]


@pytest.mark.unit
class TestHeaderKind:
    """Test section header recognition."""

    @pytest.mark.parametrize(
        "line,expected",
        [
            ("Options:", LineKind.OPTIONS_HEADER),
            ("OPTIONS:", LineKind.OPTIONS_HEADER),
            ("FLAGS:", LineKind.OPTIONS_HEADER),
            ("Global Options:", LineKind.OPTIONS_HEADER),
            ("Arguments:", LineKind.ARGUMENTS_HEADER),
            ("ARGS:", LineKind.ARGUMENTS_HEADER),
            ("Commands:", LineKind.SUBCOMMANDS_HEADER),
            ("SUBCOMMANDS:", LineKind.SUBCOMMANDS_HEADER),
            ("USAGE:", LineKind.USAGE),
        ],
    )
    def test_known_headers(self, line, expected):
        assert header_kind(line) == expected

    def test_unknown_header(self):
        assert header_kind("Examples:") == LineKind.UNRECOGNIZED

    def test_not_a_header(self):
        assert header_kind("A test app") is None
        assert header_kind("Usage: app [OPTIONS]") is None


@pytest.mark.unit
class TestClassify:
    """Test classification of whole help texts."""

    def test_one_result_per_line(self, app_help):
        assert len(classify(app_help)) == len(app_help.splitlines())

    def test_clap4_layout(self, app_help):
        result = kinds(app_help)

        assert result == [
            LineKind.DESCRIPTION,
            LineKind.BLANK,
            LineKind.USAGE,
            LineKind.BLANK,
            LineKind.ARGUMENTS_HEADER,
            LineKind.ARGUMENT_LINE,
            LineKind.BLANK,
            LineKind.OPTIONS_HEADER,
            LineKind.OPTION_LINE,
            LineKind.OPTION_LINE,
            LineKind.OPTION_LINE,
            LineKind.OPTION_LINE,
        ]

    def test_subcommand_lines(self, git_help):
        lines = classify(git_help)
        subcommands = [line.text.split()[0] for line in lines if line.kind == LineKind.SUBCOMMAND_LINE]

        assert subcommands == ["clone", "push", "add", "help"]

    def test_long_only_option_is_entry(self):
        """Long-only options are padded further right than short+long ones."""
        text = "Options:\n      --color <WHEN>  Coloring\n  -v, --verbose   Verbose\n"

        assert kinds(text) == [
            LineKind.OPTIONS_HEADER,
            LineKind.OPTION_LINE,
            LineKind.OPTION_LINE,
        ]

    def test_continuation_lines(self):
        text = (
            "Options:\n"
            "  -c, --color <WHEN>\n"
            "          Coloring of the output\n"
            "\n"
            "          Possible values:\n"
            "          - always: Always color\n"
            "          - never:  Never color\n"
            "\n"
            "  -v, --verbose\n"
            "          Print more\n"
        )

        assert kinds(text) == [
            LineKind.OPTIONS_HEADER,
            LineKind.OPTION_LINE,
            LineKind.CONTINUATION,
            LineKind.BLANK,
            LineKind.CONTINUATION,
            LineKind.CONTINUATION,
            LineKind.CONTINUATION,
            LineKind.BLANK,
            LineKind.OPTION_LINE,
            LineKind.CONTINUATION,
        ]

    def test_clap2_layout(self):
        text = (
            "app 1.0\n"
            "Does things\n"
            "\n"
            "USAGE:\n"
            "    app [FLAGS] <INPUT>\n"
            "\n"
            "FLAGS:\n"
            "    -h, --help       Prints help information\n"
            "\n"
            "ARGS:\n"
            "    <INPUT>    Input file\n"
        )

        assert kinds(text) == [
            LineKind.DESCRIPTION,
            LineKind.DESCRIPTION,
            LineKind.BLANK,
            LineKind.USAGE,
            LineKind.USAGE,
            LineKind.BLANK,
            LineKind.OPTIONS_HEADER,
            LineKind.OPTION_LINE,
            LineKind.BLANK,
            LineKind.ARGUMENTS_HEADER,
            LineKind.ARGUMENT_LINE,
        ]

    def test_unknown_section_lines_are_description(self):
        text = "Examples:\n  app --count 3 bob\n"

        assert kinds(text) == [LineKind.UNRECOGNIZED, LineKind.DESCRIPTION]

    def test_garbage_inside_options_is_unrecognized(self):
        text = "Options:\n  -v, --verbose  Verbose\n  *** not an option ***\n"

        assert kinds(text)[-1] == LineKind.UNRECOGNIZED

    def test_empty_text(self):
        assert classify("") == []

    def test_tabs_are_expanded(self):
        result = classify("Options:\n\t-v, --verbose\tVerbose\n")

        assert result[1].kind == LineKind.OPTION_LINE
        assert "\t" not in result[1].text
