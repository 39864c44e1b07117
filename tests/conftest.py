"""Pytest fixtures for tests."""

from collections.abc import Sequence
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from helpform.core import CommandCatalog, FormEngine, SessionController
from helpform.exceptions import HelpFetchError

APP_HELP = """\
A test app

Usage: app [OPTIONS] <NAME>

Arguments:
  <NAME>  Name of the person to greet

Options:
  -c, --count <COUNT>  Number of times to greet [default: 1]
  -v, --verbose        Print more output
  -h, --help           Print help
  -V, --version        Print version
"""

GIT_HELP = """\
A fictional version control system

Usage: git [OPTIONS] <COMMAND>

Commands:
  clone  Clones repos
  push   Pushes things
  add    Adds things
  help   Print this message or the help of the given subcommand(s)

Options:
      --color <WHEN>  Coloring [default: auto] [possible values: always, auto, never]
  -C <PATH>           Run as if started in PATH
  -h, --help          Print help
"""

GIT_CLONE_HELP = """\
Clones repos

Usage: git clone [OPTIONS] <REMOTE>

Arguments:
  <REMOTE>  The remote to clone

Options:
      --depth <DEPTH>  Create a shallow clone with history truncated
  -h, --help           Print help
"""

GIT_PUSH_HELP = """\
Pushes things

Usage: git push [OPTIONS] [REMOTE]

Arguments:
  [REMOTE]  The remote to target

Options:
  -f, --force  Overwrite remote history
  -h, --help   Print help
"""

GIT_ADD_HELP = """\
Adds things

Usage: git add <PATH>...

Arguments:
  <PATH>...  Stuff to add

Options:
  -h, --help  Print help
"""


class FakeHelpSource:
    """Serves canned help text per subcommand path and records every fetch."""

    def __init__(self, pages: dict[tuple[str, ...], str]):
        self.pages = pages
        self.calls: list[tuple[str, ...]] = []

    def fetch(self, path: Sequence[str]) -> str:
        key = tuple(path)
        self.calls.append(key)
        if key not in self.pages:
            raise HelpFetchError(["fake", *key, "--help"], "no such page")
        return self.pages[key]


@pytest.fixture
def temp_dir():
    """Create a temporary directory that gets cleaned up."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def app_source():
    """Help source for a single-command tool."""
    return FakeHelpSource({(): APP_HELP})


@pytest.fixture
def git_source():
    """Help source for a tool with subcommands."""
    return FakeHelpSource(
        {
            (): GIT_HELP,
            ("clone",): GIT_CLONE_HELP,
            ("push",): GIT_PUSH_HELP,
            ("add",): GIT_ADD_HELP,
        }
    )


IGNORED_FLAGS = ["--help", "-h", "--version", "-V"]


@pytest.fixture
def app_catalog(app_source):
    """Catalog for the single-command tool, root not yet resolved."""
    return CommandCatalog(app_source, "app", ignored_flags=IGNORED_FLAGS)


@pytest.fixture
def git_catalog(git_source):
    """Catalog for the tool with subcommands, root not yet resolved."""
    return CommandCatalog(
        git_source, "git", ignored_flags=IGNORED_FLAGS, ignored_subcommands=["help"]
    )


@pytest.fixture
def engine():
    """Form engine with the default (case-sensitive) choice policy."""
    return FormEngine()


@pytest.fixture
def app_session(app_catalog):
    """Started session for the single-command tool."""
    controller = SessionController(app_catalog)
    controller.start()
    return controller


@pytest.fixture
def git_session(git_catalog):
    """Started session for the tool with subcommands."""
    controller = SessionController(git_catalog)
    controller.start()
    return controller


@pytest.fixture
def app_help():
    """Help text of a single-command tool."""
    return APP_HELP


@pytest.fixture
def git_help():
    """Help text of a tool with subcommands."""
    return GIT_HELP
