"""Retrieval of help text from the target tool."""

import logging
import os
import re
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from helpform.exceptions import HelpFetchError

logger = logging.getLogger(__name__)

ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")

# Ask well-behaved tools for plain, uncoloured output
PLAIN_OUTPUT_ENV = {"NO_COLOR": "1", "CLICOLOR": "0", "TERM": "dumb"}


@runtime_checkable
class HelpSource(Protocol):
    """Anything that can produce help text for a subcommand path."""

    def fetch(self, path: Sequence[str]) -> str:
        """
        Get the help text for a command.

        Args:
            path: Subcommand names below the root tool (empty for the root)

        Returns:
            Raw help text

        Raises:
            HelpFetchError: If no help text could be obtained
        """
        ...


class SubprocessHelpSource:
    """
    Runs ``<tool> [subcommands...] --help`` and returns what it prints.

    Help goes to stdout for clap, but some tools print it to stderr or exit
    non-zero, so the first non-empty stream is used and a non-zero exit only
    logs a warning.
    """

    def __init__(
        self,
        base_argv: Sequence[str],
        help_flag: str = "--help",
        timeout: float = 10.0,
        cwd: Path | None = None,
        extra_env: Mapping[str, str] | None = None,
    ):
        """
        Initialize the help source.

        Args:
            base_argv: Command that starts the tool, e.g. ["cargo"] or ["python", "app.py"]
            help_flag: Flag that makes the tool print its help
            timeout: Seconds to wait for the help command
            cwd: Working directory to run in (None = current directory)
            extra_env: Variables added to the inherited environment
        """
        if not base_argv:
            raise ValueError("base_argv must name the tool to run")
        self.base_argv = list(base_argv)
        self.help_flag = help_flag
        self.timeout = timeout
        self.cwd = cwd
        self.extra_env = dict(extra_env or {})

    def build_help_argv(self, path: Sequence[str]) -> list[str]:
        """Argument vector that prints help for the given subcommand path."""
        return [*self.base_argv, *path, self.help_flag]

    def fetch(self, path: Sequence[str]) -> str:
        """Run the help command for a subcommand path and return its text."""
        argv = self.build_help_argv(path)
        env = {**os.environ, **PLAIN_OUTPUT_ENV, **self.extra_env}
        logger.info(f"Fetching help: {argv}")

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
                cwd=self.cwd,
                env=env,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as e:
            raise HelpFetchError(argv, "executable not found") from e
        except PermissionError as e:
            raise HelpFetchError(argv, "permission denied") from e
        except subprocess.TimeoutExpired as e:
            raise HelpFetchError(argv, f"timed out after {self.timeout:g}s") from e

        text = result.stdout if result.stdout.strip() else result.stderr
        if not text.strip():
            raise HelpFetchError(argv, f"no help output (exit code {result.returncode})")
        if result.returncode != 0:
            logger.warning(f"Help command {argv} exited with {result.returncode}; using its output anyway")

        return ANSI_ESCAPE.sub("", text)
