"""Session-lifetime arena of Command nodes with lazy subcommand resolution."""

import itertools
import logging
from collections.abc import Iterable

from helpform.exceptions import CommandNotFoundError
from helpform.models import Command
from helpform.parsing import HelpSource, build_command, classify

logger = logging.getLogger(__name__)


class CommandCatalog:
    """
    Arena of Command nodes addressed by id.

    Subcommands are allocated as unresolved placeholders when their parent
    is parsed. The first time one is resolved its help text is fetched and
    parsed; afterwards the parsed node is reused for the rest of the session
    and the tool is never asked again.

    Create one catalog per session and call close() when the session ends.

    Example:
        >>> catalog = CommandCatalog(SubprocessHelpSource(["cargo"]), "cargo")
        >>> root = catalog.load_root()
        >>> build = catalog.child(root, "build")  # runs `cargo build --help` once
    """

    ROOT_ID = 0

    def __init__(
        self,
        source: HelpSource,
        root_name: str,
        *,
        ignored_flags: Iterable[str] = (),
        ignored_subcommands: Iterable[str] = (),
    ):
        """
        Initialize the catalog with an unresolved root node.

        Args:
            source: Where help text comes from
            root_name: Display name of the root tool
            ignored_flags: Flags that never become form fields
            ignored_subcommands: Subcommands hidden from navigation
        """
        self._source = source
        self._ignored_flags = list(ignored_flags)
        self._ignored_subcommands = list(ignored_subcommands)
        self._ids = itertools.count(self.ROOT_ID)
        self._nodes: dict[int, Command] = {}
        self._parents: dict[int, int | None] = {}
        self._fetch_count = 0
        self._allocate(root_name, None, parent_id=None)

    # =================================================================
    # Arena access
    # =================================================================

    @property
    def root(self) -> Command:
        """Root command node (may still be unresolved)."""
        return self._nodes[self.ROOT_ID]

    @property
    def fetch_count(self) -> int:
        """Number of help texts fetched so far in this session."""
        return self._fetch_count

    def get(self, command_id: int) -> Command:
        """
        Get a node by id.

        Raises:
            KeyError: If no node has this id
        """
        return self._nodes[command_id]

    def path(self, command_id: int) -> list[Command]:
        """Nodes from the root down to the given command, inclusive."""
        chain = []
        current: int | None = command_id
        while current is not None:
            chain.append(self._nodes[current])
            current = self._parents[current]
        return list(reversed(chain))

    def subcommand_path(self, command_id: int) -> list[str]:
        """Subcommand names below the root leading to the given command."""
        return [command.name for command in self.path(command_id)[1:]]

    # =================================================================
    # Resolution
    # =================================================================

    def load_root(self) -> Command:
        """
        Resolve the root command.

        Raises:
            HelpFetchError: If the tool's help text cannot be obtained
        """
        return self.resolve(self.ROOT_ID)

    def resolve(self, command_id: int) -> Command:
        """
        Make sure a node has been parsed from its help text.

        Args:
            command_id: Node to resolve

        Returns:
            The resolved node (fetched at most once per session)

        Raises:
            HelpFetchError: If the help text cannot be obtained
        """
        placeholder = self._nodes[command_id]
        if placeholder.resolved:
            return placeholder

        path = self.subcommand_path(command_id)
        text = self._source.fetch(path)
        self._fetch_count += 1

        command = build_command(
            placeholder.name,
            classify(text),
            command_id=command_id,
            allocate_child=lambda name, description: self._allocate(
                name, description, parent_id=command_id
            ),
            ignored_flags=self._ignored_flags,
            ignored_subcommands=self._ignored_subcommands,
        )
        if command.description is None:
            command.description = placeholder.description

        self._nodes[command_id] = command
        logger.info(
            f"Resolved '{' '.join([self.root.name, *path])}': {len(command.options)} options, "
            f"{len(command.positionals)} positionals, {len(command.subcommands)} subcommands"
        )
        return command

    def child(self, command: Command, name: str) -> Command:
        """
        Look up and resolve a subcommand.

        Args:
            command: Parent command
            name: Subcommand name

        Returns:
            The resolved subcommand

        Raises:
            CommandNotFoundError: If the parent declares no such subcommand
            HelpFetchError: If the subcommand's help text cannot be obtained
        """
        child_id = command.subcommands.get(name)
        if child_id is None:
            raise CommandNotFoundError(command.name, name, list(command.subcommands))
        return self.resolve(child_id)

    def close(self) -> None:
        """Drop every cached node at the end of the session."""
        logger.debug(f"Closing command catalog ({len(self._nodes)} nodes)")
        self._nodes.clear()
        self._parents.clear()

    def __enter__(self) -> "CommandCatalog":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _allocate(self, name: str, description: str | None, parent_id: int | None) -> int:
        command_id = next(self._ids)
        self._nodes[command_id] = Command(id=command_id, name=name, description=description)
        self._parents[command_id] = parent_id
        return command_id
