"""Tests for the CommandCatalog arena."""

import pytest

from helpform.core import CommandCatalog
from helpform.exceptions import CommandNotFoundError, HelpFetchError


@pytest.mark.unit
class TestCatalog:
    """Test lazy resolution and caching."""

    def test_root_starts_unresolved(self, git_catalog, git_source):
        assert not git_catalog.root.resolved
        assert git_catalog.root.name == "git"
        assert git_source.calls == []

    def test_load_root(self, git_catalog, git_source):
        root = git_catalog.load_root()

        assert root.resolved
        assert root.id == CommandCatalog.ROOT_ID
        assert set(root.subcommands) == {"clone", "push", "add"}
        assert git_source.calls == [()]

    def test_children_are_placeholders(self, git_catalog, git_source):
        root = git_catalog.load_root()

        clone = git_catalog.get(root.subcommands["clone"])

        assert not clone.resolved
        assert clone.description == "Clones repos"
        assert git_source.calls == [()]

    def test_child_resolves_once(self, git_catalog, git_source):
        root = git_catalog.load_root()

        first = git_catalog.child(root, "clone")
        second = git_catalog.child(root, "clone")

        assert first is second
        assert git_source.calls == [(), ("clone",)]
        assert git_catalog.fetch_count == 2

    def test_one_fetch_per_subcommand(self, git_catalog, git_source):
        root = git_catalog.load_root()

        for _ in range(3):
            for name in ("clone", "push", "add"):
                git_catalog.child(root, name)
            root = git_catalog.load_root()

        assert sorted(git_source.calls) == [(), ("add",), ("clone",), ("push",)]

    def test_resolved_child_keeps_id(self, git_catalog):
        root = git_catalog.load_root()
        child_id = root.subcommands["push"]

        push = git_catalog.child(root, "push")

        assert push.id == child_id
        assert git_catalog.get(child_id) is push

    def test_paths(self, git_catalog):
        root = git_catalog.load_root()
        clone = git_catalog.child(root, "clone")

        assert [c.name for c in git_catalog.path(clone.id)] == ["git", "clone"]
        assert git_catalog.subcommand_path(clone.id) == ["clone"]
        assert git_catalog.subcommand_path(root.id) == []

    def test_unknown_subcommand(self, git_catalog):
        root = git_catalog.load_root()

        with pytest.raises(CommandNotFoundError) as exc_info:
            git_catalog.child(root, "frobnicate")

        assert "clone" in exc_info.value.recovery_hint

    def test_help_subcommand_hidden(self, git_catalog):
        root = git_catalog.load_root()

        assert "help" not in root.subcommands

    def test_fetch_failure_propagates(self, git_catalog, git_source):
        root = git_catalog.load_root()
        del git_source.pages[("add",)]

        with pytest.raises(HelpFetchError):
            git_catalog.child(root, "add")

        assert not git_catalog.get(root.subcommands["add"]).resolved

    def test_context_manager_closes(self, git_source):
        with CommandCatalog(git_source, "git") as catalog:
            catalog.load_root()

        with pytest.raises(KeyError):
            catalog.get(0)
