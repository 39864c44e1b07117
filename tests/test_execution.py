"""Tests for the ExecutionBridge and ProcessHandle."""

import asyncio
import sys

import pytest

from helpform.core import ExecutionBridge, FormEngine, format_invocation
from helpform.exceptions import SpawnError
from helpform.models import Command, ExitStatus, Option, Positional, ValueKind
from helpform.parsing import build_command, classify


@pytest.fixture
def bridge():
    return ExecutionBridge()


@pytest.fixture
def resolved_app(app_catalog):
    return app_catalog.load_root()


@pytest.mark.unit
class TestBuildInvocation:
    """Test serialization of forms into argv."""

    def test_untouched_form_is_path_only(self, bridge, engine, resolved_app):
        form = engine.build_form(resolved_app)

        assert bridge.build_invocation([resolved_app], form) == ["app"]

    def test_verbose_and_name(self, bridge, engine, resolved_app):
        form = engine.build_form(resolved_app)
        keys = [f.field.key for f in form.fields]
        engine.set_field(form, keys.index("--verbose"), "true")
        engine.set_field(form, keys.index("NAME"), "x")

        assert bridge.build_invocation([resolved_app], form) == ["app", "--verbose", "x"]

    def test_compact_help_to_invocation(self, bridge, engine):
        text = (
            "Usage: app [OPTIONS] <NAME>\n"
            "Options:\n"
            "  -v, --verbose\n"
            "  --count <N> [default: 1]\n"
            "Args:\n"
            "  <NAME>"
        )
        command = build_command("app", classify(text))
        form = engine.build_form(command)
        keys = [f.field.key for f in form.fields]
        engine.toggle_field(form, keys.index("--verbose"))
        engine.set_field(form, keys.index("NAME"), "x")

        assert engine.validate(form, command) == {}
        assert bridge.build_invocation([command], form) == ["app", "--verbose", "x"]

    def test_defaults_are_not_injected(self, bridge, engine, resolved_app):
        form = engine.build_form(resolved_app)

        argv = bridge.build_invocation([resolved_app], form)

        assert "--count" not in argv

    def test_subcommand_path(self, bridge, engine, git_catalog):
        root = git_catalog.load_root()
        clone = git_catalog.child(root, "clone")
        form = engine.build_form(clone)
        engine.set_field(form, 0, "1")
        engine.set_field(form, 1, "origin")

        argv = bridge.build_invocation(git_catalog.path(clone.id), form)

        assert argv == ["git", "clone", "--depth", "1", "origin"]

    def test_base_argv_replaces_root_name(self, bridge, engine, resolved_app):
        form = engine.build_form(resolved_app)

        argv = bridge.build_invocation([resolved_app], form, base_argv=["python", "app.py"])

        assert argv == ["python", "app.py"]

    def test_repeatable_and_short_only(self, bridge, engine):
        command = Command(
            id=0,
            name="cc",
            options=[
                Option(short_flag="-I", value_kind=ValueKind.REPEATABLE, value_name="DIR"),
                Option(long_flag="--level", value_kind=ValueKind.NUMBER, value_name="N"),
            ],
            positionals=[
                Positional(name="FILES", value_kind=ValueKind.REPEATABLE, position_index=0),
            ],
        )
        form = engine.build_form(command)
        engine.set_field(form, 0, "inc lib")
        engine.set_field(form, 1, " 2 ")
        engine.set_field(form, 2, "a.c b.c")

        argv = bridge.build_invocation([command], form)

        assert argv == ["cc", "-I", "inc", "-I", "lib", "--level", "2", "a.c", "b.c"]

    def test_dash_values(self, bridge, engine):
        command = Command(
            id=0,
            name="calc",
            options=[Option(long_flag="--offset", value_kind=ValueKind.NUMBER, value_name="N")],
            positionals=[Positional(name="VALUE", position_index=0)],
        )
        form = engine.build_form(command)
        engine.set_field(form, 0, "-3")
        engine.set_field(form, 1, "-x")

        argv = bridge.build_invocation([command], form)

        assert argv == ["calc", "--offset=-3", "--", "-x"]

    def test_enum_uses_normalized_value(self, bridge, git_catalog):
        engine = FormEngine(case_insensitive_choices=True)
        root = git_catalog.load_root()
        form = engine.build_form(root)
        engine.set_field(form, 0, "Never")

        assert bridge.build_invocation([root], form) == ["git", "--color", "never"]

    def test_empty_path(self, bridge, engine, resolved_app):
        with pytest.raises(ValueError):
            bridge.build_invocation([], engine.build_form(resolved_app))

    def test_format_invocation(self):
        assert format_invocation(["app", "--name", "two words"]) == "app --name 'two words'"


@pytest.mark.integration
@pytest.mark.asyncio
class TestExecute:
    """Test spawning and streaming real processes."""

    async def test_streams_output_and_exit_code(self, bridge):
        script = "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"
        handle = await bridge.execute([sys.executable, "-c", script])

        chunks = [chunk async for chunk in handle.chunks()]
        status = await handle.wait()

        assert "".join(c.text for c in chunks if c.stream == "stdout").strip() == "out"
        assert "".join(c.text for c in chunks if c.stream == "stderr").strip() == "err"
        assert status == ExitStatus(code=3)
        assert not status.success

    async def test_success(self, bridge):
        handle = await bridge.execute([sys.executable, "-c", "pass"])

        status = await handle.wait()

        assert status.success
        assert status.describe() == "exit code 0"

    async def test_chunks_not_restartable(self, bridge):
        handle = await bridge.execute([sys.executable, "-c", "print('once')"])
        [chunk async for chunk in handle.chunks()]

        with pytest.raises(RuntimeError):
            [chunk async for chunk in handle.chunks()]

        await handle.wait()

    async def test_cancel_is_distinct_from_exit_codes(self, bridge):
        handle = await bridge.execute([sys.executable, "-c", "import time; time.sleep(30)"])

        cancelled = handle.cancel()
        status = await asyncio.wait_for(handle.wait(), timeout=10)

        assert cancelled.cancelled
        assert status.cancelled
        assert status.code is None
        assert status.describe() == "cancelled"
        assert status != ExitStatus(code=0)
        assert not handle.running

    async def test_missing_executable(self, bridge):
        with pytest.raises(SpawnError) as exc_info:
            await bridge.execute(["definitely-not-a-real-program-helpform"])

        assert exc_info.value.reason == "executable not found"

    async def test_missing_working_directory(self, temp_dir):
        bridge = ExecutionBridge(cwd=temp_dir / "missing")

        with pytest.raises(SpawnError):
            await bridge.execute([sys.executable, "-c", "pass"])

    async def test_extra_environment(self, temp_dir):
        bridge = ExecutionBridge(cwd=temp_dir, env={"HELPFORM_TEST_VALUE": "42"})
        script = "import os; print(os.environ['HELPFORM_TEST_VALUE'])"

        handle = await bridge.execute([sys.executable, "-c", script])
        output = "".join([chunk.text async for chunk in handle.chunks()])

        assert output.strip() == "42"
        assert (await handle.wait()).success
