"""Tests for the SessionController state machine."""

import asyncio
import sys
from unittest.mock import Mock

import pytest

from helpform.core import ExecutionBridge, SessionController
from helpform.exceptions import (
    CommandNotFoundError,
    NotANumberError,
    SessionStateError,
    SpawnError,
)
from helpform.models import ExitStatus, OutputChunk, SessionState
from helpform.protocols import SessionEvent, SessionObserver


def field_index(controller: SessionController, key: str) -> int:
    return [f.field.key for f in controller.current_form.fields].index(key)


@pytest.fixture
def observer():
    return Mock(spec=SessionObserver)


def events(observer) -> list[SessionEvent]:
    return [c.args[0] for c in observer.on_session_event.call_args_list]


def python_session(catalog, script: str) -> SessionController:
    """Session whose invocations run a Python snippet instead of the tool."""
    controller = SessionController(catalog, base_argv=[sys.executable, "-c", script])
    controller.start()
    return controller


@pytest.mark.unit
class TestNavigation:
    """Test subcommand navigation through the controller."""

    def test_starts_editing_root(self, git_session):
        assert git_session.state == SessionState.EDITING
        assert git_session.current_command.name == "git"
        assert git_session.stack.depth == 0

    def test_select_subcommand_pushes_frame(self, git_session, observer):
        git_session.register_observer(observer)

        clone = git_session.select_subcommand("clone")

        assert git_session.current_command is clone
        assert [c.name for c in git_session.path] == ["git", "clone"]
        assert events(observer) == [SessionEvent.FRAME_PUSHED]

    def test_back_pops_frame(self, git_session, observer):
        git_session.select_subcommand("clone")
        git_session.register_observer(observer)

        frame = git_session.back()

        assert frame is not None
        assert git_session.current_command.name == "git"
        assert events(observer) == [SessionEvent.FRAME_POPPED]

    def test_back_at_root_is_noop(self, git_session, observer):
        git_session.register_observer(observer)

        assert git_session.back() is None
        assert events(observer) == []

    def test_unknown_subcommand(self, git_session):
        with pytest.raises(CommandNotFoundError):
            git_session.select_subcommand("frobnicate")

        assert git_session.stack.depth == 0

    def test_reentry_resets_values(self, git_session):
        git_session.select_subcommand("clone")
        git_session.set_field(field_index(git_session, "REMOTE"), "origin")
        git_session.back()

        git_session.select_subcommand("clone")

        assert not git_session.current_form.fields[field_index(git_session, "REMOTE")].is_set

    def test_remember_values(self, git_catalog):
        controller = SessionController(git_catalog, remember_values=True)
        controller.start()
        controller.select_subcommand("clone")
        controller.set_field(field_index(controller, "REMOTE"), "origin")
        controller.back()

        controller.select_subcommand("clone")

        assert controller.current_form.fields[field_index(controller, "REMOTE")].raw == "origin"

    def test_subcommand_fetched_once_per_session(self, git_session, git_source):
        for _ in range(3):
            git_session.select_subcommand("push")
            git_session.back()

        assert git_source.calls.count(("push",)) == 1


@pytest.mark.unit
class TestEditing:
    """Test field editing through the controller."""

    def test_set_field_notifies(self, app_session, observer):
        app_session.register_observer(observer)

        app_session.set_field(field_index(app_session, "NAME"), "bob")

        observer.on_session_event.assert_called_once_with(
            SessionEvent.FIELD_CHANGED, index=field_index(app_session, "NAME")
        )

    def test_invalid_value_still_notifies(self, app_session, observer):
        app_session.register_observer(observer)

        with pytest.raises(NotANumberError):
            app_session.set_field(field_index(app_session, "--count"), "many")

        assert events(observer) == [SessionEvent.FIELD_CHANGED]

    def test_focus_cycles(self, app_session, observer):
        app_session.register_observer(observer)

        assert app_session.focus_next() == 1
        assert app_session.focus_previous() == 0
        assert events(observer) == [SessionEvent.FOCUS_CHANGED, SessionEvent.FOCUS_CHANGED]

    def test_invocation_preview(self, app_session):
        app_session.toggle_field(field_index(app_session, "--verbose"))
        app_session.set_field(field_index(app_session, "NAME"), "x")

        assert app_session.invocation() == ["app", "--verbose", "x"]

    def test_clear_field(self, app_session):
        index = field_index(app_session, "NAME")
        app_session.set_field(index, "x")

        app_session.clear_field(index)

        assert app_session.invocation() == ["app"]


@pytest.mark.integration
@pytest.mark.asyncio
class TestRunning:
    """Test submit, output, exit, cancel and acknowledge."""

    async def test_missing_required_blocks_submission(self, app_session, observer):
        app_session.bridge = Mock(spec=ExecutionBridge)
        app_session.register_observer(observer)

        started = await app_session.submit()

        assert not started
        assert app_session.state == SessionState.EDITING
        app_session.bridge.execute.assert_not_called()
        assert events(observer) == [SessionEvent.VALIDATION_FAILED]

    async def test_branch_command_blocks_submission(self, git_session):
        started = await git_session.submit()

        assert not started
        assert git_session.state == SessionState.EDITING

    async def test_run_to_completion(self, app_catalog, observer):
        controller = python_session(app_catalog, "import sys; print(sys.argv[1:]); sys.exit(2)")
        controller.set_field(field_index(controller, "NAME"), "bob")
        controller.register_observer(observer)

        assert await controller.submit()
        assert controller.state == SessionState.RUNNING

        status = await controller.stream_output()

        assert status == ExitStatus(code=2)
        assert controller.state == SessionState.FINISHED
        assert controller.last_status.code == 2
        assert "['bob']" in "".join(chunk.text for chunk in controller.output)
        assert events(observer)[0] == SessionEvent.STATE_CHANGED
        assert SessionEvent.OUTPUT_RECEIVED in events(observer)
        assert events(observer)[-1] == SessionEvent.STATE_CHANGED

    async def test_acknowledge_keeps_frame_and_values(self, app_catalog):
        controller = python_session(app_catalog, "pass")
        name = field_index(controller, "NAME")
        controller.set_field(name, "bob")
        await controller.submit()
        await controller.stream_output()

        controller.acknowledge()

        assert controller.state == SessionState.EDITING
        assert controller.current_form.fields[name].raw == "bob"

    async def test_cancel(self, app_catalog):
        controller = python_session(app_catalog, "import time; time.sleep(30)")
        controller.set_field(field_index(controller, "NAME"), "bob")
        await controller.submit()
        handle = controller.handle

        status = controller.cancel()

        assert status.cancelled
        assert controller.state == SessionState.FINISHED
        assert controller.last_status.cancelled
        await asyncio.wait_for(handle.wait(), timeout=10)

    async def test_exit_after_cancel_is_ignored(self, app_catalog):
        controller = python_session(app_catalog, "import time; time.sleep(30)")
        controller.set_field(field_index(controller, "NAME"), "bob")
        await controller.submit()
        handle = controller.handle

        controller.cancel()
        controller.process_exited(await asyncio.wait_for(handle.wait(), timeout=10))

        assert controller.last_status.cancelled
        assert controller.state == SessionState.FINISHED

    async def test_previous_run_cannot_finish_new_run(self, app_catalog):
        # The grandchild keeps stdout open after its parent is killed
        script = (
            "import subprocess, sys, time; "
            "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(1.5)']); "
            "print('ready', flush=True); time.sleep(30)"
        )
        controller = python_session(app_catalog, script)
        controller.set_field(field_index(controller, "NAME"), "bob")
        await controller.submit()
        first_stream = asyncio.create_task(controller.stream_output())

        async def first_output():
            while not controller.output:
                await asyncio.sleep(0.05)

        await asyncio.wait_for(first_output(), timeout=10)
        controller.cancel()
        controller.acknowledge()
        await controller.submit()
        second = controller.handle

        stale_status = await asyncio.wait_for(first_stream, timeout=10)

        assert stale_status.cancelled
        assert controller.state == SessionState.RUNNING
        assert controller.handle is second
        assert controller.last_status is None

        controller.quit()
        assert (await asyncio.wait_for(second.wait(), timeout=10)).cancelled

    async def test_chunks_from_previous_run_are_dropped(self, app_session):
        stale = Mock()

        app_session.record_output(OutputChunk(stream="stdout", text="late\n"), stale)
        app_session.process_exited(ExitStatus(code=0), stale)

        assert app_session.output == []
        assert app_session.last_status is None

    async def test_spawn_error_returns_to_editing(self, app_catalog, observer):
        controller = SessionController(app_catalog, base_argv=["definitely-not-a-real-program-helpform"])
        controller.start()
        controller.set_field(field_index(controller, "NAME"), "bob")
        controller.register_observer(observer)

        started = await controller.submit()

        assert not started
        assert controller.state == SessionState.EDITING
        assert isinstance(controller.last_error, SpawnError)
        assert events(observer) == [SessionEvent.ERROR]

    async def test_no_editing_while_running(self, app_catalog):
        controller = python_session(app_catalog, "import time; time.sleep(30)")
        controller.set_field(field_index(controller, "NAME"), "bob")
        await controller.submit()

        with pytest.raises(SessionStateError):
            controller.set_field(field_index(controller, "NAME"), "alice")
        with pytest.raises(SessionStateError):
            controller.select_subcommand("anything")
        with pytest.raises(SessionStateError):
            await controller.submit()

        handle = controller.handle
        controller.quit()
        assert controller.closed
        assert (await asyncio.wait_for(handle.wait(), timeout=10)).cancelled


@pytest.mark.unit
class TestInvalidTransitions:
    """Test that out-of-order actions are rejected."""

    def test_cancel_while_editing(self, app_session):
        with pytest.raises(SessionStateError):
            app_session.cancel()

    def test_acknowledge_while_editing(self, app_session):
        with pytest.raises(SessionStateError):
            app_session.acknowledge()

    def test_process_exited_while_editing_is_ignored(self, app_session):
        app_session.process_exited(ExitStatus(code=0))

        assert app_session.state == SessionState.EDITING
        assert app_session.last_status is None

    def test_record_output(self, app_session, observer):
        app_session.register_observer(observer)
        chunk = OutputChunk(stream="stdout", text="hi\n")

        app_session.record_output(chunk)

        assert app_session.output == [chunk]
        observer.on_session_event.assert_called_once_with(SessionEvent.OUTPUT_RECEIVED, chunk=chunk)

    def test_quit_from_editing(self, app_session):
        app_session.quit()

        assert app_session.closed
        with pytest.raises(SessionStateError):
            app_session.set_field(0, "1")
