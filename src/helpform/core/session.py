"""Session controller: the editing / running / finished state machine."""

import logging
from collections.abc import Sequence

from helpform.exceptions import FieldValidationError, SessionStateError, SpawnError
from helpform.models import (
    Command,
    ExitStatus,
    FieldValue,
    FormState,
    OutputChunk,
    SessionState,
)
from helpform.protocols import SessionEvent, SessionObserver
from helpform.utils import ObserverManager

from .catalog import CommandCatalog
from .execution import ExecutionBridge, ProcessHandle
from .form_engine import FormEngine
from .navigation import Frame, NavigationStack

logger = logging.getLogger(__name__)


class SessionController:
    """
    Coordinates navigation, form editing and process execution.

    States:
        EDITING  - the user edits the current frame's form
        RUNNING  - the built invocation is executing and output streams in
        FINISHED - the process ended; output and status stay visible until
                   acknowledged

    Observers are told about every change through SessionEvents. The
    controller has no knowledge of the UI rendering them.
    """

    def __init__(
        self,
        catalog: CommandCatalog,
        *,
        engine: FormEngine | None = None,
        bridge: ExecutionBridge | None = None,
        base_argv: Sequence[str] | None = None,
        remember_values: bool = False,
    ):
        """
        Initialize the controller.

        Args:
            catalog: Command arena for this session
            engine: Form engine (default: case-sensitive choices)
            bridge: Execution bridge (default: inherit cwd and environment)
            base_argv: Program prefix used instead of the root command name
            remember_values: Restore a subcommand's form when re-entering it
        """
        self.catalog = catalog
        self.engine = engine or FormEngine()
        self.bridge = bridge or ExecutionBridge()
        self.base_argv = list(base_argv) if base_argv else None
        self.remember_values = remember_values

        self._state = SessionState.EDITING
        self._stack: NavigationStack | None = None
        self._remembered: dict[int, FormState] = {}
        self._handle: ProcessHandle | None = None
        self._observers = ObserverManager[SessionObserver](observer_type_name="session")

        self.output: list[OutputChunk] = []
        self.last_status: ExitStatus | None = None
        self.last_error: Exception | None = None
        self.closed = False

    # =================================================================
    # Observers
    # =================================================================

    def register_observer(self, observer: SessionObserver) -> None:
        self._observers.register(observer)

    def unregister_observer(self, observer: SessionObserver) -> None:
        self._observers.unregister(observer)

    def _notify(self, event: SessionEvent, **kwargs) -> None:
        self._observers.notify("on_session_event", event, **kwargs)

    # =================================================================
    # State
    # =================================================================

    def start(self) -> Command:
        """
        Resolve the root command and open its form.

        Raises:
            HelpFetchError: If the tool's help text cannot be obtained
        """
        root = self.catalog.load_root()
        self._stack = NavigationStack(Frame(command_id=root.id, form=self.engine.build_form(root)))
        self._state = SessionState.EDITING
        logger.info(f"Session started for '{root.name}'")
        return root

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def stack(self) -> NavigationStack:
        if self._stack is None:
            raise SessionStateError("use the session", "not started")
        return self._stack

    @property
    def current_command(self) -> Command:
        return self.catalog.get(self.stack.current.command_id)

    @property
    def current_form(self) -> FormState:
        return self.stack.current.form

    @property
    def path(self) -> list[Command]:
        """Commands from the root to the current frame."""
        return self.catalog.path(self.stack.current.command_id)

    @property
    def handle(self) -> ProcessHandle | None:
        """Handle of the running process, if any."""
        return self._handle

    def _set_state(self, state: SessionState) -> None:
        previous = self._state
        self._state = state
        logger.debug(f"Session state {previous.value} -> {state.value}")
        self._notify(SessionEvent.STATE_CHANGED, state=state, previous=previous)

    def _require(self, action: str, *states: SessionState) -> None:
        if self.closed:
            raise SessionStateError(action, "closed")
        if self._state not in states:
            raise SessionStateError(action, self._state.value)

    # =================================================================
    # Navigation
    # =================================================================

    def select_subcommand(self, name: str) -> Command:
        """
        Enter a subcommand of the current command.

        Raises:
            SessionStateError: If not editing
            CommandNotFoundError: If the subcommand does not exist
            HelpFetchError: If its help text cannot be obtained
        """
        self._require("select a subcommand", SessionState.EDITING)
        command = self.engine.select_subcommand(self.catalog, self.current_command, name)

        form = None
        if self.remember_values:
            form = self._remembered.pop(command.id, None)
        if form is None:
            form = self.engine.build_form(command)

        frame = Frame(command_id=command.id, form=form)
        self.stack.push(frame)
        logger.info(f"Entered subcommand '{name}' (depth {self.stack.depth})")
        self._notify(SessionEvent.FRAME_PUSHED, command=command, frame=frame)
        return command

    def back(self) -> Frame | None:
        """
        Return to the parent command.

        Returns:
            The frame that was left, or None when already at the root
        """
        self._require("go back", SessionState.EDITING)
        frame = self.stack.pop()
        if frame is None:
            return None
        if self.remember_values:
            self._remembered[frame.command_id] = frame.form
        self._notify(SessionEvent.FRAME_POPPED, frame=frame, command=self.current_command)
        return frame

    # =================================================================
    # Editing
    # =================================================================

    def set_field(self, index: int, raw: str) -> FieldValue:
        """
        Set a field of the current form.

        Raises:
            SessionStateError: If not editing
            FieldValidationError: If the value is rejected (it stays recorded)
        """
        self._require("edit fields", SessionState.EDITING)
        try:
            return self.engine.set_field(self.current_form, index, raw)
        finally:
            self._notify(SessionEvent.FIELD_CHANGED, index=index)

    def toggle_field(self, index: int) -> FieldValue:
        self._require("edit fields", SessionState.EDITING)
        field_value = self.engine.toggle_field(self.current_form, index)
        self._notify(SessionEvent.FIELD_CHANGED, index=index)
        return field_value

    def clear_field(self, index: int) -> FieldValue:
        self._require("edit fields", SessionState.EDITING)
        field_value = self.engine.clear_field(self.current_form, index)
        self._notify(SessionEvent.FIELD_CHANGED, index=index)
        return field_value

    def focus_next(self) -> int:
        index = self.engine.focus_next(self.current_form)
        self._notify(SessionEvent.FOCUS_CHANGED, index=index)
        return index

    def focus_previous(self) -> int:
        index = self.engine.focus_previous(self.current_form)
        self._notify(SessionEvent.FOCUS_CHANGED, index=index)
        return index

    def validate(self) -> dict[int, FieldValidationError]:
        """Re-check the current form."""
        return self.engine.validate(self.current_form, self.current_command)

    def invocation(self) -> list[str]:
        """Argument vector the current frame would run."""
        return self.bridge.build_invocation(self.path, self.current_form, self.base_argv)

    # =================================================================
    # Execution
    # =================================================================

    async def submit(self) -> bool:
        """
        Validate the current form and start the tool.

        Returns:
            True if the process started. False if validation failed or the
            program could not be spawned; the session stays in EDITING and
            the reason is reported to observers.

        Raises:
            SessionStateError: If not editing
        """
        self._require("run", SessionState.EDITING)

        errors = self.validate()
        if errors:
            logger.info(f"Submission blocked by {len(errors)} validation error(s)")
            self._notify(SessionEvent.VALIDATION_FAILED, errors=errors)
            return False

        argv = self.invocation()
        try:
            handle = await self.bridge.execute(argv)
        except SpawnError as e:
            self.last_error = e
            logger.error(f"Spawn failed: {e.technical_message}")
            self._notify(SessionEvent.ERROR, error=e)
            return False

        self._handle = handle
        self.output = []
        self.last_status = None
        self.last_error = None
        self._set_state(SessionState.RUNNING)
        return True

    def _is_stale(self, handle: ProcessHandle | None) -> bool:
        return handle is not None and handle is not self._handle

    def record_output(self, chunk: OutputChunk, handle: ProcessHandle | None = None) -> None:
        """
        Store a chunk of process output and forward it to observers.

        Chunks from a handle other than the current run's are dropped.
        """
        if self._is_stale(handle):
            return
        self.output.append(chunk)
        self._notify(SessionEvent.OUTPUT_RECEIVED, chunk=chunk)

    def process_exited(self, status: ExitStatus, handle: ProcessHandle | None = None) -> None:
        """
        Record the end of the running process.

        Ignored when the run was already finished by cancel(), or when
        ``handle`` belongs to an earlier run.
        """
        if self._is_stale(handle):
            logger.debug(f"Ignoring exit ({status.describe()}) of a previous run")
            return
        if self._state != SessionState.RUNNING:
            logger.debug(f"Ignoring exit ({status.describe()}) in state {self._state.value}")
            return
        self.last_status = status
        self._handle = None
        logger.info(f"Process finished: {status.describe()}")
        self._set_state(SessionState.FINISHED)

    async def stream_output(self) -> ExitStatus:
        """
        Forward the running process's output to observers until it exits.

        Returns:
            The status the run ended with
        """
        handle = self._handle
        if handle is None:
            raise SessionStateError("stream output", self._state.value)

        async for chunk in handle.chunks():
            self.record_output(chunk, handle)
        status = await handle.wait()
        self.process_exited(status, handle)
        return status

    def cancel(self) -> ExitStatus:
        """
        Kill the running process.

        Raises:
            SessionStateError: If nothing is running
        """
        self._require("cancel", SessionState.RUNNING)
        status = self._handle.cancel() if self._handle else ExitStatus.cancelled_status()
        self.last_status = status
        self._handle = None
        self._set_state(SessionState.FINISHED)
        return status

    def acknowledge(self) -> None:
        """Return from the finished view to editing the same frame."""
        self._require("acknowledge", SessionState.FINISHED)
        self._set_state(SessionState.EDITING)

    # =================================================================
    # Lifecycle
    # =================================================================

    def quit(self) -> None:
        """End the session from any state, killing a running process."""
        if self.closed:
            return
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.close()

    def close(self) -> None:
        """Release the catalog and observers."""
        self.closed = True
        self._remembered.clear()
        self.catalog.close()
        self._observers.clear()
        logger.info("Session closed")
