"""Execution bridge: serializes a form into argv and runs the tool."""

import asyncio
import codecs
import logging
import os
import shlex
from collections.abc import AsyncIterator, Mapping, Sequence
from pathlib import Path

from helpform.exceptions import SpawnError, wrap_spawn_error
from helpform.models import Command, ExitStatus, FieldValue, FormState, OutputChunk, ValueKind

logger = logging.getLogger(__name__)

READ_SIZE = 4096


def format_invocation(argv: Sequence[str]) -> str:
    """Shell-quoted preview of an invocation, e.g. for the status bar."""
    return shlex.join(argv)


class ProcessHandle:
    """
    A running child process with captured stdout and stderr.

    Both pipes are drained in the background as soon as the handle exists,
    so a slow consumer never blocks the child on a full pipe.
    """

    def __init__(self, process: asyncio.subprocess.Process, argv: Sequence[str]):
        self.argv = list(argv)
        self._process = process
        self._queue: asyncio.Queue[OutputChunk | None] = asyncio.Queue()
        self._consumed = False
        self._cancelled = False
        self._pumps = [
            asyncio.create_task(self._pump(process.stdout, "stdout")),
            asyncio.create_task(self._pump(process.stderr, "stderr")),
        ]

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def running(self) -> bool:
        """True until the child has exited."""
        return self._process.returncode is None

    async def chunks(self) -> AsyncIterator[OutputChunk]:
        """
        Yield output chunks from both streams as they arrive, until EOF.

        The stream can be consumed once.

        Raises:
            RuntimeError: If the output has already been consumed
        """
        if self._consumed:
            raise RuntimeError("Process output has already been consumed")
        self._consumed = True

        open_streams = len(self._pumps)
        while open_streams:
            chunk = await self._queue.get()
            if chunk is None:
                open_streams -= 1
                continue
            yield chunk

    async def wait(self) -> ExitStatus:
        """Wait for the child to exit and report how it ended."""
        code = await self._process.wait()
        await asyncio.gather(*self._pumps, return_exceptions=True)
        if self._cancelled:
            return ExitStatus.cancelled_status()
        return ExitStatus(code=code)

    def cancel(self) -> ExitStatus:
        """Kill the child. The resulting status is always the cancelled one."""
        if self.running:
            self._cancelled = True
            try:
                self._process.kill()
            except ProcessLookupError:
                # Exited between the check and the kill
                pass
            logger.info(f"Killed process {self.pid} ({format_invocation(self.argv)})")
        return ExitStatus.cancelled_status()

    async def _pump(self, stream: asyncio.StreamReader | None, name: str) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            if stream is None:
                return
            while True:
                data = await stream.read(READ_SIZE)
                if not data:
                    break
                text = decoder.decode(data)
                if text:
                    self._queue.put_nowait(OutputChunk(stream=name, text=text))
            tail = decoder.decode(b"", final=True)
            if tail:
                self._queue.put_nowait(OutputChunk(stream=name, text=tail))
        finally:
            self._queue.put_nowait(None)


class ExecutionBridge:
    """
    Turns the navigation path and leaf form into an argument vector and
    spawns it.
    """

    def __init__(self, cwd: Path | None = None, env: Mapping[str, str] | None = None):
        """
        Initialize the bridge.

        Args:
            cwd: Working directory for spawned processes (default: inherit)
            env: Variables added to the inherited environment
        """
        self.cwd = cwd
        self.env = dict(env or {})

    def build_invocation(
        self,
        path: Sequence[Command],
        state: FormState,
        base_argv: Sequence[str] | None = None,
    ) -> list[str]:
        """
        Serialize a form into argv.

        The vector is the program (root name or base_argv), then the
        subcommand names along the path, then the leaf's set options in form
        order, then its positionals by ascending index. Unset fields are
        omitted and defaults are never injected, so the tool applies its own.

        Args:
            path: Commands from the root to the leaf
            state: Form of the leaf command
            base_argv: Replaces the root name, e.g. ["python", "app.py"]

        Returns:
            The argument vector
        """
        if not path:
            raise ValueError("Invocation path is empty")

        argv = list(base_argv) if base_argv else [path[0].name]
        argv.extend(command.name for command in path[1:])

        positionals: list[FieldValue] = []
        for field_value in state.fields:
            if field_value.is_option:
                argv.extend(self._option_args(field_value))
            else:
                positionals.append(field_value)

        values: list[str] = []
        for field_value in sorted(positionals, key=lambda f: f.field.position_index):
            values.extend(self._values(field_value))
        if any(value.startswith("-") for value in values):
            argv.append("--")
        argv.extend(values)

        return argv

    async def execute(
        self,
        invocation: Sequence[str],
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ProcessHandle:
        """
        Spawn the invocation with stdout and stderr captured.

        Args:
            invocation: Argument vector, program first
            cwd: Overrides the bridge's working directory
            env: Variables added on top of the bridge's environment

        Returns:
            Handle streaming the child's output

        Raises:
            SpawnError: If the program cannot be started
        """
        if not invocation:
            raise ValueError("Cannot execute an empty invocation")

        executable = invocation[0]
        workdir = cwd or self.cwd
        if workdir is not None and not Path(workdir).is_dir():
            raise SpawnError(
                executable,
                f"working directory {workdir} does not exist",
                recovery_hint="Fix working_directory in the configuration",
            )

        full_env = {**os.environ, **self.env, **(env or {})}
        logger.info(f"Spawning: {format_invocation(invocation)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *invocation,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=workdir,
                env=full_env,
            )
        except OSError as e:
            logger.error(f"Failed to spawn {executable}: {e}")
            raise wrap_spawn_error(e, executable) from e

        logger.debug(f"Started process {process.pid}")
        return ProcessHandle(process, invocation)

    def _option_args(self, field_value: FieldValue) -> list[str]:
        option = field_value.field
        if field_value.kind == ValueKind.FLAG:
            return [option.key] if field_value.is_set else []

        args = []
        for value in self._values(field_value):
            if value.startswith("-") and option.long_flag:
                args.append(f"{option.long_flag}={value}")
            else:
                args.extend([option.key, value])
        return args

    def _values(self, field_value: FieldValue) -> list[str]:
        if field_value.value is None:
            return []
        if field_value.kind == ValueKind.REPEATABLE:
            return list(field_value.value)
        if field_value.kind == ValueKind.NUMBER:
            return [field_value.raw.strip()]
        if field_value.kind == ValueKind.ENUM:
            return [field_value.value]
        return [field_value.raw]
