"""
Subprocess chains with shell-pipe semantics, timeouts and cancellation.

Usage:
    from pipechain import CommandChain, chain, run

    # Build a chain step by step
    c = CommandChain(timeout=5)
    c.add_step("printf", "hello\\n")
    c.add_step("tr", "a-z", "A-Z")
    c.start()
    c.wait()
    print(c.stdout_channel.read_all())   # b"HELLO\\n"

    # Or use the shorthand
    result = run("printf 'hello\\n'", "tr a-z A-Z", timeout=5)
    print(result.stdout)

    # Stop a running chain from another thread
    threading.Timer(1.0, c.stop).start()
    c.wait()   # raises ChainStopped
"""

from __future__ import annotations

import asyncio
import io
import logging
import os
import queue
import shlex
import subprocess
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterator, Mapping, Optional, Protocol, Sequence, Union, IO

__version__ = "0.1.0"

__all__ = [
    "ManagedCommand",
    "CommandChain",
    "OutputChannel",
    "ChannelReader",
    "Pipe",
    "ProcessHandle",
    "Launcher",
    "popen_launcher",
    "Result",
    "chain",
    "run",
    "run_async",
    "ProcessChainError",
    "SpawnError",
    "StageError",
    "TimeoutExpired",
    "Stopped",
    "CommandStopped",
    "ChainStopped",
    "PipeCloseError",
    "KillError",
    "EmptyChainError",
    "LifecycleError",
    "STDOUT_CHUNK_SIZE",
    "STDERR_CHUNK_SIZE",
    "__version__",
]

logger = logging.getLogger(__name__)

STDOUT_CHUNK_SIZE = 500
STDERR_CHUNK_SIZE = 1000


def _describe(path: str, args: Sequence[str]) -> str:
    return " ".join([path, *args])


# =============================================================================
# Errors
# =============================================================================


class ProcessChainError(Exception):
    """Base class for all pipechain errors."""


class EmptyChainError(ProcessChainError):
    """Raised when a chain with no steps is asked for its output or started."""
    def __init__(self):
        super().__init__("No commands are in this chain")


class LifecycleError(ProcessChainError):
    """Raised when a command or chain is used out of order."""


class SpawnError(ProcessChainError):
    """Raised when the OS could not create the process."""
    def __init__(self, path: str, args: Sequence[str], cause: OSError):
        self.path = path
        self.args_list = list(args)
        self.cause = cause
        super().__init__(
            f"Command [{_describe(path, args)}] triggered an error: [{cause}]"
        )


class StageError(ProcessChainError):
    """Raised when a stage's process exits with a non-zero status."""
    def __init__(self, path: str, args: Sequence[str], returncode: Optional[int]):
        self.path = path
        self.args_list = list(args)
        self.returncode = returncode
        super().__init__(
            f"Command [{_describe(path, args)}] exited with code {returncode}"
        )


class KillError(ProcessChainError):
    """
    Raised by every kill, successful or not.

    A killed process did not finish on its own, so the outcome is always
    reported as an error. ``killed`` tells whether the signal was delivered.
    """
    def __init__(
        self,
        path: str,
        args: Sequence[str],
        killed: bool,
        cause: Optional[OSError] = None,
    ):
        self.path = path
        self.args_list = list(args)
        self.killed = killed
        self.cause = cause
        if killed:
            message = f"subprocess was killed: [{_describe(path, args)}]"
        else:
            message = f"failed to kill subprocess [{_describe(path, args)}]: {cause}"
        super().__init__(message)


class TimeoutExpired(ProcessChainError):
    """Raised when a stage runs longer than its timeout and is killed."""
    def __init__(self, path: str, args: Sequence[str], timeout: float, kill_error: KillError):
        self.path = path
        self.args_list = list(args)
        self.timeout = timeout
        self.kill_error = kill_error
        super().__init__(
            f"Command [{_describe(path, args)}] timed out after {timeout}s "
            f"with error: [{kill_error}]"
        )


class Stopped(ProcessChainError):
    """Base class for errors caused by an explicit stop request."""


class CommandStopped(Stopped):
    """Raised by ManagedCommand.wait() when a stop request was honored."""
    def __init__(self, path: str, args: Sequence[str], kill_error: KillError):
        self.path = path
        self.args_list = list(args)
        self.kill_error = kill_error
        super().__init__(
            f"Command [{_describe(path, args)}] was stopped with error: [{kill_error}]"
        )


class ChainStopped(Stopped):
    """Raised by CommandChain.wait() when the chain was stopped."""
    def __init__(self, commands: Sequence["ManagedCommand"]):
        self.stages = [_describe(c.path, c.args) for c in commands]
        super().__init__("Chain stopped")


class PipeCloseError(ProcessChainError):
    """Raised when closing an inter-stage pipe write end fails."""
    def __init__(self, path: str, args: Sequence[str], cause: OSError):
        self.path = path
        self.args_list = list(args)
        self.cause = cause
        super().__init__(
            f"Command [{_describe(path, args)}] failed to close its output pipe: [{cause}]"
        )


# =============================================================================
# Process handles
# =============================================================================


class ProcessHandle(Protocol):
    """The subset of subprocess.Popen a ManagedCommand relies on."""
    pid: int
    stdout: Optional[IO[bytes]]
    stderr: Optional[IO[bytes]]

    def wait(self) -> int: ...

    def kill(self) -> None: ...


Launcher = Callable[..., ProcessHandle]


def popen_launcher(
    argv: list[str],
    *,
    stdin: Union[int, IO, None],
    stdout: Union[int, IO, None],
    stderr: Union[int, IO, None],
    env: Optional[dict] = None,
    cwd: Optional[str] = None,
) -> ProcessHandle:
    """Default launcher: spawn argv with subprocess.Popen in binary mode."""
    return subprocess.Popen(
        argv,
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
        env=env,
        cwd=cwd,
    )


# =============================================================================
# Channels, pipes and mailboxes
# =============================================================================


_CLOSED = object()
_STOP = object()


class OutputChannel:
    """
    A single-producer, single-consumer stream of byte chunks.

    The producer calls send() and finally close(). The consumer calls
    receive() or iterates. Once the consumer has seen the channel closed,
    every later receive() returns None again; it never reopens.
    """

    def __init__(self, name: str = "output"):
        self.name = name
        self._queue: queue.Queue = queue.Queue()
        self._sealed = False
        self._drained = False
        self._lock = threading.Lock()

    def send(self, chunk: bytes) -> None:
        with self._lock:
            if self._sealed:
                raise LifecycleError(f"{self.name} channel is closed")
            self._queue.put(chunk)

    def close(self) -> None:
        with self._lock:
            if self._sealed:
                return
            self._sealed = True
            self._queue.put(_CLOSED)

    @property
    def closed(self) -> bool:
        """True once the producer has closed the channel."""
        return self._sealed

    def receive(self, timeout: Optional[float] = None) -> Optional[bytes]:
        """
        Block for the next chunk.

        Returns None when the channel is closed. Raises queue.Empty if
        timeout elapses first.
        """
        if self._drained:
            return None
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            self._drained = True
            return None
        return item

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.receive()
            if chunk is None:
                return
            yield chunk

    def read_all(self) -> bytes:
        """Drain the channel to closure and return the concatenated bytes."""
        return b"".join(self)

    def reader(self) -> "ChannelReader":
        return ChannelReader(self)

    def __repr__(self) -> str:
        return f"OutputChannel({self.name!r}, closed={self._sealed})"


class ChannelReader(io.RawIOBase):
    """
    Reads an OutputChannel through the file-like read interface.

    Chunk boundaries disappear: bytes that do not fit the caller's buffer
    are kept and returned by the next read. Wrap in io.BufferedReader for
    readline().
    """

    def __init__(self, channel: OutputChannel):
        super().__init__()
        self._channel = channel
        self._buffer = b""

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        while not self._buffer:
            chunk = self._channel.receive()
            if chunk is None:
                return 0
            self._buffer = chunk

        n = min(len(b), len(self._buffer))
        b[:n] = self._buffer[:n]
        self._buffer = self._buffer[n:]
        return n


class Pipe:
    """
    An OS pipe joining one stage's stdout to the next stage's stdin.

    Each end is closed at most once; closing an already closed end is a
    no-op.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._reader: Optional[int]
        self._writer: Optional[int]
        self._reader, self._writer = os.pipe()

    @property
    def reader(self) -> Optional[int]:
        return self._reader

    @property
    def writer(self) -> Optional[int]:
        return self._writer

    def close_reader(self) -> None:
        with self._lock:
            fd, self._reader = self._reader, None
        if fd is not None:
            os.close(fd)

    def close_writer(self) -> None:
        with self._lock:
            fd, self._writer = self._writer, None
        if fd is not None:
            os.close(fd)

    def close(self) -> None:
        self.close_reader()
        self.close_writer()

    @property
    def closed(self) -> bool:
        return self._reader is None and self._writer is None


@dataclass
class _Outcome:
    """Terminal result delivered into a mailbox."""
    error: Optional[BaseException] = None
    returncode: Optional[int] = None


class _Mailbox:
    """
    Single-consumer inbox racing one completion against a stop request.

    At most one stop token is pending at a time; requesting a stop while
    one is pending does nothing.
    """

    def __init__(self):
        self._events: queue.Queue = queue.Queue()
        self._lock = threading.Lock()
        self._stop_pending = False

    def request_stop(self) -> bool:
        with self._lock:
            if self._stop_pending:
                return False
            self._stop_pending = True
        self._events.put(_STOP)
        return True

    def deliver(self, outcome: _Outcome) -> None:
        self._events.put(outcome)

    def receive(self, timeout: Optional[float] = None):
        """Return the next event (_STOP or an _Outcome); queue.Empty on timeout."""
        event = self._events.get(timeout=timeout)
        if event is _STOP:
            with self._lock:
                self._stop_pending = False
        return event


def _pump(stream: IO[bytes], channel: OutputChannel, chunk_size: int) -> None:
    """Forward bounded reads from stream into channel until EOF or error."""
    try:
        while True:
            chunk = stream.read1(chunk_size)
            if not chunk:
                break
            channel.send(chunk)
    except (OSError, ValueError) as e:
        logger.debug("%s pump stopped: %s", channel.name, e)
    finally:
        channel.close()
        stream.close()


# =============================================================================
# ManagedCommand
# =============================================================================


class ManagedCommand:
    """
    One external process with timeout-aware completion.

    A timeout of 0 (or None) means no timeout is enforced. The timeout clock
    starts when wait() is called, not when start() is called, so a delayed
    wait() gives the process extra unsupervised time.

    Examples:
        c = ManagedCommand("sleep", ["10"], timeout=0.5)
        c.start()
        c.wait()    # raises TimeoutExpired
    """

    def __init__(
        self,
        path: str,
        args: Sequence[str] = (),
        timeout: Optional[float] = 0,
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[str] = None,
        launcher: Optional[Launcher] = None,
        inherit_env: bool = True,
    ):
        """
        Create an unstarted command.

        Args:
            path: Executable to run.
            args: Arguments, not including the executable itself.
            timeout: Seconds wait() allows before killing. 0 disables it.
            env: Optional environment variables. By default they are added
                 to the current environment, so variables can be set but
                 not removed.
            cwd: Optional working directory.
            launcher: Callable that spawns the process. Defaults to
                      popen_launcher.
            inherit_env: If False, env replaces the whole environment
                         (None or {} then means an empty environment).
        """
        self.path = path
        self.args = list(args)
        self.timeout = timeout or 0
        self.env = dict(env) if env is not None else None
        self.inherit_env = inherit_env
        self.cwd = cwd
        self._launcher = launcher or popen_launcher

        self.process: Optional[ProcessHandle] = None
        self.returncode: Optional[int] = None
        self.stdout_channel = OutputChannel(f"{path} stdout")
        self.stderr_channel = OutputChannel(f"{path} stderr")

        self._stdin_pipe: Optional[Pipe] = None
        self._stdout_pipe: Optional[Pipe] = None
        self._mailbox = _Mailbox()
        self._exited = threading.Event()
        self._waited = False

    @property
    def started(self) -> bool:
        return self.process is not None

    @property
    def exited(self) -> bool:
        return self._exited.is_set()

    def _environment(self) -> Optional[dict]:
        if not self.inherit_env:
            return dict(self.env or {})
        if not self.env:
            return None
        return {**os.environ, **self.env}

    def start(self, stream_output: bool = False) -> None:
        """
        Spawn the process.

        Args:
            stream_output: If True, stdout and stderr are pumped into
                           stdout_channel and stderr_channel. Otherwise
                           stdout feeds the downstream pipe (if any) and
                           both channels are closed right away.

        Raises:
            SpawnError: The OS could not create the process.
            LifecycleError: The command was already started.
        """
        if self.process is not None:
            raise LifecycleError(
                f"Command [{_describe(self.path, self.args)}] was already started; clone() it to run again"
            )

        stdin = self._stdin_pipe.reader if self._stdin_pipe else subprocess.DEVNULL
        if stream_output:
            stdout = stderr = subprocess.PIPE
        else:
            stdout = self._stdout_pipe.writer if self._stdout_pipe else subprocess.DEVNULL
            stderr = subprocess.DEVNULL

        try:
            self.process = self._launcher(
                [self.path, *self.args],
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
                env=self._environment(),
                cwd=self.cwd,
            )
        except OSError as e:
            logger.debug("Failed to spawn [%s]: %s", _describe(self.path, self.args), e)
            raise SpawnError(self.path, self.args, e) from e

        logger.debug(
            "Started [%s] pid=%s", _describe(self.path, self.args), self.process.pid
        )

        # The child holds its own copy of the read end now
        if self._stdin_pipe:
            self._stdin_pipe.close_reader()

        if stream_output:
            for stream, channel, size in (
                (self.process.stdout, self.stdout_channel, STDOUT_CHUNK_SIZE),
                (self.process.stderr, self.stderr_channel, STDERR_CHUNK_SIZE),
            ):
                threading.Thread(
                    target=_pump,
                    args=(stream, channel, size),
                    name=f"pipechain-pump-{channel.name}",
                    daemon=True,
                ).start()
        else:
            self.stdout_channel.close()
            self.stderr_channel.close()

        threading.Thread(
            target=self._reap,
            name=f"pipechain-reap-{self.process.pid}",
            daemon=True,
        ).start()

    def _reap(self) -> None:
        try:
            self.returncode = self.process.wait()
        except OSError as e:
            logger.warning("Waiting on [%s] failed: %s", _describe(self.path, self.args), e)
            outcome = _Outcome(error=e)
        else:
            logger.debug(
                "[%s] exited with code %s", _describe(self.path, self.args), self.returncode
            )
            outcome = _Outcome(returncode=self.returncode)
        self._exited.set()
        self._mailbox.deliver(outcome)

    def wait(self) -> None:
        """
        Block until the process exits, times out, or is stopped.

        Raises:
            CommandStopped: stop() was called; the process was killed.
            TimeoutExpired: The timeout elapsed; the process was killed.
            StageError: The process exited with a non-zero status.
            LifecycleError: Not started, or already waited.
        """
        if self.process is None:
            raise LifecycleError(
                f"Command [{_describe(self.path, self.args)}] has not been started"
            )
        if self._waited:
            raise LifecycleError(
                f"Command [{_describe(self.path, self.args)}] has already been waited"
            )
        self._waited = True

        succeeded = False
        try:
            try:
                event = self._mailbox.receive(timeout=self.timeout or None)
            except queue.Empty:
                try:
                    self.kill()
                except KillError as kill_error:
                    logger.warning("%s timed out after %ss", self, self.timeout)
                    raise TimeoutExpired(self.path, self.args, self.timeout, kill_error) from kill_error

            if event is _STOP:
                try:
                    self.kill()
                except KillError as kill_error:
                    raise CommandStopped(self.path, self.args, kill_error) from kill_error

            if event.error is not None:
                raise StageError(self.path, self.args, None) from event.error
            if event.returncode != 0:
                raise StageError(self.path, self.args, event.returncode)
            succeeded = True
        finally:
            if succeeded:
                self.close_stdout()
            else:
                self._release_stdout()

    def kill(self) -> None:
        """
        Forcibly terminate the process and wait for its exit to be reaped.

        Always raises KillError, even when the kill worked, because the
        process did not finish on its own.
        """
        if self.process is None:
            raise LifecycleError(
                f"Command [{_describe(self.path, self.args)}] has not been started"
            )
        try:
            self.process.kill()
        except OSError as e:
            raise KillError(self.path, self.args, killed=False, cause=e) from e
        logger.warning("Killing [%s]", _describe(self.path, self.args))
        self._exited.wait()
        raise KillError(self.path, self.args, killed=True)

    def stop(self) -> None:
        """Request that a pending or future wait() kill the process."""
        self._mailbox.request_stop()

    def close_stdout(self) -> None:
        """Close the write end of the downstream pipe, signalling EOF."""
        if self._stdout_pipe is None:
            return
        try:
            self._stdout_pipe.close_writer()
        except OSError as e:
            raise PipeCloseError(self.path, self.args, e) from e
        logger.debug("Closed output pipe of [%s]", _describe(self.path, self.args))

    def _release_stdout(self) -> None:
        # An earlier error is already propagating
        try:
            self.close_stdout()
        except PipeCloseError as e:
            logger.warning("%s", e)

    def clone(self) -> "ManagedCommand":
        """Return an unstarted copy with the same identity and timeout."""
        return ManagedCommand(
            self.path,
            self.args,
            timeout=self.timeout,
            env=self.env,
            cwd=self.cwd,
            launcher=self._launcher,
            inherit_env=self.inherit_env,
        )

    def __repr__(self) -> str:
        return f"ManagedCommand({[self.path, *self.args]!r})"


# =============================================================================
# CommandChain
# =============================================================================


@dataclass
class Result:
    """Collected output of a finished chain."""
    stdout: bytes
    stderr: bytes
    returncodes: list = field(default_factory=list)

    def __str__(self) -> str:
        return self.stdout.decode(errors="replace")


class CommandChain:
    """
    An ordered set of subprocesses with stdout piped to stdin at each stage.

    Only the last stage's output is exposed, through stdout_channel and
    stderr_channel. A chain runs once; use clone() to run it again.

    Examples:
        c = CommandChain(timeout=5)
        c.add_step("echo", "hi")
        c.add_step("wc", "-c")
        result = c.run()
    """

    def __init__(self, timeout: Optional[float] = 0, launcher: Optional[Launcher] = None):
        """
        Args:
            timeout: Maximum seconds each stage may run once waited. 0
                     disables it.
            launcher: Passed to every ManagedCommand added.
        """
        self.timeout = timeout or 0
        self.commands: list[ManagedCommand] = []
        self._launcher = launcher
        self._pipes: list[Pipe] = []
        self._mailbox = _Mailbox()
        self._started = False
        self._loop: Optional[threading.Thread] = None

    def add_step(self, path: str, *args: str) -> ManagedCommand:
        """
        Append a command, piping the previous step's stdout into it.

        The returned command may be given env or cwd before start().
        """
        if self._started:
            raise LifecycleError("Cannot add steps to a chain that has been started")

        command = ManagedCommand(path, args, timeout=self.timeout, launcher=self._launcher)
        if self.commands:
            pipe = Pipe()
            self.commands[-1]._stdout_pipe = pipe
            command._stdin_pipe = pipe
            self._pipes.append(pipe)
        self.commands.append(command)
        return command

    def _last(self) -> ManagedCommand:
        if not self.commands:
            raise EmptyChainError()
        return self.commands[-1]

    @property
    def stdout_channel(self) -> OutputChannel:
        """The last stage's stdout chunks."""
        return self._last().stdout_channel

    @property
    def stderr_channel(self) -> OutputChannel:
        """The last stage's stderr chunks."""
        return self._last().stderr_channel

    def start(self) -> None:
        """
        Start every stage in order. Only the last stage streams output.

        Raises:
            SpawnError: A stage failed to spawn; later stages were not
                        started. Call close() to tear down the rest.
        """
        if self._started:
            raise LifecycleError("Chain was already started; clone() it to run again")
        last = self._last()
        self._started = True

        for command in self.commands:
            command.start(stream_output=command is last)

    def wait(self) -> None:
        """
        Wait for every stage in order, racing a chain stop().

        On stop, every stage is sent stop() from last to first and
        ChainStopped is raised without waiting for teardown; use join()
        to wait for it.

        Raises:
            ChainStopped: stop() was called.
            StageError, TimeoutExpired, CommandStopped, PipeCloseError:
                The first stage that failed; later stages are not waited.
        """
        if not self._started:
            raise LifecycleError("Chain has not been started")
        if self._loop is not None:
            raise LifecycleError("Chain has already been waited")

        self._loop = threading.Thread(
            target=self._wait_stages, name="pipechain-wait", daemon=True
        )
        self._loop.start()

        event = self._mailbox.receive()
        if event is _STOP:
            logger.info("Stopping chain %r", self)
            for command in reversed(self.commands):
                command.stop()
            raise ChainStopped(self.commands)
        if event.error is not None:
            raise event.error

    def _wait_stages(self) -> None:
        last = len(self.commands) - 1
        i = 0
        try:
            for i, command in enumerate(self.commands):
                command.wait()
                if i < last:
                    command.close_stdout()
        except ProcessChainError as e:
            # Later stages are not waited; hand them EOF so they can exit
            for command in self.commands[i:]:
                command._release_stdout()
            self._mailbox.deliver(_Outcome(error=e))
        else:
            self._mailbox.deliver(_Outcome(returncode=0))

    def stop(self) -> None:
        """Request that a pending or future wait() stop the chain."""
        self._mailbox.request_stop()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the background stage loop started by wait() finishes.

        Returns True if it has finished (or never ran).
        """
        if self._loop is None:
            return True
        self._loop.join(timeout)
        return not self._loop.is_alive()

    def close(self) -> None:
        """Kill stages that are still running and close every pipe end held."""
        for command in reversed(self.commands):
            if command.started and not command.exited:
                try:
                    command.kill()
                except KillError as e:
                    logger.debug("%s", e)
        for pipe in self._pipes:
            pipe.close()

    def __enter__(self) -> "CommandChain":
        return self

    def __exit__(self, *args):
        self.close()

    def clone(self) -> "CommandChain":
        """Return an unstarted chain with the same steps and timeout."""
        clone = CommandChain(self.timeout, launcher=self._launcher)
        for command in self.commands:
            step = clone.add_step(command.path, *command.args)
            step.env = dict(command.env) if command.env is not None else None
            step.inherit_env = command.inherit_env
            step.cwd = command.cwd
        return clone

    def run(self) -> Result:
        """Start, wait, and collect the last stage's output."""
        self.start()
        self.wait()
        return Result(
            stdout=self.stdout_channel.read_all(),
            stderr=self.stderr_channel.read_all(),
            returncodes=[c.returncode for c in self.commands],
        )

    async def run_async(self) -> Result:
        """
        Run the chain on a worker thread.

        Cancelling the awaiting task stops the chain.
        """
        try:
            return await asyncio.to_thread(self.run)
        except asyncio.CancelledError:
            self.stop()
            raise

    def __repr__(self) -> str:
        cmds = " | ".join(repr([c.path, *c.args]) for c in self.commands)
        return f"CommandChain({cmds})"


# =============================================================================
# Convenience functions
# =============================================================================


def _argv(command: Union[str, Sequence[str]]) -> list[str]:
    if isinstance(command, str):
        return shlex.split(command)
    return list(command)


def chain(
    *commands: Union[str, Sequence[str]],
    timeout: Optional[float] = 0,
    launcher: Optional[Launcher] = None,
) -> CommandChain:
    """
    Build a CommandChain from command strings or argument lists.

    Usage:
        c = chain("echo hi", ["wc", "-c"])
    """
    result = CommandChain(timeout, launcher=launcher)
    for command in commands:
        argv = _argv(command)
        if not argv:
            raise ValueError(f"Empty command: {command!r}")
        result.add_step(argv[0], *argv[1:])
    return result


def run(*commands: Union[str, Sequence[str]], **kwargs) -> Result:
    """
    Build and run a chain in one call.

    Usage:
        result = run("printf 'hello\\n'", "tr a-z A-Z")
    """
    with chain(*commands, **kwargs) as c:
        return c.run()


async def run_async(*commands: Union[str, Sequence[str]], **kwargs) -> Result:
    """
    Build and run a chain without blocking the event loop.

    Usage:
        result = await run_async("echo hi", "wc -c")
    """
    with chain(*commands, **kwargs) as c:
        return await c.run_async()
