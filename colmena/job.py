"""Job control.

Jobs send events over a queue to a job monitor, which keeps track of
their states and forwards human-readable lines to a progress output.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Awaitable, Callable, Iterable, TypeVar

from .errors import UnknownError
from .events import (
    Event,
    EventKind,
    JobMetadata,
    JobState,
    JobStats,
    JobType,
    new_job_id,
)

log = logging.getLogger(__name__)

T = TypeVar("T")

LOG_CONTEXT_LINES = 20
"""Maximum log lines to print for failures."""


class LineStyle(Enum):
    """How a progress line is rendered."""

    NORMAL = "normal"
    SUCCESS = "success"
    SUCCESS_NOOP = "success-noop"
    """Succeeded without doing anything; the spinner disappears."""
    FAILURE = "failure"


@dataclass(frozen=True)
class Line:
    """A line of progress output belonging to one job."""

    job_id: uuid.UUID
    text: str
    style: LineStyle = LineStyle.NORMAL
    label: str = ""
    noisy: bool = False
    """Whether the line is only of interest in verbose output."""


class ProgressKind(Enum):
    """What a progress message asks the output to do."""

    HINT_LABEL_WIDTH = "hint-label-width"
    PRINT = "print"
    PRINT_META = "print-meta"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ProgressMessage:
    """A message sent from the job monitor to the progress output."""

    kind: ProgressKind
    line: Line | None = None
    width: int | None = None


def _line_for(metadata: JobMetadata, text: str) -> Line:
    if metadata.state is JobState.SUCCEEDED:
        style = LineStyle.SUCCESS
    elif metadata.state is JobState.FAILED:
        style = LineStyle.FAILURE
    else:
        style = LineStyle.NORMAL
    return Line(metadata.job_id, text, style=style, label=metadata.label())


class JobHandle:
    """A handle to a job, used to report its progress to the monitor."""

    def __init__(
        self,
        job_id: uuid.UUID | None = None,
        sender: "asyncio.Queue[Event] | None" = None,
    ) -> None:
        self.job_id = job_id if job_id is not None else new_job_id()
        self._sender = sender

    @classmethod
    def null(cls) -> "JobHandle":
        """A handle that is not connected to any monitor."""
        return cls()

    def create_job(self, job_type: JobType, nodes: Iterable[str]) -> "JobHandle":
        """Create a new job with a distinct ID and announce it."""
        if job_type is JobType.META:
            raise UnknownError("Cannot create a meta job!")

        handle = JobHandle(new_job_id(), self._sender)
        handle._send(
            Event(handle.job_id, EventKind.CREATION, job_type=job_type, nodes=tuple(nodes))
        )
        return handle

    async def run(self, f: Callable[["JobHandle"], Awaitable[T]]) -> T:
        """Run ``f``, moving the job to Running first and reporting the outcome."""
        return await self._run_internal(f, report_running=True)

    async def run_waiting(self, f: Callable[["JobHandle"], Awaitable[T]]) -> T:
        """Run ``f`` and report the outcome, leaving the job waiting at first."""
        return await self._run_internal(f, report_running=False)

    def stdout(self, output: str) -> None:
        """Report a line of child stdout."""
        self._send(Event(self.job_id, EventKind.CHILD_STDOUT, text=output))

    def stderr(self, output: str) -> None:
        """Report a line of child stderr."""
        self._send(Event(self.job_id, EventKind.CHILD_STDERR, text=output))

    def message(self, message: str) -> None:
        """Report a human-readable message."""
        self._send(Event(self.job_id, EventKind.MESSAGE, text=message))

    def state(self, new_state: JobState) -> None:
        """Transition to a new state."""
        self._send(Event(self.job_id, EventKind.NEW_STATE, state=new_state))

    def success_with_message(self, message: str) -> None:
        """Mark the job as successful with a custom message."""
        self._send(Event(self.job_id, EventKind.SUCCESS_WITH_MESSAGE, text=message))

    def noop(self, message: str) -> None:
        """Mark the job as having had nothing to do."""
        self._send(Event(self.job_id, EventKind.NOOP, text=message))

    def failure(self, error: BaseException) -> None:
        """Mark the job as failed."""
        self._send(Event(self.job_id, EventKind.FAILURE, text=str(error)))

    async def _run_internal(
        self, f: Callable[["JobHandle"], Awaitable[T]], report_running: bool
    ) -> T:
        if report_running:
            self.state(JobState.RUNNING)
        try:
            value = await f(self)
        except Exception as error:
            self.failure(error)
            raise
        self.state(JobState.SUCCEEDED)
        return value

    def _send(self, event: Event) -> None:
        if event.privileged():
            raise RuntimeError("Tried to send privileged payload with JobHandle")
        if self._sender is None:
            log.debug("Sending event: %r", event)
        else:
            self._sender.put_nowait(event)


class MetaJobHandle:
    """The handle of the meta job; finishing it shuts the monitor down."""

    def __init__(self, job_id: uuid.UUID, sender: "asyncio.Queue[Event]") -> None:
        self.job_id = job_id
        self._sender = sender

    async def run(self, f: Callable[[JobHandle], Awaitable[T]]) -> T:
        """Run ``f`` as the meta job and shut down the monitor afterwards."""
        handle = JobHandle(self.job_id, self._sender)
        try:
            value = await f(handle)
        except Exception as error:
            self._sender.put_nowait(Event(self.job_id, EventKind.FAILURE, text=str(error)))
            self._sender.put_nowait(Event(self.job_id, EventKind.SHUTDOWN_MONITOR))
            raise
        self._sender.put_nowait(
            Event(self.job_id, EventKind.NEW_STATE, state=JobState.SUCCEEDED)
        )
        self._sender.put_nowait(Event(self.job_id, EventKind.SHUTDOWN_MONITOR))
        return value


class JobMonitor:
    """Coordinator of all job states.

    Receives events from jobs and forwards progress lines to the output.
    """

    settle_delay: float = 1.0
    """Seconds to wait after completion before printing the summary."""

    def __init__(
        self,
        events: "asyncio.Queue[Event]",
        meta_job_id: uuid.UUID,
        progress: "asyncio.Queue[ProgressMessage] | None",
    ) -> None:
        self._receiver = events
        self.events: list[Event] = []
        self.jobs: dict[uuid.UUID, JobMetadata] = {
            meta_job_id: JobMetadata(meta_job_id, JobType.META, state=JobState.RUNNING)
        }
        self.meta_job_id = meta_job_id
        self._progress = progress
        self.label_width: int | None = None

    @classmethod
    def create(
        cls, progress: "asyncio.Queue[ProgressMessage] | None"
    ) -> tuple["JobMonitor", MetaJobHandle]:
        """Create a monitor together with the handle of its meta job."""
        queue: asyncio.Queue[Event] = asyncio.Queue()
        meta_job_id = new_job_id()
        return cls(queue, meta_job_id, progress), MetaJobHandle(meta_job_id, queue)

    def set_label_width(self, width: int) -> None:
        self.label_width = width

    async def run_until_completion(self) -> "JobMonitor":
        """Process events until the meta job shuts the monitor down."""
        if self.label_width is not None:
            self._emit(ProgressMessage(ProgressKind.HINT_LABEL_WIDTH, width=self.label_width))

        while True:
            event = await self._receiver.get()
            kind = event.kind

            if kind is EventKind.CREATION:
                if event.job_id in self.jobs:
                    raise RuntimeError(f"Job {event.job_id} created twice")
                self.jobs[event.job_id] = JobMetadata(
                    event.job_id, event.job_type or JobType.EXECUTE, list(event.nodes)
                )
            elif kind is EventKind.SHUTDOWN_MONITOR:
                if event.job_id != self.meta_job_id:
                    raise RuntimeError("Only the meta job may shut down the monitor")
                return await self._finish()
            elif kind in (
                EventKind.NEW_STATE,
                EventKind.SUCCESS_WITH_MESSAGE,
                EventKind.NOOP,
                EventKind.FAILURE,
            ):
                if kind is EventKind.NEW_STATE:
                    assert event.state is not None
                    self._update_job_state(event.job_id, event.state, None, False)
                elif kind is EventKind.FAILURE:
                    self._update_job_state(event.job_id, JobState.FAILED, event.text, False)
                else:
                    self._update_job_state(
                        event.job_id, JobState.SUCCEEDED, event.text, kind is EventKind.NOOP
                    )
                if event.job_id != self.meta_job_id:
                    self._print_job_stats()
            else:
                if self._progress is not None:
                    line = _line_for(self.jobs[event.job_id], event.text)
                    self._emit(self._print_message(event.job_id, line))

            self.events.append(event)

    def job_stats(self) -> JobStats:
        """Count the non-meta jobs in each state."""
        stats = JobStats()
        for job in self.jobs.values():
            if job.job_id == self.meta_job_id:
                continue
            if job.state is JobState.WAITING:
                stats.waiting += 1
            elif job.state is JobState.RUNNING:
                stats.running += 1
            elif job.state is JobState.SUCCEEDED:
                stats.succeeded += 1
            else:
                stats.failed += 1
        return stats

    def _update_job_state(
        self, job_id: uuid.UUID, new_state: JobState, message: str | None, noop: bool
    ) -> None:
        metadata = self.jobs[job_id]
        old_state = metadata.state

        if old_state is new_state:
            return
        if old_state.is_final():
            log.debug("Tried to update the state of a finished job")
            return

        metadata.state = new_state
        if message is not None:
            metadata.custom_message = message

        if new_state is JobState.WAITING or self._progress is None:
            return

        if new_state is JobState.SUCCEEDED and metadata.custom_message is not None:
            text: str | None = metadata.custom_message
        else:
            text = metadata.describe_state_transition()

        if text is not None:
            line = _line_for(metadata, text)
            if noop:
                line = replace(line, style=LineStyle.SUCCESS_NOOP)
            self._emit(self._print_message(job_id, line))

    def _print_job_stats(self) -> None:
        if self._progress is None:
            return
        text = str(self.job_stats())
        line = replace(_line_for(self.jobs[self.meta_job_id], text), noisy=True)
        self._emit(ProgressMessage(ProgressKind.PRINT_META, line=line))

    def _print_message(self, job_id: uuid.UUID, line: Line) -> ProgressMessage:
        kind = ProgressKind.PRINT_META if job_id == self.meta_job_id else ProgressKind.PRINT
        return ProgressMessage(kind, line=line)

    def _emit(self, message: ProgressMessage) -> None:
        if self._progress is not None:
            self._progress.put_nowait(message)

    async def _finish(self) -> "JobMonitor":
        if self._progress is not None:
            self._progress.put_nowait(ProgressMessage(ProgressKind.COMPLETE))
            self._progress = None

        await asyncio.sleep(self.settle_delay)

        for job in self.jobs.values():
            if job.state is not JobState.FAILED:
                continue
            logs = [e for e in self.events if e.job_id == job.job_id]
            last_logs = logs[-LOG_CONTEXT_LINES:]
            log.error("%s - Last %d lines of logs:", job.failure_summary(), len(last_logs))
            for event in last_logs:
                log.error("%s", event)

        return self


def null_job_handle() -> JobHandle:
    """Return a JobHandle that is not connected to a JobMonitor."""
    return JobHandle.null()