"""Job states, event messages and their human-readable descriptions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from itertools import zip_longest
from typing import Iterable

_ROUGH_LIMIT = 40
_OTHER_TEXT = ", and XX other nodes"
_SOME_NODES = "some node(s)"


def new_job_id() -> uuid.UUID:
    """Return a fresh, opaque job identifier."""
    return uuid.uuid4()


class JobState(Enum):
    """The state of a job."""

    WAITING = "Waiting"
    """Waiting to begin; no progress bar is shown."""
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"

    def is_final(self) -> bool:
        """Whether the job can no longer change state."""
        return self in (JobState.SUCCEEDED, JobState.FAILED)


class JobType(Enum):
    """The type of a job."""

    META = "Meta"
    EVALUATE = "Evaluate"
    BUILD = "Build"
    UPLOAD_KEYS = "UploadKeys"
    PUSH = "Push"
    ACTIVATE = "Activate"
    EXECUTE = "Execute"
    CREATE_GC_ROOTS = "CreateGcRoots"
    REBOOT = "Reboot"


class EventKind(Enum):
    """What an event reports."""

    CREATION = "creation"
    SUCCESS_WITH_MESSAGE = "success"
    FAILURE = "failure"
    NOOP = "noop"
    NEW_STATE = "state"
    CHILD_STDOUT = "stdout"
    CHILD_STDERR = "stderr"
    MESSAGE = "message"
    SHUTDOWN_MONITOR = "shutdown"


@dataclass(frozen=True)
class Event:
    """An event sent from a job to the job monitor.

    ``text`` carries the line or message, ``state`` the new state of a
    NEW_STATE event, and ``job_type``/``nodes`` describe a CREATION event.
    """

    job_id: uuid.UUID
    kind: EventKind
    text: str = ""
    state: JobState | None = None
    job_type: JobType | None = None
    nodes: tuple[str, ...] = ()

    def privileged(self) -> bool:
        """Whether only the meta job may send this event."""
        return self.kind is EventKind.SHUTDOWN_MONITOR

    def __str__(self) -> str:
        kind = self.kind
        if kind is EventKind.CHILD_STDOUT:
            return f"  stdout) {self.text}"
        if kind is EventKind.CHILD_STDERR:
            return f"  stderr) {self.text}"
        if kind is EventKind.MESSAGE:
            return f" message) {self.text}"
        if kind is EventKind.CREATION:
            return " created)"
        if kind is EventKind.NEW_STATE:
            state = self.state.value if self.state is not None else ""
            return f"   state) {state}"
        if kind is EventKind.SUCCESS_WITH_MESSAGE:
            return f" success) {self.text}"
        if kind is EventKind.NOOP:
            return f"    noop) {self.text}"
        if kind is EventKind.FAILURE:
            return f" failure) {self.text}"
        return "shutdown)"


@dataclass
class JobStats:
    """Counts of jobs in each state."""

    waiting: int = 0
    running: int = 0
    succeeded: int = 0
    failed: int = 0

    def __str__(self) -> str:
        parts = [
            (self.running, "running"),
            (self.succeeded, "succeeded"),
            (self.failed, "failed"),
            (self.waiting, "waiting"),
        ]
        return ", ".join(f"{count} {word}" for count, word in parts if count)


@dataclass
class JobMetadata:
    """What the monitor knows about one job."""

    job_id: uuid.UUID
    job_type: JobType
    nodes: list[str] = field(default_factory=list)
    state: JobState = JobState.WAITING
    custom_message: str | None = None
    """For failed jobs the error; for succeeded ones an optional message."""

    def label(self) -> str:
        """A short label for the job's progress line."""
        if self.job_type is JobType.META:
            return ""
        if len(self.nodes) != 1:
            return "(...)"
        return self.nodes[0]

    def describe_state_transition(self) -> str | None:
        """Describe the move into the current state, or None while waiting."""
        if self.state is JobState.WAITING:
            return None

        node_list = describe_node_list(self.nodes) or _SOME_NODES
        message = self.custom_message if self.custom_message is not None else "No message"
        running = self.state is JobState.RUNNING
        succeeded = self.state is JobState.SUCCEEDED
        failed = self.state is JobState.FAILED
        job_type = self.job_type

        if job_type is JobType.META and succeeded:
            return "All done!"

        if job_type is JobType.EVALUATE:
            if running:
                return f"Evaluating {node_list}"
            if succeeded:
                return f"Evaluated {node_list}"
            return f"Evaluation failed: {message}"

        if job_type is JobType.BUILD:
            if running:
                return f"Building {node_list}"
            if succeeded:
                return f"Built {node_list}"
            return f"Build failed: {message}"

        if job_type is JobType.PUSH:
            if running:
                return "Pushing system closure"
            if succeeded:
                return "Pushed system closure"
            return f"Push failed: {message}"

        if job_type is JobType.UPLOAD_KEYS:
            if running:
                return "Uploading keys"
            if succeeded:
                return "Uploaded keys"
            return f"Key upload failed: {message}"

        if job_type is JobType.ACTIVATE:
            if running:
                return "Activating system profile"
            if failed:
                return f"Activation failed: {message}"

        if job_type is JobType.REBOOT:
            if running:
                return "Rebooting"
            if succeeded:
                return "Rebooted"
            return f"Reboot failed: {message}"

        if failed:
            return f"Failed: {message}"
        if succeeded:
            return "Succeeded"
        return ""

    def failure_summary(self) -> str:
        """Describe a failed job for the final summary."""
        node_list = describe_node_list(self.nodes) or _SOME_NODES
        summaries = {
            JobType.EVALUATE: f"Failed to evaluate {node_list}",
            JobType.BUILD: f"Failed to build {node_list}",
            JobType.PUSH: f"Failed to push system closure to {node_list}",
            JobType.UPLOAD_KEYS: f"Failed to upload keys to {node_list}",
            JobType.ACTIVATE: f"Failed to deploy to {node_list}",
            JobType.REBOOT: f"Failed to reboot {node_list}",
            JobType.META: "Failed to complete requested operation",
        }
        return summaries.get(self.job_type, f"Failed to complete job on {node_list}")


def describe_node_list(nodes: Iterable[str]) -> str | None:
    """Describe a list of nodes, e.g. "alpha, beta, and 5 other nodes".

    Returns None for an empty list.
    """
    nodes = list(nodes)
    total = len(nodes)
    if total == 0:
        return None

    s = ""
    for idx, (node, following) in enumerate(zip_longest(nodes, nodes[1:])):
        is_last = idx == total - 1
        if s:
            if is_last:
                s += ", and " if total > 2 else " and "
            else:
                s += ", "

        s += node

        if is_last:
            break

        remaining_text = _ROUGH_LIMIT - len(s)
        remaining_nodes = total - (idx + 1)

        # An overlong first name leaves no budget; it is then never truncated.
        if remaining_text >= 0 and len(following) + len(_OTHER_TEXT) >= remaining_text:
            if remaining_nodes == 1:
                s += f", and {following}"
            else:
                s += f", and {remaining_nodes} other nodes"
            break

    return s