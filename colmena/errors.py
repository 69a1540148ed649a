"""Error types raised throughout the package."""

from __future__ import annotations

from typing import Any


class ColmenaError(Exception):
    """Base class of every error reported by the deployment tool."""

    default_message = "Unknown error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class IoError(ColmenaError):
    """An I/O operation failed."""

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(f"I/O Error: {error}")


class BadOutput(ColmenaError):
    """Nix produced output that could not be understood."""

    def __init__(self, output: str) -> None:
        self.output = output
        super().__init__(f"Nix returned invalid response: {output}")


class ChildFailure(ColmenaError):
    """A child process exited with a non-zero code."""

    def __init__(self, exit_code: int) -> None:
        self.exit_code = exit_code
        super().__init__(f"Child process exited with error code: {exit_code}")


class ChildKilled(ColmenaError):
    """A child process was terminated by a signal."""

    def __init__(self, signal: int) -> None:
        self.signal = signal
        super().__init__(f"Child process was killed by signal {signal}")


class Unsupported(ColmenaError):
    default_message = "This operation is not supported"


class InvalidStorePath(ColmenaError):
    default_message = "Invalid Nix store path"


class ValidationError(ColmenaError):
    """Configuration values failed validation."""

    def __init__(self, errors: Any) -> None:
        self.errors = errors
        super().__init__("Validation error")


class AttributeEvaluationError(ColmenaError):
    default_message = "Some attributes failed to evaluate"


class KeyProcessingError(ColmenaError):
    """A secret key could not be processed."""

    def __init__(self, name: str, error: Any) -> None:
        self.name = name
        self.error = error
        super().__init__(f'Error processing key "{name}": {error}')


class NotADerivation(ColmenaError):
    """A store path was expected to be a derivation but is not."""

    def __init__(self, store_path: Any) -> None:
        self.store_path = store_path
        super().__init__(f"Store path {store_path!r} is not a derivation")


class InvalidProfile(ColmenaError):
    default_message = "Invalid NixOS system profile"


class ActiveProfileUnknown(ColmenaError):
    """The profile active on a node is not known locally."""

    def __init__(self, profile: Any) -> None:
        self.profile = profile
        super().__init__(f"Unknown active profile: {profile!r}")


class ActiveProfileUnexpected(ColmenaError):
    """The profile active on a node is not the expected one."""

    def __init__(self, profile: Any) -> None:
        self.profile = profile
        super().__init__(f"Unexpected active profile: {profile!r}")


class FailedToGetCurrentProfile(ColmenaError):
    default_message = "Could not determine current profile"


class NoFlakesSupport(ColmenaError):
    default_message = "Current Nix version does not support Flakes"


class NoTargetHost(ColmenaError):
    default_message = "Don't know how to connect to the node"


class EmptyNodeName(ColmenaError):
    default_message = "Node name cannot be empty"


class EmptyFilterRule(ColmenaError):
    default_message = "Filter rule cannot be empty"


class DeploymentAlreadyExecuted(ColmenaError):
    default_message = "Deployment already executed"


class UnknownError(ColmenaError):
    """An error with only a free-form message."""

    def __init__(self, message: str) -> None:
        self.text = message
        super().__init__(f"Unknown error: {message}")


class ExecError(ColmenaError):
    """A command failed on one or more hosts."""

    def __init__(self, n_hosts: int) -> None:
        self.n_hosts = n_hosts
        super().__init__(f"Exec failed on {n_hosts} hosts")


def from_returncode(returncode: int) -> ColmenaError:
    """Build the error for a child process' return code.

    Negative return codes mean the process was killed by that signal.
    """
    if returncode < 0:
        return ChildKilled(-returncode)
    return ChildFailure(returncode)


def unknown(error: BaseException) -> UnknownError:
    """Wrap an arbitrary exception as an unknown error."""
    return UnknownError(str(error))