"""Deployment options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EvaluatorType(Enum):
    """Which evaluator to use."""

    CHUNKED = "chunked"
    STREAMING = "streaming"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, s: str) -> "EvaluatorType":
        try:
            return cls(s)
        except ValueError:
            choices = ", ".join(e.value for e in cls)
            raise ValueError(f"invalid evaluator {s!r}, expected one of: {choices}") from None


@dataclass
class Options:
    """Options for a deployment."""

    substituters_push: bool = True
    """Whether to use binary caches when copying closures to remote hosts."""
    gzip: bool = True
    """Whether to use gzip when copying closures to remote hosts."""
    upload_keys: bool = True
    reboot: bool = False
    create_gc_roots: bool = False
    """Whether to create GC roots under the hive's context directory."""
    force_build_on_target: bool | None = None
    """Overrides the per-node setting to build on the nodes themselves."""
    force_replace_unknown_profiles: bool = False
    evaluator: EvaluatorType = EvaluatorType.CHUNKED

    def copy_options(self) -> dict[str, bool]:
        """Settings for copying closures to remote hosts."""
        return {"use_substitutes": self.substituters_push, "gzip": self.gzip}