"""Parallelism limits for deployments."""

from __future__ import annotations

import asyncio
import os
import re
from dataclasses import dataclass

EVAL_RESERVE_MB = 1024
"""Amount of RAM reserved for the system, in MB."""

EVAL_PER_HOST_MB = 512
"""Estimated amount of RAM needed to evaluate one host, in MB."""

_FALLBACK_LIMIT = 10


class ParallelismLimit:
    """Semaphores bounding concurrent evaluation and apply processes."""

    def __init__(self, evaluation: int = 1, apply: int = 10) -> None:
        self.evaluation_limit = evaluation
        self.apply_limit = apply
        self.evaluation = asyncio.Semaphore(evaluation)
        self.apply = asyncio.Semaphore(apply)

    def with_apply_limit(self, limit: int) -> "ParallelismLimit":
        """Return a new limit with a different concurrent apply limit."""
        return ParallelismLimit(evaluation=self.evaluation_limit, apply=limit)


@dataclass(frozen=True)
class EvaluationNodeLimit:
    """Limit of the number of nodes in each evaluation process.

    ``value`` is None for a heuristic based on available memory,
    0 for no limit, and a positive number for a manual limit.
    """

    value: int | None = None

    @classmethod
    def parse(cls, s: str) -> "EvaluationNodeLimit":
        if s == "auto":
            return cls()
        if not re.fullmatch(r"\+?[0-9]+", s):
            raise ValueError("The value must be a valid number or `auto`")
        return cls(int(s))

    def __str__(self) -> str:
        return "auto" if self.value is None else str(self.value)

    def get_limit(self) -> int | None:
        """Return the maximum number of hosts per evaluation, or None."""
        if self.value is None:
            available = available_memory_kb()
            if available is None:
                return _FALLBACK_LIMIT
            return heuristic_limit(available)
        if self.value == 0:
            return None
        return self.value


def heuristic_limit(available_kb: int) -> int:
    """Number of hosts that fit into the given amount of free memory."""
    mb = available_kb // 1024
    if mb >= EVAL_RESERVE_MB:
        mb -= EVAL_RESERVE_MB
    return max(mb // EVAL_PER_HOST_MB, 1)


def available_memory_kb() -> int | None:
    """Available system memory in KiB, or None if it cannot be determined."""
    try:
        with open("/proc/meminfo", encoding="ascii") as meminfo:
            for line in meminfo:
                if line.startswith("MemAvailable:"):
                    return int(line.split()[1])
    except (OSError, ValueError, IndexError):
        pass

    try:
        pages = os.sysconf("SC_AVPHYS_PAGES")
        page_size = os.sysconf("SC_PAGE_SIZE")
    except (AttributeError, ValueError, OSError):
        return None
    if pages < 0 or page_size < 0:
        return None
    return pages * page_size // 1024