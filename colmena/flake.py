"""Nix flake utilities."""

from __future__ import annotations

import asyncio
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import BadOutput, IoError, from_returncode

_EXPERIMENTAL = ["--extra-experimental-features", "nix-command flakes"]


@dataclass(frozen=True)
class FlakeMetadata:
    """The output of ``nix flake metadata --json``."""

    resolved_url: str
    """The resolved URL of the flake."""
    url: str
    """The locked URL of the flake."""

    @classmethod
    def from_json(cls, data: str | bytes) -> "FlakeMetadata":
        """Parse the JSON metadata; raises BadOutput if it is malformed."""
        text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
        try:
            parsed: Any = json.loads(text)
        except json.JSONDecodeError:
            raise BadOutput(text) from None
        if not isinstance(parsed, dict):
            raise BadOutput(text)
        resolved_url = parsed.get("resolvedUrl")
        url = parsed.get("url")
        if not isinstance(resolved_url, str) or not isinstance(url, str):
            raise BadOutput(text)
        return cls(resolved_url=resolved_url, url=url)

    @classmethod
    async def resolve(cls, flake: str) -> "FlakeMetadata":
        """Resolve a flake reference by asking Nix for its metadata."""
        try:
            proc = await asyncio.create_subprocess_exec(
                "nix",
                "flake",
                "metadata",
                "--json",
                *_EXPERIMENTAL,
                flake,
                stdout=asyncio.subprocess.PIPE,
            )
            stdout, _ = await proc.communicate()
        except OSError as error:
            raise IoError(error) from error

        if proc.returncode != 0:
            raise from_returncode(proc.returncode)
        return cls.from_json(stdout)


class Flake:
    """A Nix flake."""

    def __init__(self, metadata: FlakeMetadata, local_dir: Path | None = None) -> None:
        self.metadata = metadata
        self._local_dir = local_dir

    @classmethod
    async def from_dir(cls, path: str | os.PathLike[str]) -> "Flake":
        """Create a flake from a local directory."""
        directory = Path(path)
        metadata = await FlakeMetadata.resolve(str(directory))
        return cls(metadata, directory)

    @classmethod
    async def from_uri(cls, uri: str) -> "Flake":
        """Create a flake from a flake URI."""
        metadata = await FlakeMetadata.resolve(uri)
        return cls(metadata)

    def uri(self) -> str:
        """The resolved URI."""
        return self.metadata.resolved_url

    def locked_uri(self) -> str:
        """The locked URI; not locked if the git workspace is dirty."""
        return self.metadata.url

    def local_dir(self) -> Path | None:
        """The directory the flake lives in, for local flakes."""
        return self._local_dir

    def __repr__(self) -> str:
        return f"Flake({self.uri()!r}, local_dir={self._local_dir!r})"


async def lock_flake_quiet(uri: str) -> None:
    """Lock the dependencies of a flake, discarding Nix's diagnostics."""
    try:
        proc = await asyncio.create_subprocess_exec(
            "nix",
            "flake",
            "lock",
            *_EXPERIMENTAL,
            uri,
            stderr=asyncio.subprocess.DEVNULL,
        )
        returncode = await proc.wait()
    except OSError as error:
        raise IoError(error) from error

    if returncode != 0:
        raise from_returncode(returncode)