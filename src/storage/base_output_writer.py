# src/storage/base_output_writer.py — v4
"""Abstract artifact writer interface.

Artifacts are addressed by a bare file name (see storage.layout), never by
a nested path. Backends decide whether each name becomes its own file or a
section of one combined document.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class InvalidArtifactName(ValueError):
    """Raised when an artifact name is empty or contains a path separator."""


class BaseOutputWriter(ABC):
    """Unified interface for review artifact backends."""

    @abstractmethod
    async def write(self, name: str, document: str) -> None:
        """Store a document under name, replacing any previous version."""

    @property
    @abstractmethod
    def target(self) -> str:
        """Where artifacts end up, for log messages."""

    @staticmethod
    def check_name(name: str) -> str:
        """Validate a flat artifact name.

        Raises:
            InvalidArtifactName: On empty names, separators or dot segments.
        """
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise InvalidArtifactName(f"Invalid artifact name: {name!r}")
        return name
