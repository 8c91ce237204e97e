# src/storage/local_writer.py — v5
"""Local directory artifact writer: one Markdown file per analyzed file."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ai_pull_review.storage.base_output_writer import BaseOutputWriter

logger = logging.getLogger(__name__)


def replace_file(target: Path, text: str) -> None:
    """Write text to a temporary sibling and move it over target."""
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(f".{target.name}.tmp")
    tmp.write_text(text, encoding="utf-8")
    os.replace(tmp, target)


class LocalWriter(BaseOutputWriter):
    """Write review documents into one output directory.

    The directory is created on first write. Each document is written to a
    temporary sibling and moved into place, so readers never see a partial
    review.
    """

    def __init__(self, output_dir: str | Path) -> None:
        self._root = Path(output_dir).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def target(self) -> str:
        return f"{self._root}/"

    async def write(self, name: str, document: str) -> None:
        target = self._root / self.check_name(name)
        replace_file(target, document)
        logger.debug("Wrote %d chars to %s", len(document), target)
