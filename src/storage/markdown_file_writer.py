# src/storage/markdown_file_writer.py — v1
"""Single-file artifact writer: every review appended to one Markdown file."""

from __future__ import annotations

import logging
from pathlib import Path

from ai_pull_review.storage.base_output_writer import BaseOutputWriter
from ai_pull_review.storage.local_writer import replace_file

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n---\n\n"


class MarkdownFileWriter(BaseOutputWriter):
    """Collect review documents into one Markdown file.

    The file belongs to the writer instance: the first write replaces
    whatever a previous run left behind, later writes append a section.
    Writing the same name again replaces that section in place.
    """

    def __init__(self, output_file: str | Path) -> None:
        self._path = Path(output_file).expanduser()
        self._sections: dict[str, str] = {}

    @property
    def path(self) -> Path:
        return self._path

    @property
    def target(self) -> str:
        return str(self._path)

    async def write(self, name: str, document: str) -> None:
        self._sections[self.check_name(name)] = document.rstrip("\n") + "\n"
        replace_file(self._path, SECTION_SEPARATOR.join(self._sections.values()))
        logger.debug("Added %s to %s (%d sections)", name, self._path, len(self._sections))
