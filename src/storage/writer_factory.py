# src/storage/writer_factory.py — v1
"""Factory: instantiate the artifact writer for an output path.

A path ending in ".md" is one combined Markdown file; any other path is a
directory receiving one Markdown file per analyzed file.
"""

from __future__ import annotations

from pathlib import Path

from ai_pull_review.storage.base_output_writer import BaseOutputWriter
from ai_pull_review.storage.layout import RESULT_SUFFIX


def create_writer(output_path: str | Path | None) -> BaseOutputWriter | None:
    """Create the writer matching output_path.

    Returns:
        BaseOutputWriter instance, or None when no output path is configured.
    """
    if output_path is None or str(output_path) == "":
        return None

    path = Path(output_path)
    if path.suffix.lower() == RESULT_SUFFIX and not path.is_dir():
        from ai_pull_review.storage.markdown_file_writer import MarkdownFileWriter
        return MarkdownFileWriter(path)

    from ai_pull_review.storage.local_writer import LocalWriter
    return LocalWriter(path)
