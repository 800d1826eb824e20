"""
Utilities for handling output paths and titles.
"""

import os
from pathlib import Path

from pathvalidate import sanitize_filename

from echo360_dl.models.media import VideoJob


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def clean_title(page_title: str) -> str:
    """
    Turns a page title into a base file name. Echo360 titles are usually the
    uploaded file name, so any directory part and extension are removed.
    """
    name = os.path.splitext(os.path.basename(page_title.strip()))[0].strip()
    return name or "Untitled"


def output_filename(job: VideoJob, ext: str) -> str:
    """
    ``<title>.<ext>`` for a source with one video, ``<title> - Video <n>.<ext>``
    when the source has several.
    """
    title = sanitize_filename(job.title, platform="universal") or "Untitled"
    if job.is_part_of_multiple:
        title = f"{title} - Video {job.sequence_number}"
    return f"{title}.{ext}"
