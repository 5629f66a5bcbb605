"""
Helper utility functions for the tubechat application.
"""

import os
import json
import re
from typing import Any, Optional
from pathlib import Path

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

VIDEO_URL_PATTERNS = [
    re.compile(r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/\s]{11})", re.IGNORECASE),
    re.compile(r"(?:youtube\.com/shorts/)([^\"&?/\s]{11})", re.IGNORECASE),
]


def is_valid_video_id(video_id: str) -> bool:
    """Check whether a string has the shape of a YouTube video id."""
    return bool(video_id) and VIDEO_ID_RE.match(video_id) is not None


def extract_video_id(url_or_id: str) -> Optional[str]:
    """
    Extract the video id from a YouTube URL.

    Plain video ids are returned as-is.

    Args:
        url_or_id: Standard, short, embed or shorts URL, or a bare id

    Returns:
        The 11 character video id, or None if none can be found
    """
    url_or_id = url_or_id.strip()
    if is_valid_video_id(url_or_id):
        return url_or_id

    for pattern in VIDEO_URL_PATTERNS:
        match = pattern.search(url_or_id)
        if match:
            return match.group(1)
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def format_timestamp(seconds: float) -> str:
    """
    Format seconds as MM:SS.

    Args:
        seconds: Offset into the video

    Returns:
        Zero padded minutes and seconds
    """
    minutes = int(seconds // 60)
    remaining_seconds = int(seconds % 60)
    return f"{minutes:02d}:{remaining_seconds:02d}"


def save_json(data: Any, filepath: Path, pretty: bool = False) -> None:
    """
    Save data to a JSON file atomically.

    The data is written next to the target and moved into place, so readers
    never observe a partially written file.

    Args:
        data: Data to save
        filepath: Path to save the file
        pretty: Whether to format the JSON for readability
    """
    filepath = Path(filepath)
    tmp_path = filepath.with_name(f".{filepath.name}.tmp")
    with open(tmp_path, 'w', encoding='utf-8') as f:
        if pretty:
            json.dump(data, f, indent=2, ensure_ascii=False)
        else:
            json.dump(data, f, ensure_ascii=False)
    os.replace(tmp_path, filepath)


def load_json(filepath: Path) -> Any:
    """
    Load data from a JSON file.

    Args:
        filepath: Path to the JSON file

    Returns:
        Loaded JSON data
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        return json.load(f)
