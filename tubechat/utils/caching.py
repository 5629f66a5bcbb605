"""
Durable transcript stores for tubechat.

Every backend maps a video id to the JSON array of its transcript segments.
Reads that fail are logged and treated as a cache miss so the transcript is
recomputed; writes that fail raise CacheWriteError.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import redis
from sqlalchemy.exc import SQLAlchemyError

from tubechat.config import config
from tubechat.db import crud
from tubechat.db.database import SessionLocal, init_db
from tubechat.models.schemas import TranscriptSegment
from tubechat.utils.error_handling import CacheWriteError
from tubechat.utils.helpers import load_json, save_json
from tubechat.utils.logger import logging


def segments_to_records(segments: Sequence[TranscriptSegment]) -> List[Dict[str, Any]]:
    """Serialize segments to plain `{text, start, end}` dicts."""
    return [segment.model_dump() for segment in segments]


def records_to_segments(records: List[Dict[str, Any]]) -> List[TranscriptSegment]:
    """Rebuild segments from stored `{text, start, end}` dicts."""
    return [TranscriptSegment(**record) for record in records]


class TranscriptStore(ABC):
    """
    Contract for a durable transcript cache.
    Filesystem, Redis and SQL backends are interchangeable.
    """

    @abstractmethod
    def get(self, video_id: str) -> Optional[List[TranscriptSegment]]:
        """Return the stored transcript, or None if absent."""

    @abstractmethod
    def put(self, video_id: str, segments: Sequence[TranscriptSegment]) -> None:
        """Persist a transcript. Raises CacheWriteError on failure."""

    @abstractmethod
    def exists(self, video_id: str) -> bool:
        """Cheap presence check that never loads the transcript."""

    @abstractmethod
    def delete(self, video_id: str) -> bool:
        """Remove a transcript. Returns whether one was stored."""


class FileTranscriptStore(TranscriptStore):
    """One `<video_id>.json` file per transcript."""

    def __init__(self, cache_dir: Optional[Path] = None):
        self.cache_dir = Path(cache_dir or config.CACHE_DIR)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, video_id: str) -> Path:
        return self.cache_dir / f"{video_id}.json"

    def get(self, video_id: str) -> Optional[List[TranscriptSegment]]:
        path = self._path(video_id)
        if not path.is_file():
            return None
        try:
            return records_to_segments(load_json(path))
        except (OSError, ValueError, TypeError) as e:
            logging.error(f"Unreadable cached transcript {path}: {e}")
            return None

    def put(self, video_id: str, segments: Sequence[TranscriptSegment]) -> None:
        try:
            save_json(segments_to_records(segments), self._path(video_id))
        except (OSError, TypeError, ValueError) as e:
            raise CacheWriteError(video_id, str(e)) from e

    def exists(self, video_id: str) -> bool:
        return self._path(video_id).is_file()

    def delete(self, video_id: str) -> bool:
        path = self._path(video_id)
        if not path.exists():
            return False
        path.unlink()
        return True


class RedisTranscriptStore(TranscriptStore):
    """Transcripts under `transcript:<video_id>` keys, without expiry."""

    def __init__(self, redis_url: Optional[str] = None, client=None, prefix: str = "transcript"):
        if client is None:
            client = redis.from_url(redis_url or config.REDIS_URL)
        self.client = client
        self.prefix = prefix

    def _key(self, video_id: str) -> str:
        return f"{self.prefix}:{video_id}"

    def get(self, video_id: str) -> Optional[List[TranscriptSegment]]:
        try:
            value = self.client.get(self._key(video_id))
        except redis.RedisError as e:
            logging.error(f"Redis error in get for {video_id}: {e}")
            return None
        if not value:
            return None
        try:
            return records_to_segments(json.loads(value))
        except (ValueError, TypeError) as e:
            logging.error(f"Unreadable cached transcript for {video_id}: {e}")
            return None

    def put(self, video_id: str, segments: Sequence[TranscriptSegment]) -> None:
        try:
            self.client.set(self._key(video_id), json.dumps(segments_to_records(segments)))
        except redis.RedisError as e:
            raise CacheWriteError(video_id, str(e)) from e

    def exists(self, video_id: str) -> bool:
        try:
            return bool(self.client.exists(self._key(video_id)))
        except redis.RedisError as e:
            logging.error(f"Redis error in exists for {video_id}: {e}")
            return False

    def delete(self, video_id: str) -> bool:
        return bool(self.client.delete(self._key(video_id)))


class SqlTranscriptStore(TranscriptStore):
    """Transcripts in the `transcripts` table."""

    def __init__(self, session_factory=None):
        if session_factory is None:
            init_db()
            session_factory = SessionLocal
        self.session_factory = session_factory

    def get(self, video_id: str) -> Optional[List[TranscriptSegment]]:
        with self.session_factory() as db:
            records = crud.get_transcript_segments(db, video_id)
        if records is None:
            return None
        return records_to_segments(records)

    def put(self, video_id: str, segments: Sequence[TranscriptSegment]) -> None:
        try:
            with self.session_factory() as db:
                crud.save_transcript(db, video_id, segments_to_records(segments))
        except SQLAlchemyError as e:
            raise CacheWriteError(video_id, str(e)) from e

    def exists(self, video_id: str) -> bool:
        with self.session_factory() as db:
            return crud.transcript_exists(db, video_id)

    def delete(self, video_id: str) -> bool:
        with self.session_factory() as db:
            return crud.delete_transcript(db, video_id)


def get_transcript_store(kind: Optional[str] = None) -> TranscriptStore:
    """
    Build the configured transcript store.

    Args:
        kind: "file", "redis" or "sql" (defaults to config.TRANSCRIPT_STORE)

    Returns:
        A TranscriptStore instance
    """
    kind = (kind or config.TRANSCRIPT_STORE).lower()
    if kind == "redis":
        store = RedisTranscriptStore()
        logging.info("Redis transcript store configured")
        return store
    if kind == "sql":
        store = SqlTranscriptStore()
        logging.info("SQL transcript store configured")
        return store
    if kind != "file":
        logging.warning(f"Unknown transcript store '{kind}', using the file store")
    return FileTranscriptStore()
